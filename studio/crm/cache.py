"""
Cache for the CRM registries (pipeline stages, customer tiers, statuses).

Registries are read on every client write (value validation) and by every
selector in the admin UI, but change rarely. The full ordered list of each
registry is cached under one key and dropped whenever a row is saved or
deleted. The drop waits for the surrounding transaction to commit so
readers never cache rows that may still roll back.
"""
import logging

from django.conf import settings
from django.core.cache import cache
from django.db import transaction
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver

from .models import PipelineStage, CustomerTier, CrmStatus

logger = logging.getLogger(__name__)

REGISTRY_KEY_PREFIX = 'crm_registry:'


def get_registry_cache_key(model) -> str:
    """Get cache key for the entry list of a registry model"""
    return f"{REGISTRY_KEY_PREFIX}{model._meta.db_table}"


def load_registry(model):
    """Ordered entry dicts of a registry, straight from the database"""
    from .serializers import registry_serializer_for
    serializer_class = registry_serializer_for(model)
    return [dict(item) for item in serializer_class(model.objects.all(), many=True).data]


def cache_registry(model):
    """Load a registry from the database, cache it and return the entry dicts"""
    entries = load_registry(model)
    cache.set(get_registry_cache_key(model), entries, settings.CRM_REGISTRY_CACHE_TTL)
    logger.debug(f"Cached {len(entries)} {model.__name__} entries")
    return entries


def get_cached_registry(model):
    """
    Ordered entry dicts of a registry, from cache when possible.

    Inside an atomic block the database is read directly: the block may hold
    uncommitted registry writes that must neither be cached nor hidden by it.
    """
    if transaction.get_connection().in_atomic_block:
        return load_registry(model)
    entries = cache.get(get_registry_cache_key(model))
    if entries is None:
        entries = cache_registry(model)
    else:
        logger.debug(f"Cache hit for registry: {model.__name__}")
    return entries


def invalidate_registry_cache(model):
    cache.delete(get_registry_cache_key(model))
    logger.debug(f"Invalidated cache for registry: {model.__name__}")


@receiver(post_save, sender=PipelineStage)
@receiver(post_save, sender=CustomerTier)
@receiver(post_save, sender=CrmStatus)
def registry_post_save(sender, instance, **kwargs):
    """Invalidate registry cache after the saving transaction commits"""
    transaction.on_commit(lambda: invalidate_registry_cache(sender))


@receiver(post_delete, sender=PipelineStage)
@receiver(post_delete, sender=CustomerTier)
@receiver(post_delete, sender=CrmStatus)
def registry_post_delete(sender, instance, **kwargs):
    """Invalidate registry cache after the deleting transaction commits"""
    transaction.on_commit(lambda: invalidate_registry_cache(sender))
