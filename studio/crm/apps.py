from django.apps import AppConfig


class CrmConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'studio.crm'
    label = 'crm'
    verbose_name = 'CRM'

    def ready(self):
        """Import signals when app is ready"""
        import studio.crm.cache  # noqa: F401  # Registry cache invalidation signals
