"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from studio.content.models import Project, Article
from studio.crm.models import PipelineStage, CustomerTier, CrmStatus, Client, Deal, Transaction
from decimal import Decimal
from django.utils import timezone
import random
import string

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(username=None, email=None, password='testpass123', is_staff=False,
                    is_superuser=False, role='editor'):
        """Create a test user (not an admin unless asked)"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        return User.objects.create_user(
            username=username,
            email=email,
            password=password,
            is_staff=is_staff,
            is_superuser=is_superuser,
            role=role,
        )

    @staticmethod
    def create_admin(username=None, password='testpass123'):
        """Create a studio admin"""
        return TestDataFactory.create_user(username=username, password=password, role='admin')

    @staticmethod
    def create_project(title=None, category='residential', featured=False):
        """Create a test portfolio project"""
        if not title:
            title = f'Project {TestDataFactory.random_string(6)}'
        return Project.objects.create(
            title=title,
            description=f'Test project {title}',
            category=category,
            featured=featured,
        )

    @staticmethod
    def create_article(title=None, slug=None, language='en', status='draft', tags=None):
        """Create a test article"""
        if not title:
            title = f'Article {TestDataFactory.random_string(6)}'
        if not slug:
            slug = f'article-{TestDataFactory.random_string(8).lower()}'
        return Article.objects.create(
            title=title,
            slug=slug,
            content=f'Content of {title}',
            language=language,
            status=status,
            tags=tags or [],
            published_at=timezone.now() if status == 'published' else None,
        )

    @staticmethod
    def seed_registries():
        """Create the default pipeline stages, tiers and statuses"""
        rows = {
            PipelineStage: ['lead', 'prospect', 'contract', 'delivery', 'aftercare'],
            CustomerTier: ['silver', 'gold', 'vip', 'platinum'],
            CrmStatus: ['active', 'inactive', 'archived'],
        }
        for model, values in rows.items():
            for order, value in enumerate(values):
                model.objects.create(value=value, label_en=value.title(), label_vi=value.title(), order=order)

    @staticmethod
    def create_client(first_name=None, last_name='Nguyen', email=None, referred_by=None, **extra):
        """Create a test client directly, bypassing registry validation"""
        if not first_name:
            first_name = f'Client{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{first_name.lower()}@test.com'
        return Client.objects.create(
            first_name=first_name,
            last_name=last_name,
            email=email,
            phone=f'09{random.randint(10000000, 99999999)}',
            referred_by=referred_by,
            **extra
        )

    @staticmethod
    def create_deal(client, title=None, value=None, stage='proposal'):
        """Create a test deal"""
        if not title:
            title = f'Deal {TestDataFactory.random_string(6)}'
        if value is None:
            value = Decimal('100000000.00')
        return Deal.objects.create(client=client, title=title, value=value, stage=stage)


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()


def ledger_total(client, txn_type):
    """Sum of completed transactions of one type for a client"""
    total = Decimal('0.00')
    for txn in Transaction.objects.filter(client=client, type=txn_type, status='completed'):
        total += txn.amount
    return total
