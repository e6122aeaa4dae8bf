"""
Test suite for the core module
Tests: login/refresh/logout, current user, admin-only settings, error body shape
"""
from django.test import TestCase
from rest_framework import status
from studio.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from studio.core.models import Setting, AuditLog
from studio.core.utils import create_audit_log, parse_bool


class AuthAPITests(TestCase):
    """Test JWT auth endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_admin(username='studio_admin')
        self.client = AuthenticatedAPIClient()

    def test_login_returns_tokens_and_user(self):
        """Valid credentials return an access/refresh pair and the user"""
        response = self.client.post('/api/auth/login',
                                    {'username': 'studio_admin', 'password': 'testpass123'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)
        self.assertEqual(response.data['user']['username'], 'studio_admin')

    def test_login_wrong_password(self):
        """Wrong password is rejected with 401 and a message"""
        response = self.client.post('/api/auth/login',
                                    {'username': 'studio_admin', 'password': 'wrong'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertIn('message', response.data)

    def test_me_requires_authentication(self):
        """Anonymous /auth/me is a 401"""
        response = self.client.get('/api/auth/me')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_returns_current_user(self):
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/auth/me')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['id'], self.user.id)
        self.assertNotIn('password', response.data)

    def test_logout_blacklists_refresh_token(self):
        """A refresh token cannot be used after logout"""
        login = self.client.post('/api/auth/login',
                                 {'username': 'studio_admin', 'password': 'testpass123'}, format='json')
        refresh = login.data['refresh']
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {login.data['access']}")

        response = self.client.post('/api/auth/logout', {'refresh': refresh}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        self.client.logout()
        response = self.client.post('/api/auth/refresh', {'refresh': refresh}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_logout_with_invalid_refresh(self):
        self.client.authenticate_user(self.user)
        response = self.client.post('/api/auth/logout', {'refresh': 'not-a-token'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('refresh', response.data['errors'])


class SettingAPITests(TestCase):
    """Test site settings endpoints (admin only)"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.editor = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()

    def test_anonymous_gets_401(self):
        response = self.client.get('/api/settings')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_non_admin_gets_403(self):
        self.client.authenticate_user(self.editor)
        response = self.client.get('/api/settings')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertIn('message', response.data)

    def test_admin_creates_and_updates_setting(self):
        self.client.authenticate_user(self.admin)
        response = self.client.post('/api/settings', {'key': 'contact_email', 'value': 'hello@moderno.vn'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        response = self.client.patch(f"/api/settings/{response.data['id']}", {'value': 'studio@moderno.vn'},
                                     format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Setting.objects.get(key='contact_email').value, 'studio@moderno.vn')

    def test_missing_setting_is_404_with_message(self):
        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/settings/99999')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['message'], 'Not found.')

    def test_validation_error_shape(self):
        """Validation failures carry a message and per-field errors"""
        self.client.authenticate_user(self.admin)
        response = self.client.post('/api/settings', {'value': 'no key'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('key', response.data['errors'])
        self.assertTrue(response.data['message'].startswith('key:'))


class UtilsTests(TestCase):
    """Test core helpers"""

    def test_parse_bool(self):
        self.assertTrue(parse_bool('true'))
        self.assertTrue(parse_bool('1'))
        self.assertFalse(parse_bool('false'))
        self.assertIsNone(parse_bool(None))

    def test_create_audit_log_without_request(self):
        user = TestDataFactory.create_admin()
        log = create_audit_log(action='update', model_name='Client', object_id=5,
                               changes={'tier': 'gold'}, user=user, object_name='An Tran')
        self.assertIsNotNone(log)
        self.assertEqual(AuditLog.objects.get().user, user)
        self.assertIsNone(AuditLog.objects.get().ip_address)
