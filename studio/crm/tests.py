"""
Comprehensive test suite for the CRM module
Tests: registries, client validation, ledger rollups, referrals, tiers, deals, inquiries,
dashboard numbers, the maintenance commands, admin guards and the registry cache
"""
from decimal import Decimal
from io import StringIO

from django.core.cache import cache
from django.core.management import call_command
from django.db import IntegrityError, transaction
from django.test import Client as BrowserClient, TestCase, TransactionTestCase, override_settings
from rest_framework import status
from studio.core.test_utils import TestDataFactory, AuthenticatedAPIClient, ledger_total
from studio.core.exceptions import ValidationError
from studio.core.models import AuditLog
from studio.crm import services
from studio.crm.cache import get_registry_cache_key
from studio.crm.models import PipelineStage, CustomerTier, CrmStatus, Client, Inquiry, Transaction


class CRMTestCase(TestCase):
    """Authenticated admin client; registry cache cleared between tests"""

    def setUp(self):
        cache.clear()
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def pay(self, client, amount, txn_type='payment', txn_status='completed'):
        response = self.client.post('/api/transactions', {
            'client': client.pk,
            'amount': str(amount),
            'type': txn_type,
            'status': txn_status,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        return response.data


class RegistryAPITests(CRMTestCase):
    """Test pipeline stage / tier / status registries"""

    def test_create_and_list_first_by_order(self):
        """A new stage with the lowest order is listed first"""
        PipelineStage.objects.create(value='prospect', label_en='Prospect', label_vi='Đang tư vấn', order=1)
        response = self.client.post('/api/crm-pipeline-stages', {
            'value': 'lead', 'label_en': 'Lead', 'label_vi': 'Khách tiềm năng', 'order': 0, 'active': True,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        response = self.client.get('/api/crm-pipeline-stages')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([entry['value'] for entry in response.data], ['lead', 'prospect'])

    def test_equal_order_keeps_insertion_order(self):
        for value in ['gold', 'silver', 'vip']:
            CustomerTier.objects.create(value=value, label_en=value, label_vi=value, order=5)
        response = self.client.get('/api/crm-customer-tiers')
        self.assertEqual([entry['value'] for entry in response.data], ['gold', 'silver', 'vip'])

    def test_duplicate_value_is_409(self):
        CrmStatus.objects.create(value='active', label_en='Active', label_vi='Hoạt động')
        response = self.client.post('/api/crm-statuses', {
            'value': 'active', 'label_en': 'Active again', 'label_vi': 'x',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertIn("'active'", response.data['message'])
        self.assertEqual(CrmStatus.objects.count(), 1)

    def test_values_are_case_sensitive(self):
        CrmStatus.objects.create(value='active', label_en='Active', label_vi='Hoạt động')
        response = self.client.post('/api/crm-statuses', {
            'value': 'Active', 'label_en': 'Active', 'label_vi': 'x',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_rename_to_existing_value_is_409(self):
        PipelineStage.objects.create(value='lead', label_en='Lead', label_vi='x')
        stage = PipelineStage.objects.create(value='prospect', label_en='Prospect', label_vi='x')
        response = self.client.patch(f'/api/crm-pipeline-stages/{stage.pk}', {'value': 'lead'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_active_filter(self):
        PipelineStage.objects.create(value='lead', label_en='Lead', label_vi='x')
        PipelineStage.objects.create(value='old', label_en='Old', label_vi='x', active=False)
        response = self.client.get('/api/crm-pipeline-stages', {'active': 'true'})
        self.assertEqual([entry['value'] for entry in response.data], ['lead'])

    def test_list_reflects_updates_through_cache(self):
        stage = PipelineStage.objects.create(value='lead', label_en='Lead', label_vi='x')
        self.client.get('/api/crm-pipeline-stages')
        self.client.patch(f'/api/crm-pipeline-stages/{stage.pk}', {'label_en': 'New lead'}, format='json')
        response = self.client.get('/api/crm-pipeline-stages')
        self.assertEqual(response.data[0]['label_en'], 'New lead')

    def test_unknown_entry_is_404(self):
        response = self.client.get('/api/crm-customer-tiers/99999')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_registries_need_admin(self):
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.get('/api/crm-statuses')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class RegistryDeletePolicyTests(CRMTestCase):
    """Deleting a registry value that clients still hold"""

    def setUp(self):
        super().setUp()
        TestDataFactory.seed_registries()
        self.gold = CustomerTier.objects.get(value='gold')
        self.vip_client = TestDataFactory.create_client(first_name='Minh', tier='gold')

    def test_allow_policy_leaves_inert_value(self):
        response = self.client.delete(f'/api/crm-customer-tiers/{self.gold.pk}')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(CustomerTier.objects.filter(value='gold').exists())
        self.vip_client.refresh_from_db()
        self.assertEqual(self.vip_client.tier, 'gold')

        # Orphaned value stays editable as long as the tier itself is not touched
        response = self.client.patch(f'/api/clients/{self.vip_client.pk}', {'notes': 'Prefers walnut'},
                                     format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        response = self.client.patch(f'/api/clients/{self.vip_client.pk}', {'tier': 'gold'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_restrict_query_param_blocks_delete(self):
        response = self.client.delete(f'/api/crm-customer-tiers/{self.gold.pk}?restrict=true')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertTrue(CustomerTier.objects.filter(value='gold').exists())

    @override_settings(CRM_REGISTRY_DELETE_POLICY='restrict')
    def test_restrict_setting_blocks_delete_of_used_value(self):
        response = self.client.delete(f'/api/crm-customer-tiers/{self.gold.pk}')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

        platinum = CustomerTier.objects.get(value='platinum')
        response = self.client.delete(f'/api/crm-customer-tiers/{platinum.pk}')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)

    @override_settings(CRM_REGISTRY_DELETE_POLICY='restrict')
    def test_restrict_setting_blocks_rename_of_used_value(self):
        response = self.client.patch(f'/api/crm-customer-tiers/{self.gold.pk}', {'value': 'golden'},
                                     format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    @override_settings(CRM_REGISTRY_DELETE_POLICY='restrict')
    def test_restrict_false_param_overrides_setting(self):
        response = self.client.delete(f'/api/crm-customer-tiers/{self.gold.pk}?restrict=false')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)


class ClientAPITests(CRMTestCase):
    """Test client creation and registry validation"""

    def test_create_with_defaults(self):
        response = self.client.post('/api/clients', {
            'first_name': 'An', 'last_name': 'Tran', 'email': 'an@example.com',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['stage'], 'lead')
        self.assertEqual(response.data['tier'], 'silver')
        self.assertEqual(response.data['status'], 'active')
        self.assertEqual(response.data['total_spending'], '0.00')
        self.assertEqual(response.data['order_count'], 0)

    def test_rollups_cannot_be_written(self):
        response = self.client.post('/api/clients', {
            'first_name': 'An', 'last_name': 'Tran', 'email': 'an@example.com',
            'total_spending': '999999.00', 'order_count': 7,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        client = Client.objects.get(pk=response.data['id'])
        self.assertEqual(client.total_spending, Decimal('0.00'))
        self.assertEqual(client.order_count, 0)

    def test_missing_required_fields(self):
        response = self.client.post('/api/clients', {'first_name': 'An'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('email', response.data['errors'])

    def test_stage_checked_against_registry(self):
        TestDataFactory.seed_registries()
        response = self.client.post('/api/clients', {
            'first_name': 'An', 'last_name': 'Tran', 'email': 'an@example.com', 'stage': 'bogus',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('stage', response.data['errors'])

        response = self.client.post('/api/clients', {
            'first_name': 'An', 'last_name': 'Tran', 'email': 'an@example.com', 'stage': 'contract',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_inactive_registry_value_rejected(self):
        TestDataFactory.seed_registries()
        PipelineStage.objects.filter(value='aftercare').update(active=False)
        cache.clear()
        response = self.client.post('/api/clients', {
            'first_name': 'An', 'last_name': 'Tran', 'email': 'an@example.com', 'stage': 'aftercare',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_empty_registries_accept_any_stage_but_not_any_status(self):
        response = self.client.post('/api/clients', {
            'first_name': 'An', 'last_name': 'Tran', 'email': 'an@example.com', 'stage': 'site-visit',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        response = self.client.post('/api/clients', {
            'first_name': 'Binh', 'last_name': 'Le', 'email': 'binh@example.com', 'status': 'sleeping',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('status', response.data['errors'])

    def test_date_of_birth_accepts_datetime_string(self):
        response = self.client.post('/api/clients', {
            'first_name': 'An', 'last_name': 'Tran', 'email': 'an@example.com',
            'date_of_birth': '1990-04-12T00:00:00Z',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['date_of_birth'], '1990-04-12')

    def test_invalid_date_of_birth(self):
        response = self.client.post('/api/clients', {
            'first_name': 'An', 'last_name': 'Tran', 'email': 'an@example.com', 'date_of_birth': '12/04/1990',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_search_and_stage_filter(self):
        TestDataFactory.create_client(first_name='Hoa', company='Lotus Cafe', stage='contract')
        TestDataFactory.create_client(first_name='Khanh', stage='lead')
        response = self.client.get('/api/clients', {'search': 'lotus'})
        self.assertEqual([c['first_name'] for c in response.data], ['Hoa'])
        response = self.client.get('/api/clients', {'stage': 'lead'})
        self.assertEqual([c['first_name'] for c in response.data], ['Khanh'])

    def test_clients_are_not_deleted(self):
        client = TestDataFactory.create_client()
        response = self.client.delete(f'/api/clients/{client.pk}')
        self.assertEqual(response.status_code, status.HTTP_405_METHOD_NOT_ALLOWED)

    def test_unknown_client_is_404(self):
        response = self.client.get('/api/clients/99999')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['message'], 'Client not found')

    def test_update_is_audited(self):
        client = TestDataFactory.create_client()
        self.client.patch(f'/api/clients/{client.pk}', {'company': 'Moderno'}, format='json')
        log = AuditLog.objects.get(model_name='Client', action='update')
        self.assertEqual(log.changes['company']['new'], 'Moderno')


class TransactionRollupTests(CRMTestCase):
    """Client rollups always equal the completed ledger"""

    def setUp(self):
        super().setUp()
        self.customer = TestDataFactory.create_client(first_name='Lan')

    def assertRollupsMatchLedger(self, client):
        client.refresh_from_db()
        self.assertEqual(client.total_spending, ledger_total(client, 'payment'))
        self.assertEqual(client.refund_amount, ledger_total(client, 'refund'))
        self.assertEqual(client.commission, ledger_total(client, 'commission'))
        self.assertEqual(
            client.order_count,
            Transaction.objects.filter(client=client, type='payment', status='completed').count()
        )
        self.assertEqual(services.recompute_rollups(client, apply=False), {})

    def test_payment_moves_spending_and_order_count(self):
        """Recording a payment shows up on the client"""
        self.pay(self.customer, 1000)
        response = self.client.get(f'/api/clients/{self.customer.pk}')
        self.assertEqual(response.data['total_spending'], '1000.00')
        self.assertEqual(response.data['order_count'], 1)

    def test_each_type_feeds_its_own_rollup(self):
        self.pay(self.customer, 1000)
        self.pay(self.customer, 200, txn_type='refund')
        self.pay(self.customer, 50, txn_type='commission')
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.total_spending, Decimal('1000.00'))
        self.assertEqual(self.customer.refund_amount, Decimal('200.00'))
        self.assertEqual(self.customer.commission, Decimal('50.00'))
        self.assertEqual(self.customer.order_count, 1)
        self.assertRollupsMatchLedger(self.customer)

    def test_pending_payment_not_counted_until_completed(self):
        txn = self.pay(self.customer, 300, txn_status='pending')
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.total_spending, Decimal('0.00'))

        response = self.client.patch(f"/api/transactions/{txn['id']}", {'status': 'completed'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.total_spending, Decimal('300.00'))
        self.assertEqual(self.customer.order_count, 1)

    def test_update_amount_and_type(self):
        txn = self.pay(self.customer, 1000)
        self.client.patch(f"/api/transactions/{txn['id']}", {'amount': '750.00'}, format='json')
        self.assertRollupsMatchLedger(self.customer)
        self.client.patch(f"/api/transactions/{txn['id']}", {'type': 'refund'}, format='json')
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.total_spending, Decimal('0.00'))
        self.assertEqual(self.customer.refund_amount, Decimal('750.00'))
        self.assertEqual(self.customer.order_count, 0)
        self.assertRollupsMatchLedger(self.customer)

    def test_move_transaction_to_another_client(self):
        other = TestDataFactory.create_client(first_name='Quan')
        txn = self.pay(self.customer, 400)
        response = self.client.patch(f"/api/transactions/{txn['id']}", {'client': other.pk}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertRollupsMatchLedger(self.customer)
        self.assertRollupsMatchLedger(other)
        self.assertEqual(other.total_spending, Decimal('400.00'))

    def test_delete_reverses_effect(self):
        txn = self.pay(self.customer, 1000)
        self.pay(self.customer, 250)
        response = self.client.delete(f"/api/transactions/{txn['id']}")
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.total_spending, Decimal('250.00'))
        self.assertEqual(self.customer.order_count, 1)
        self.assertRollupsMatchLedger(self.customer)

    def test_non_positive_amount_rejected(self):
        for amount in ['0', '-5']:
            response = self.client.post('/api/transactions', {
                'client': self.customer.pk, 'amount': amount, 'type': 'payment',
            }, format='json')
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Transaction.objects.exists())

    def test_unknown_client_is_404(self):
        response = self.client.post('/api/transactions', {
            'client': 99999, 'amount': '10', 'type': 'payment',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_move_to_unknown_client_is_404_and_changes_nothing(self):
        txn = self.pay(self.customer, 400)
        response = self.client.patch(f"/api/transactions/{txn['id']}", {'client': 99999}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(Transaction.objects.get(pk=txn['id']).client_id, self.customer.pk)
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.total_spending, Decimal('400.00'))
        self.assertRollupsMatchLedger(self.customer)

    def test_title_is_optional_and_date_defaults(self):
        txn = self.pay(self.customer, 10)
        self.assertEqual(txn['title'], '')
        self.assertIsNotNone(txn['payment_date'])
        self.assertEqual(txn['status'], 'completed')

    def test_plain_date_accepted_for_payment_date(self):
        response = self.client.post('/api/transactions', {
            'client': self.customer.pk, 'amount': '10', 'type': 'payment', 'payment_date': '2024-03-01',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_recompute_repairs_drift(self):
        self.pay(self.customer, 500)
        Client.objects.filter(pk=self.customer.pk).update(total_spending=Decimal('1.00'), order_count=9)
        drift = services.recompute_rollups(self.customer)
        self.assertEqual(set(drift), {'total_spending', 'order_count'})
        self.assertRollupsMatchLedger(self.customer)


class ReferralTests(CRMTestCase):
    """Referral counting, revenue and cycle protection"""

    def create_client(self, first_name, referred_by=None):
        payload = {'first_name': first_name, 'last_name': 'Pham', 'email': f'{first_name.lower()}@example.com'}
        if referred_by is not None:
            payload['referred_by'] = referred_by.pk
        response = self.client.post('/api/clients', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        return Client.objects.get(pk=response.data['id'])

    def test_referral_count_follows_referrals(self):
        """Creating B referred by A counts once on A"""
        a = self.create_client('Anh')
        b = self.create_client('Bao', referred_by=a)
        a.refresh_from_db()
        self.assertEqual(a.referral_count, 1)
        self.assertEqual(b.referred_by_id, a.pk)

        response = self.client.get(f'/api/clients/{a.pk}/referrals')
        self.assertEqual([c['id'] for c in response.data], [b.pk])
        self.assertEqual(response.data[0]['referred_by_name'], a.full_name)

    def test_self_referral_rejected(self):
        b = self.create_client('Bao')
        response = self.client.patch(f'/api/clients/{b.pk}', {'referred_by': b.pk}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('referred_by', response.data['errors'])
        b.refresh_from_db()
        self.assertIsNone(b.referred_by_id)

    def test_self_referral_blocked_by_database(self):
        a = TestDataFactory.create_client()
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Client.objects.filter(pk=a.pk).update(referred_by=a)

    def test_cycle_rejected(self):
        a = self.create_client('Anh')
        b = self.create_client('Bao', referred_by=a)
        c = self.create_client('Chi', referred_by=b)
        response = self.client.patch(f'/api/clients/{a.pk}', {'referred_by': c.pk}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        a.refresh_from_db()
        self.assertIsNone(a.referred_by_id)

    @override_settings(CRM_REFERRAL_MAX_DEPTH=2)
    def test_chain_deeper_than_limit_rejected(self):
        a = TestDataFactory.create_client(first_name='A')
        b = TestDataFactory.create_client(first_name='B', referred_by=a)
        c = TestDataFactory.create_client(first_name='C', referred_by=b)
        d = TestDataFactory.create_client(first_name='D')
        response = self.client.patch(f'/api/clients/{d.pk}', {'referred_by': c.pk}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_unknown_referrer_is_404(self):
        a = self.create_client('Anh')
        response = self.client.patch(f'/api/clients/{a.pk}', {'referred_by': 99999}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_referral_revenue_tracks_completed_payments(self):
        a = self.create_client('Anh')
        b = self.create_client('Bao', referred_by=a)
        txn = self.pay(b, 800)
        self.pay(b, 100, txn_type='refund')
        a.refresh_from_db()
        self.assertEqual(a.referral_revenue, Decimal('800.00'))

        self.client.delete(f"/api/transactions/{txn['id']}")
        a.refresh_from_db()
        self.assertEqual(a.referral_revenue, Decimal('0.00'))

    def test_moving_referral_moves_count_and_revenue(self):
        a = self.create_client('Anh')
        c = self.create_client('Chi')
        b = self.create_client('Bao', referred_by=a)
        self.pay(b, 600)

        response = self.client.patch(f'/api/clients/{b.pk}', {'referred_by': c.pk}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        a.refresh_from_db()
        c.refresh_from_db()
        self.assertEqual((a.referral_count, a.referral_revenue), (0, Decimal('0.00')))
        self.assertEqual((c.referral_count, c.referral_revenue), (1, Decimal('600.00')))

        response = self.client.patch(f'/api/clients/{b.pk}', {'referred_by': None}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        c.refresh_from_db()
        self.assertEqual((c.referral_count, c.referral_revenue), (0, Decimal('0.00')))
        self.assertEqual(services.recompute_rollups(c, apply=False), {})


class TierTests(CRMTestCase):
    """Tier recalculation from completed spending"""

    def setUp(self):
        super().setUp()
        TestDataFactory.seed_registries()
        self.customer = TestDataFactory.create_client(first_name='Tuan')

    def test_upgrade_to_highest_met_threshold(self):
        self.pay(self.customer, Decimal('1200000000.00'))
        response = self.client.post(f'/api/clients/{self.customer.pk}/update-tier')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['tier'], 'vip')
        self.assertTrue(AuditLog.objects.filter(action='tier_change').exists())

    def test_inactive_tier_skipped(self):
        CustomerTier.objects.filter(value='vip').update(active=False)
        cache.clear()
        self.pay(self.customer, Decimal('1200000000.00'))
        response = self.client.post(f'/api/clients/{self.customer.pk}/update-tier')
        self.assertEqual(response.data['tier'], 'gold')

    def test_refunds_and_pending_do_not_count(self):
        self.pay(self.customer, Decimal('400000000.00'))
        self.pay(self.customer, Decimal('400000000.00'), txn_status='pending')
        self.pay(self.customer, Decimal('300000000.00'), txn_type='refund')
        response = self.client.post(f'/api/clients/{self.customer.pk}/update-tier')
        self.assertEqual(response.data['tier'], 'silver')


class DealTests(CRMTestCase):
    """Deal creation and stage moves"""

    def setUp(self):
        super().setUp()
        self.customer = TestDataFactory.create_client(first_name='Vy')
        self.deal = TestDataFactory.create_deal(self.customer, title='Penthouse fit-out')

    def move(self, stage, **extra):
        return self.client.post(f'/api/deals/{self.deal.pk}/stage', {'stage': stage, **extra}, format='json')

    def test_create_defaults(self):
        response = self.client.post('/api/deals', {
            'client': self.customer.pk, 'title': 'Office', 'value': '250000000.00',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['stage'], 'proposal')
        self.assertEqual(response.data['probability'], 50)
        self.assertEqual(response.data['client_name'], self.customer.full_name)

    def test_probability_bounds(self):
        response = self.client.post('/api/deals', {
            'client': self.customer.pk, 'title': 'Office', 'value': '10', 'probability': 101,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_any_stage_to_any_stage(self):
        self.assertEqual(self.move('delivery').status_code, status.HTTP_200_OK)
        self.assertEqual(self.move('proposal').status_code, status.HTTP_200_OK)
        self.deal.refresh_from_db()
        self.assertEqual(self.deal.stage, 'proposal')

    def test_lost_requires_reason(self):
        response = self.move('lost')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('lost_reason', response.data['errors'])

        response = self.move('lost', lost_reason='Budget cut')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['lost_reason'], 'Budget cut')

    def test_close_date_only_on_terminal_stages(self):
        response = self.move('contract', actual_close_date='2024-06-01')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.move('completed')
        self.assertIsNone(response.data['actual_close_date'])

        response = self.move('completed', actual_close_date='2024-06-01')
        self.assertIsNotNone(response.data['actual_close_date'])

    def test_reopening_clears_close_date_and_reason(self):
        self.move('lost', lost_reason='Chose another studio', actual_close_date='2024-06-01')
        response = self.move('negotiation')
        self.assertEqual(response.data['lost_reason'], '')
        self.assertIsNone(response.data['actual_close_date'])

    def test_patch_stage_goes_through_rules(self):
        response = self.client.patch(f'/api/deals/{self.deal.pk}', {'stage': 'lost'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.deal.refresh_from_db()
        self.assertEqual(self.deal.stage, 'proposal')

    def test_stage_change_is_audited(self):
        self.move('contract')
        log = AuditLog.objects.get(action='stage_change')
        self.assertEqual(log.changes['stage'], {'old': 'proposal', 'new': 'contract'})


class InquiryTests(CRMTestCase):
    """Public contact form and triage"""

    def setUp(self):
        super().setUp()
        self.public = AuthenticatedAPIClient()
        self.payload = {
            'first_name': 'Mai', 'last_name': 'Do', 'email': 'mai@example.com',
            'project_type': 'residential', 'budget': '100k-250k',
            'message': 'We would like to redesign our apartment.',
        }

    def test_public_submission_creates_lead_client(self):
        response = self.public.post('/api/inquiries', self.payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        inquiry = Inquiry.objects.get()
        self.assertEqual(inquiry.status, 'new')
        self.assertEqual(inquiry.client.email, 'mai@example.com')
        self.assertEqual(inquiry.client.stage, 'lead')

    def test_submission_links_existing_client_by_email(self):
        existing = TestDataFactory.create_client(first_name='Mai', email='Mai@Example.com')
        response = self.public.post('/api/inquiries', self.payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Inquiry.objects.get().client, existing)
        self.assertEqual(Client.objects.count(), 1)

    def test_invalid_project_type_creates_nothing(self):
        response = self.public.post('/api/inquiries', {**self.payload, 'project_type': 'spaceship'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('project_type', response.data['errors'])
        self.assertFalse(Inquiry.objects.exists())
        self.assertFalse(Client.objects.exists())

    def test_short_message_rejected(self):
        response = self.public.post('/api/inquiries', {**self.payload, 'message': 'Hi'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_public_cannot_set_status(self):
        response = self.public.post('/api/inquiries', {**self.payload, 'status': 'converted'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Inquiry.objects.get().status, 'new')

    def test_listing_requires_admin(self):
        response = self.public.get('/api/inquiries')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        response = self.client.get('/api/inquiries', {'status': 'new'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_admin_triage_sets_any_status(self):
        inquiry = Inquiry.objects.create(
            first_name='Ha', last_name='Le', email='ha@example.com', project_type='consultation',
            message='Looking for a consultation.', status='converted',
        )
        for new_status in ['contacted', 'new', 'reviewed']:
            response = self.client.put(f'/api/inquiries/{inquiry.pk}', {'status': new_status}, format='json')
            self.assertEqual(response.status_code, status.HTTP_200_OK)
            inquiry.refresh_from_db()
            self.assertEqual(inquiry.status, new_status)

    def test_triage_rejects_unknown_status(self):
        inquiry = Inquiry.objects.create(
            first_name='Ha', last_name='Le', email='ha@example.com', project_type='consultation',
            message='Looking for a consultation.',
        )
        response = self.client.put(f'/api/inquiries/{inquiry.pk}', {'status': 'archived'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('status', response.data['errors'])

    def test_triage_requires_admin(self):
        inquiry = Inquiry.objects.create(
            first_name='Ha', last_name='Le', email='ha@example.com', project_type='consultation',
            message='Looking for a consultation.',
        )
        response = self.public.put(f'/api/inquiries/{inquiry.pk}', {'status': 'reviewed'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_convert_links_client(self):
        inquiry = Inquiry.objects.create(
            first_name='Son', last_name='Vu', email='son@example.com', project_type='commercial',
            message='Need a showroom design.',
        )
        response = self.client.post(f'/api/inquiries/{inquiry.pk}/convert')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'converted')
        inquiry.refresh_from_db()
        self.assertEqual(inquiry.client.email, 'son@example.com')


class InteractionTests(CRMTestCase):
    def test_log_interaction_with_plain_date(self):
        customer = TestDataFactory.create_client()
        response = self.client.post('/api/interactions', {
            'client': customer.pk, 'type': 'site_survey', 'title': 'Measure living room', 'date': '2024-05-02',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['created_by'], self.admin.pk)

        response = self.client.get('/api/interactions', {'client': customer.pk})
        self.assertEqual(len(response.data), 1)

    def test_unknown_client_is_404(self):
        response = self.client.post('/api/interactions', {
            'client': 99999, 'type': 'call', 'title': 'Call', 'date': '2024-05-02',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_edit_and_move_to_another_client(self):
        customer = TestDataFactory.create_client(first_name='Tam')
        other = TestDataFactory.create_client(first_name='Vy')
        interaction = services.append_interaction(customer.pk, {
            'type': 'meeting', 'title': 'Kick-off', 'date': '2024-05-02T09:00:00',
        }, user=self.admin)

        response = self.client.patch(f'/api/interactions/{interaction.pk}', {
            'client': other.pk, 'outcome': 'Agreed on moodboard',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['client'], other.pk)
        interaction.refresh_from_db()
        self.assertEqual(interaction.client, other)
        self.assertEqual(interaction.outcome, 'Agreed on moodboard')
        self.assertEqual(interaction.created_by, self.admin)

    def test_move_to_unknown_client_is_404(self):
        interaction = services.append_interaction(TestDataFactory.create_client().pk, {
            'type': 'call', 'title': 'Follow up', 'date': '2024-05-02',
        })
        response = self.client.patch(f'/api/interactions/{interaction.pk}', {'client': 99999}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_delete(self):
        interaction = services.append_interaction(TestDataFactory.create_client().pk, {
            'type': 'email', 'title': 'Quote sent', 'date': '2024-05-02',
        })
        response = self.client.delete(f'/api/interactions/{interaction.pk}')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        response = self.client.get(f'/api/interactions/{interaction.pk}')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class DashboardTests(CRMTestCase):
    def test_stats(self):
        TestDataFactory.create_project()
        a = TestDataFactory.create_client(first_name='Ha')
        TestDataFactory.create_client(first_name='Ly', status='archived')
        self.pay(a, 1000)
        self.pay(a, 500, txn_status='pending')
        self.pay(a, 100, txn_type='refund')
        TestDataFactory.create_deal(a, value=Decimal('300.00'))
        TestDataFactory.create_deal(a, value=Decimal('900.00'), stage='completed')
        Inquiry.objects.create(first_name='X', last_name='Y', email='x@example.com',
                               project_type='residential', message='Hello there studio')

        response = self.client.get('/api/dashboard/stats')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_projects'], 1)
        self.assertEqual(response.data['active_clients'], 1)
        self.assertEqual(response.data['new_inquiries'], 1)
        self.assertEqual(response.data['revenue'], Decimal('1000.00'))
        self.assertEqual(response.data['refunds'], Decimal('100.00'))
        self.assertEqual(response.data['open_deals'], 1)
        self.assertEqual(response.data['pipeline_value'], Decimal('300.00'))


class ManagementCommandTests(CRMTestCase):
    def test_seed_is_idempotent(self):
        call_command('seed_crm_registries', stdout=StringIO())
        call_command('seed_crm_registries', stdout=StringIO())
        self.assertEqual(PipelineStage.objects.count(), 5)
        self.assertEqual(CustomerTier.objects.count(), 4)
        self.assertEqual(CrmStatus.objects.count(), 3)
        self.assertEqual(PipelineStage.objects.first().value, 'lead')

    def test_repair_rollups_dry_run_then_apply(self):
        customer = TestDataFactory.create_client()
        self.pay(customer, 700)
        Client.objects.filter(pk=customer.pk).update(total_spending=Decimal('0.00'))

        out = StringIO()
        call_command('repair_client_rollups', '--dry-run', stdout=out)
        customer.refresh_from_db()
        self.assertEqual(customer.total_spending, Decimal('0.00'))
        self.assertIn('total_spending', out.getvalue())

        call_command('repair_client_rollups', stdout=StringIO())
        customer.refresh_from_db()
        self.assertEqual(customer.total_spending, Decimal('700.00'))


class ClientAdminTests(TestCase):
    """The Django admin cannot move referrals or delete clients behind the rollups' back"""

    def setUp(self):
        self.superuser = TestDataFactory.create_user(is_staff=True, is_superuser=True)
        self.browser = BrowserClient()
        self.browser.force_login(self.superuser)
        self.referrer = TestDataFactory.create_client(first_name='An', email='an@test.com')
        self.referred = TestDataFactory.create_client(first_name='Binh')
        services.set_referred_by(self.referred, self.referrer)

    def change_form_data(self, client, **overrides):
        data = {
            'first_name': client.first_name, 'last_name': client.last_name, 'email': client.email,
            'phone': client.phone, 'company': '', 'address': '', 'date_of_birth': '',
            'stage': client.stage, 'tier': client.tier, 'status': client.status,
            'warranty_status': client.warranty_status, 'warranty_expiry_0': '', 'warranty_expiry_1': '',
            'notes': '', 'tags': '[]', '_save': 'Save',
        }
        data.update(overrides)
        return data

    def test_change_form_cannot_create_referral_cycle(self):
        response = self.browser.post(
            f'/admin/crm/client/{self.referrer.pk}/change/',
            self.change_form_data(self.referrer, referred_by=self.referred.pk, notes='Met at the fair'),
        )
        self.assertEqual(response.status_code, 302)

        self.referrer.refresh_from_db()
        self.assertEqual(self.referrer.notes, 'Met at the fair')
        self.assertIsNone(self.referrer.referred_by_id)
        self.assertEqual(self.referrer.referral_count, 1)
        self.assertEqual(services.recompute_rollups(self.referrer, apply=False), {})

    def test_clients_cannot_be_deleted(self):
        response = self.browser.post(f'/admin/crm/client/{self.referred.pk}/delete/', {'post': 'yes'})
        self.assertEqual(response.status_code, 403)
        self.assertTrue(Client.objects.filter(pk=self.referred.pk).exists())
        self.referrer.refresh_from_db()
        self.assertEqual(self.referrer.referral_count, 1)


class RegistryAdminTests(TestCase):
    """Registry values are only renamed or removed under the configured policy"""

    def setUp(self):
        cache.clear()
        self.superuser = TestDataFactory.create_user(is_staff=True, is_superuser=True)
        self.browser = BrowserClient()
        self.browser.force_login(self.superuser)
        TestDataFactory.seed_registries()
        self.gold = CustomerTier.objects.get(value='gold')
        TestDataFactory.create_client(tier='gold')

    def test_value_is_read_only_on_change(self):
        response = self.browser.post(f'/admin/crm/customertier/{self.gold.pk}/change/', {
            'value': 'golden', 'label_en': 'Gold member', 'label_vi': 'Vang', 'order': 1, 'active': 'on',
            '_save': 'Save',
        })
        self.assertEqual(response.status_code, 302)
        self.gold.refresh_from_db()
        self.assertEqual(self.gold.value, 'gold')
        self.assertEqual(self.gold.label_en, 'Gold member')

    @override_settings(CRM_REGISTRY_DELETE_POLICY='restrict')
    def test_restrict_policy_blocks_admin_delete_of_used_value(self):
        response = self.browser.post(f'/admin/crm/customertier/{self.gold.pk}/delete/', {'post': 'yes'})
        self.assertEqual(response.status_code, 403)
        self.assertTrue(CustomerTier.objects.filter(pk=self.gold.pk).exists())

        platinum = CustomerTier.objects.get(value='platinum')
        response = self.browser.post(f'/admin/crm/customertier/{platinum.pk}/delete/', {'post': 'yes'})
        self.assertEqual(response.status_code, 302)
        self.assertFalse(CustomerTier.objects.filter(pk=platinum.pk).exists())


class RegistryLockTests(CRMTestCase):
    def test_client_write_fails_when_registry_row_is_gone(self):
        TestDataFactory.seed_registries()
        with self.assertRaises(ValidationError):
            services._lock_registry_values([PipelineStage], {'stage': 'removed'})
        services._lock_registry_values([PipelineStage], {'stage': 'prospect'})

    def test_empty_registry_needs_no_row(self):
        services._lock_registry_values([PipelineStage], {'stage': 'anything'})


class RegistryRollbackTests(CRMTestCase):
    def test_rolled_back_entry_is_not_accepted(self):
        PipelineStage.objects.create(value='lead', label_en='Lead', label_vi='x')
        with self.assertRaises(RuntimeError):
            with transaction.atomic():
                services.create_entry(PipelineStage, {'value': 'ghost', 'label_en': 'Ghost', 'label_vi': 'x'})
                self.assertIn('ghost', [entry['value'] for entry in services.list_entries(PipelineStage)])
                raise RuntimeError('roll back')

        self.assertIsNone(cache.get(get_registry_cache_key(PipelineStage)))
        self.assertEqual([entry['value'] for entry in services.list_entries(PipelineStage)], ['lead'])
        with self.assertRaises(ValidationError):
            services.check_registry_value(PipelineStage, 'ghost')


class RegistryCacheTests(TransactionTestCase):
    """Cache behaviour outside of a transaction: filled on read, dropped after commit"""

    def setUp(self):
        cache.clear()
        PipelineStage.objects.create(value='lead', label_en='Lead', label_vi='x')

    def tearDown(self):
        cache.clear()

    def cached_values(self):
        entries = cache.get(get_registry_cache_key(PipelineStage))
        return None if entries is None else [entry['value'] for entry in entries]

    def test_read_fills_cache(self):
        services.list_entries(PipelineStage)
        self.assertEqual(self.cached_values(), ['lead'])

    def test_committed_write_drops_cache(self):
        services.list_entries(PipelineStage)
        services.create_entry(PipelineStage, {'value': 'prospect', 'label_en': 'Prospect', 'label_vi': 'x'})
        self.assertIsNone(self.cached_values())
        self.assertEqual([entry['value'] for entry in services.list_entries(PipelineStage)], ['lead', 'prospect'])

    def test_uncommitted_write_never_reaches_cache(self):
        services.list_entries(PipelineStage)
        with self.assertRaises(RuntimeError):
            with transaction.atomic():
                services.create_entry(PipelineStage, {'value': 'ghost', 'label_en': 'Ghost', 'label_vi': 'x'})
                services.list_entries(PipelineStage)
                raise RuntimeError('roll back')

        self.assertEqual(self.cached_values(), ['lead'])
        with self.assertRaises(ValidationError):
            services.check_registry_value(PipelineStage, 'ghost')
