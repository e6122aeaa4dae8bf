# Generated manually
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


def registry_fields():
    return [
        ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
        ('value', models.CharField(max_length=50, unique=True)),
        ('label_en', models.CharField(max_length=100)),
        ('label_vi', models.CharField(max_length=100)),
        ('order', models.IntegerField(default=0)),
        ('active', models.BooleanField(default=True)),
        ('created_at', models.DateTimeField(auto_now_add=True)),
        ('updated_at', models.DateTimeField(auto_now=True)),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('content', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='PipelineStage',
            fields=registry_fields(),
            options={
                'db_table': 'crm_pipeline_stages',
                'ordering': ['order', 'id'],
                'abstract': False,
            },
        ),
        migrations.CreateModel(
            name='CustomerTier',
            fields=registry_fields(),
            options={
                'db_table': 'crm_customer_tiers',
                'ordering': ['order', 'id'],
                'abstract': False,
            },
        ),
        migrations.CreateModel(
            name='CrmStatus',
            fields=registry_fields(),
            options={
                'db_table': 'crm_statuses',
                'verbose_name_plural': 'CRM statuses',
                'ordering': ['order', 'id'],
                'abstract': False,
            },
        ),
        migrations.CreateModel(
            name='Client',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('first_name', models.CharField(max_length=100)),
                ('last_name', models.CharField(max_length=100)),
                ('email', models.EmailField(db_index=True, max_length=254)),
                ('phone', models.CharField(blank=True, max_length=30)),
                ('company', models.CharField(blank=True, max_length=200)),
                ('address', models.TextField(blank=True)),
                ('date_of_birth', models.DateField(blank=True, null=True)),
                ('stage', models.CharField(db_index=True, default='lead', max_length=50)),
                ('tier', models.CharField(db_index=True, default='silver', max_length=50)),
                ('status', models.CharField(db_index=True, default='active', max_length=50)),
                ('total_spending', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('refund_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('commission', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('order_count', models.PositiveIntegerField(default=0)),
                ('referral_count', models.PositiveIntegerField(default=0)),
                ('referral_revenue', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('warranty_status', models.CharField(choices=[('none', 'None'), ('active', 'Active'), ('expired', 'Expired')], default='none', max_length=20)),
                ('warranty_expiry', models.DateTimeField(blank=True, null=True)),
                ('notes', models.TextField(blank=True)),
                ('tags', models.JSONField(blank=True, default=list)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('referred_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='referrals', to='crm.client')),
            ],
            options={
                'db_table': 'clients',
                'ordering': ['-created_at', '-id'],
                'constraints': [models.CheckConstraint(condition=models.Q(('referred_by', models.F('id')), _negated=True), name='client_not_self_referred')],
            },
        ),
        migrations.CreateModel(
            name='Inquiry',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('first_name', models.CharField(max_length=100)),
                ('last_name', models.CharField(max_length=100)),
                ('email', models.EmailField(max_length=254)),
                ('phone', models.CharField(blank=True, max_length=30)),
                ('project_type', models.CharField(choices=[('residential', 'Residential'), ('commercial', 'Commercial'), ('architecture', 'Architecture'), ('consultation', 'Consultation')], max_length=50)),
                ('budget', models.CharField(blank=True, choices=[('50k-100k', '$50k - $100k'), ('100k-250k', '$100k - $250k'), ('250k-500k', '$250k - $500k'), ('500k+', '$500k+')], max_length=50)),
                ('message', models.TextField()),
                ('status', models.CharField(choices=[('new', 'New'), ('reviewed', 'Reviewed'), ('contacted', 'Contacted'), ('converted', 'Converted')], db_index=True, default='new', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('client', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='inquiries', to='crm.client')),
            ],
            options={
                'db_table': 'inquiries',
                'verbose_name_plural': 'inquiries',
                'ordering': ['-created_at', '-id'],
            },
        ),
        migrations.CreateModel(
            name='Interaction',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('type', models.CharField(choices=[('visit', 'Visit'), ('meeting', 'Meeting'), ('site_survey', 'Site Survey'), ('design', 'Design'), ('acceptance', 'Acceptance'), ('call', 'Call'), ('email', 'Email')], max_length=30)),
                ('title', models.CharField(max_length=255)),
                ('description', models.TextField(blank=True)),
                ('date', models.DateTimeField()),
                ('duration', models.PositiveIntegerField(blank=True, help_text='Minutes', null=True)),
                ('location', models.CharField(blank=True, max_length=255)),
                ('assigned_to', models.CharField(blank=True, help_text='Staff member name', max_length=200)),
                ('outcome', models.TextField(blank=True)),
                ('next_action', models.TextField(blank=True)),
                ('next_action_date', models.DateTimeField(blank=True, null=True)),
                ('attachments', models.JSONField(blank=True, default=list)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('client', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='interactions', to='crm.client')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='crm_interactions', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'interactions',
                'ordering': ['-date', '-id'],
            },
        ),
        migrations.CreateModel(
            name='Deal',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(max_length=255)),
                ('value', models.DecimalField(decimal_places=2, max_digits=12)),
                ('stage', models.CharField(choices=[('proposal', 'Proposal'), ('negotiation', 'Negotiation'), ('contract', 'Contract'), ('delivery', 'Delivery'), ('completed', 'Completed'), ('lost', 'Lost')], db_index=True, default='proposal', max_length=20)),
                ('probability', models.PositiveSmallIntegerField(default=50, validators=[django.core.validators.MinValueValidator(0), django.core.validators.MaxValueValidator(100)])),
                ('expected_close_date', models.DateTimeField(blank=True, null=True)),
                ('actual_close_date', models.DateTimeField(blank=True, null=True)),
                ('description', models.TextField(blank=True)),
                ('terms', models.TextField(blank=True)),
                ('notes', models.TextField(blank=True)),
                ('lost_reason', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('assigned_to', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='assigned_deals', to=settings.AUTH_USER_MODEL)),
                ('client', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='deals', to='crm.client')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='created_deals', to=settings.AUTH_USER_MODEL)),
                ('project', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='deals', to='content.project')),
            ],
            options={
                'db_table': 'deals',
                'ordering': ['-created_at', '-id'],
            },
        ),
        migrations.CreateModel(
            name='Transaction',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(blank=True, max_length=255)),
                ('description', models.TextField(blank=True)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=12)),
                ('type', models.CharField(choices=[('payment', 'Payment'), ('refund', 'Refund'), ('commission', 'Commission')], max_length=20)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('completed', 'Completed'), ('cancelled', 'Cancelled')], db_index=True, default='completed', max_length=20)),
                ('payment_date', models.DateTimeField()),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('client', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='transactions', to='crm.client')),
            ],
            options={
                'db_table': 'transactions',
                'ordering': ['-payment_date', '-id'],
                'indexes': [models.Index(fields=['client', 'type', 'status'], name='transaction_rollup_idx')],
            },
        ),
    ]
