from decimal import Decimal

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


class RegistryEntry(models.Model):
    """
    One row of an admin-configurable lookup table.

    Clients store the ``value`` as plain text, so a registry only
    constrains what new writes may use. ``client_field`` names the Client
    column the registry parameterizes.
    """
    client_field = None

    value = models.CharField(max_length=50, unique=True)
    label_en = models.CharField(max_length=100)
    label_vi = models.CharField(max_length=100)
    order = models.IntegerField(default=0)
    active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.label_en} ({self.value})"

    class Meta:
        abstract = True
        ordering = ['order', 'id']


class PipelineStage(RegistryEntry):
    client_field = 'stage'

    class Meta(RegistryEntry.Meta):
        db_table = 'crm_pipeline_stages'


class CustomerTier(RegistryEntry):
    client_field = 'tier'

    class Meta(RegistryEntry.Meta):
        db_table = 'crm_customer_tiers'


class CrmStatus(RegistryEntry):
    client_field = 'status'

    class Meta(RegistryEntry.Meta):
        db_table = 'crm_statuses'
        verbose_name_plural = 'CRM statuses'


REGISTRY_MODELS = (PipelineStage, CustomerTier, CrmStatus)


class Client(models.Model):
    """CRM client record with denormalized ledger rollups and referral counters"""
    DEFAULT_STATUSES = ['active', 'inactive', 'archived']
    WARRANTY_CHOICES = [
        ('none', 'None'),
        ('active', 'Active'),
        ('expired', 'Expired'),
    ]

    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    email = models.EmailField(db_index=True)
    phone = models.CharField(max_length=30, blank=True)
    company = models.CharField(max_length=200, blank=True)
    address = models.TextField(blank=True)
    date_of_birth = models.DateField(null=True, blank=True)

    # Free text holding registry values; not foreign keys
    stage = models.CharField(max_length=50, default='lead', db_index=True)
    tier = models.CharField(max_length=50, default='silver', db_index=True)
    status = models.CharField(max_length=50, default='active', db_index=True)

    # Rollups of completed transactions, maintained by crm.services
    total_spending = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    refund_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    commission = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    order_count = models.PositiveIntegerField(default=0)

    referred_by = models.ForeignKey(
        'self', on_delete=models.SET_NULL, null=True, blank=True, related_name='referrals'
    )
    referral_count = models.PositiveIntegerField(default=0)
    referral_revenue = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))

    warranty_status = models.CharField(max_length=20, choices=WARRANTY_CHOICES, default='none')
    warranty_expiry = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True)
    tags = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.full_name

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    class Meta:
        db_table = 'clients'
        ordering = ['-created_at', '-id']
        constraints = [
            models.CheckConstraint(
                condition=~models.Q(referred_by=models.F('id')),
                name='client_not_self_referred',
            ),
        ]


class Inquiry(models.Model):
    """Contact form submission from the public site"""
    PROJECT_TYPE_CHOICES = [
        ('residential', 'Residential'),
        ('commercial', 'Commercial'),
        ('architecture', 'Architecture'),
        ('consultation', 'Consultation'),
    ]
    BUDGET_CHOICES = [
        ('50k-100k', '$50k - $100k'),
        ('100k-250k', '$100k - $250k'),
        ('250k-500k', '$250k - $500k'),
        ('500k+', '$500k+'),
    ]
    STATUS_CHOICES = [
        ('new', 'New'),
        ('reviewed', 'Reviewed'),
        ('contacted', 'Contacted'),
        ('converted', 'Converted'),
    ]

    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    email = models.EmailField()
    phone = models.CharField(max_length=30, blank=True)
    project_type = models.CharField(max_length=50, choices=PROJECT_TYPE_CHOICES)
    budget = models.CharField(max_length=50, choices=BUDGET_CHOICES, blank=True)
    message = models.TextField()
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='new', db_index=True)
    client = models.ForeignKey(Client, on_delete=models.SET_NULL, null=True, blank=True, related_name='inquiries')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.first_name} {self.last_name} - {self.project_type}"

    class Meta:
        db_table = 'inquiries'
        verbose_name_plural = 'inquiries'
        ordering = ['-created_at', '-id']


class Interaction(models.Model):
    """Activity log entry for a client (visit, meeting, call...)"""
    TYPE_CHOICES = [
        ('visit', 'Visit'),
        ('meeting', 'Meeting'),
        ('site_survey', 'Site Survey'),
        ('design', 'Design'),
        ('acceptance', 'Acceptance'),
        ('call', 'Call'),
        ('email', 'Email'),
    ]

    client = models.ForeignKey(Client, on_delete=models.CASCADE, related_name='interactions')
    type = models.CharField(max_length=30, choices=TYPE_CHOICES)
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    date = models.DateTimeField()
    duration = models.PositiveIntegerField(null=True, blank=True, help_text='Minutes')
    location = models.CharField(max_length=255, blank=True)
    assigned_to = models.CharField(max_length=200, blank=True, help_text='Staff member name')
    outcome = models.TextField(blank=True)
    next_action = models.TextField(blank=True)
    next_action_date = models.DateTimeField(null=True, blank=True)
    attachments = models.JSONField(default=list, blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
        related_name='crm_interactions'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.get_type_display()}: {self.title}"

    class Meta:
        db_table = 'interactions'
        ordering = ['-date', '-id']


class Deal(models.Model):
    """Negotiation/contract record for a client, optionally tied to a portfolio project"""
    STAGE_CHOICES = [
        ('proposal', 'Proposal'),
        ('negotiation', 'Negotiation'),
        ('contract', 'Contract'),
        ('delivery', 'Delivery'),
        ('completed', 'Completed'),
        ('lost', 'Lost'),
    ]
    TERMINAL_STAGES = ('completed', 'lost')

    client = models.ForeignKey(Client, on_delete=models.CASCADE, related_name='deals')
    project = models.ForeignKey(
        'content.Project', on_delete=models.SET_NULL, null=True, blank=True, related_name='deals'
    )
    title = models.CharField(max_length=255)
    value = models.DecimalField(max_digits=12, decimal_places=2)
    stage = models.CharField(max_length=20, choices=STAGE_CHOICES, default='proposal', db_index=True)
    probability = models.PositiveSmallIntegerField(
        default=50, validators=[MinValueValidator(0), MaxValueValidator(100)]
    )
    expected_close_date = models.DateTimeField(null=True, blank=True)
    actual_close_date = models.DateTimeField(null=True, blank=True)
    description = models.TextField(blank=True)
    terms = models.TextField(blank=True)
    notes = models.TextField(blank=True)
    lost_reason = models.TextField(blank=True)
    assigned_to = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
        related_name='assigned_deals'
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
        related_name='created_deals'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.title} ({self.stage})"

    class Meta:
        db_table = 'deals'
        ordering = ['-created_at', '-id']


class Transaction(models.Model):
    """
    Ledger row for a client.

    Completed rows are mirrored into the client's rollup fields; writes go
    through crm.services so the ledger and the rollups move together.
    """
    TYPE_CHOICES = [
        ('payment', 'Payment'),
        ('refund', 'Refund'),
        ('commission', 'Commission'),
    ]
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('completed', 'Completed'),
        ('cancelled', 'Cancelled'),
    ]

    client = models.ForeignKey(Client, on_delete=models.PROTECT, related_name='transactions')
    title = models.CharField(max_length=255, blank=True)
    description = models.TextField(blank=True)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='completed', db_index=True)
    payment_date = models.DateTimeField()
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.type} {self.amount} - {self.client_id}"

    class Meta:
        db_table = 'transactions'
        ordering = ['-payment_date', '-id']
        indexes = [
            models.Index(fields=['client', 'type', 'status'], name='transaction_rollup_idx'),
        ]
