from django.core.management.base import BaseCommand
from django.db import transaction
from studio.crm.models import PipelineStage, CustomerTier, CrmStatus

DEFAULT_REGISTRIES = {
    PipelineStage: [
        ('lead', 'Lead', 'Khách tiềm năng'),
        ('prospect', 'Prospect', 'Đang tư vấn'),
        ('contract', 'Contract', 'Hợp đồng'),
        ('delivery', 'Delivery', 'Thi công'),
        ('aftercare', 'Aftercare', 'Hậu mãi'),
    ],
    CustomerTier: [
        ('silver', 'Silver', 'Bạc'),
        ('gold', 'Gold', 'Vàng'),
        ('vip', 'VIP', 'VIP'),
        ('platinum', 'Platinum', 'Bạch kim'),
    ],
    CrmStatus: [
        ('active', 'Active', 'Đang hoạt động'),
        ('inactive', 'Inactive', 'Không hoạt động'),
        ('archived', 'Archived', 'Lưu trữ'),
    ],
}


class Command(BaseCommand):
    help = 'Seeds the CRM registries (pipeline stages, customer tiers, statuses) with the default entries'

    def add_arguments(self, parser):
        parser.add_argument(
            '--update-labels',
            action='store_true',
            help='Overwrite labels and order of entries that already exist',
        )

    def handle(self, *args, **options):
        update_labels = options['update_labels']
        created_total = 0

        with transaction.atomic():
            for model, rows in DEFAULT_REGISTRIES.items():
                self.stdout.write(f"\n{model._meta.verbose_name_plural.title()}:")
                for order, (value, label_en, label_vi) in enumerate(rows):
                    defaults = {'label_en': label_en, 'label_vi': label_vi, 'order': order}
                    entry = model.objects.filter(value=value).first()
                    if entry is None:
                        model.objects.create(value=value, **defaults)
                        created_total += 1
                        self.stdout.write(self.style.SUCCESS(f"  + {value}"))
                    elif update_labels:
                        for field, field_value in defaults.items():
                            setattr(entry, field, field_value)
                        entry.save(update_fields=list(defaults) + ['updated_at'])
                        self.stdout.write(self.style.NOTICE(f"  ~ {value} (labels updated)"))
                    else:
                        self.stdout.write(f"  = {value} (exists)")

        self.stdout.write(self.style.SUCCESS(f"\nSeeding complete. {created_total} entries created."))
