from django.core.management.base import BaseCommand
from django.db import transaction
from studio.crm.models import Client
from studio.crm.services import recompute_rollups


class Command(BaseCommand):
    help = 'Recomputes client spending, refund, commission and referral rollups from the transaction ledger'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Report drift without saving changes',
        )
        parser.add_argument(
            '--client',
            type=int,
            help='Only check the client with this id',
        )

    def handle(self, *args, **options):
        dry_run = options['dry_run']
        if dry_run:
            self.stdout.write(self.style.WARNING("DRY RUN MODE: No changes will be saved."))

        clients = Client.objects.order_by('pk')
        if options['client']:
            clients = clients.filter(pk=options['client'])
        self.stdout.write(f"Checking rollups for {clients.count()} clients...")

        drifted = 0
        with transaction.atomic():
            for client in clients.iterator():
                drift = recompute_rollups(client, apply=not dry_run)
                if not drift:
                    continue
                drifted += 1
                self.stdout.write(f"\nClient: {client.full_name} (ID: {client.pk})")
                for field, values in drift.items():
                    self.stdout.write(self.style.NOTICE(
                        f"  - {field}: {values['stored']} -> {values['expected']}"
                    ))

            if dry_run:
                self.stdout.write(self.style.WARNING(f"\nDry run complete. {drifted} clients have drifted rollups."))
                transaction.set_rollback(True)
            else:
                self.stdout.write(self.style.SUCCESS(f"\nRollup repair complete. {drifted} clients fixed."))
