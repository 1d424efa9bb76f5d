from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from inventory.models import Code
from sales.models import SaleCode


class Command(BaseCommand):
    help = 'Check that code flags agree with the sales that delivered them'

    def add_arguments(self, parser):
        parser.add_argument(
            '--fix',
            action='store_true',
            help='Mark codes linked to a sale as used',
        )

    def handle(self, *args, **options):
        self.stdout.write(self.style.WARNING('Reconciling codes with sales...'))

        # Used but not linked: delivered by a sale that was later deleted, or flagged by hand
        orphaned = Code.objects.filter(used=True, sale_code__isnull=True).select_related('app')
        for code in orphaned:
            self.stdout.write(f"- Used without sale: {code.formatted} ({code.app.name})")

        # Linked but still unused: could be handed out a second time
        unflagged = (
            SaleCode.objects.filter(code__used=False)
            .select_related('code__app', 'sale_item__sale')
        )
        orphaned_count = orphaned.count()
        unflagged = list(unflagged)
        fixed = 0
        for link in unflagged:
            sale = link.sale_item.sale
            self.stdout.write(
                self.style.ERROR(
                    f"✗ Linked to sale #{sale.pk} but unused: {link.code.formatted} ({link.code.app.name})"
                )
            )

        if options['fix']:
            with transaction.atomic():
                for link in unflagged:
                    code = link.code
                    code.used = True
                    code.used_at = link.sale_item.sale.confirmed_at or link.created_at or timezone.now()
                    code.save(update_fields=['used', 'used_at'])
                    fixed += 1
                    self.stdout.write(self.style.SUCCESS(f"✓ Marked as used: {code.formatted}"))

        # Summary
        self.stdout.write(self.style.SUCCESS('\n' + '=' * 60))
        self.stdout.write(self.style.SUCCESS('SUMMARY:'))
        self.stdout.write(self.style.SUCCESS('=' * 60))
        self.stdout.write(f"Used codes without a sale: {orphaned_count}")
        self.stdout.write(f"Sale codes still flagged unused: {len(unflagged)}")
        self.stdout.write(f"Codes fixed: {fixed}")
        self.stdout.write(self.style.SUCCESS('=' * 60))
