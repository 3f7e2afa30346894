from django.core.management.base import BaseCommand
from django.db import transaction
from patients.models import Patient
from billing.models import DailyExpense
from lab.models import InventoryTransaction
from core.models import RefCounter


class Command(BaseCommand):
    help = 'Flushes transactional data (patients, expenses, stock movements) but keeps users, doctors and the test catalog.'

    def add_arguments(self, parser):
        parser.add_argument(
            '--keep-counters', action='store_true',
            help='Keep patient reference/case number sequences instead of restarting them.'
        )

    def handle(self, *args, **options):
        self.stdout.write("Flushing data...")

        with transaction.atomic():
            # Patients cascade to their ordered tests and results
            deleted_patients, _ = Patient.objects.all().delete()
            self.stdout.write(f"Deleted {deleted_patients} Patient rows (with tests and results)")

            deleted_expenses, _ = DailyExpense.objects.all().delete()
            self.stdout.write(f"Deleted {deleted_expenses} Expenses")

            deleted_movements, _ = InventoryTransaction.objects.all().delete()
            self.stdout.write(f"Deleted {deleted_movements} Stock Movements")

            if not options['keep_counters']:
                deleted_counters, _ = RefCounter.objects.all().delete()
                self.stdout.write(f"Reset {deleted_counters} Sequences")

        self.stdout.write(self.style.SUCCESS('Successfully flushed all transactional data.'))
