"""
Management command to retry assignment for unassigned orders.
This should be run periodically (e.g., every 5 minutes) via cron.
"""
from django.core.management.base import BaseCommand

from apps.deliveries.constants import UNASSIGNED_MAX_AGE_HOURS
from apps.deliveries.services import assignment_coordinator


class Command(BaseCommand):
    help = "Retry assignment for orders that are ready but not yet bound to a delivery partner"

    def add_arguments(self, parser):
        parser.add_argument(
            "--max-age-hours",
            type=int,
            default=UNASSIGNED_MAX_AGE_HOURS,
            help=f"Hours an order may wait in ready before it is cancelled (default: {UNASSIGNED_MAX_AGE_HOURS})",
        )

    def handle(self, *args, **options):
        self.stdout.write("Starting retry process for unassigned orders...")

        result = assignment_coordinator.retry_unassigned(max_age_hours=options["max_age_hours"])

        self.stdout.write(
            self.style.SUCCESS(
                f'Retry process completed. Retried: {result["retried"]}, '
                f'Assigned: {result["assigned"]}, Cancelled: {result["cancelled"]}'
            )
        )
