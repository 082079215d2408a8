"""
Management command to process Dead Letter Queue entries.
This should be run periodically to retry failed Kafka events.
"""
from django.core.management.base import BaseCommand
from django.utils import timezone

from apps.events.constants import DLQ_DEFAULT_MAX_RETRIES, DLQ_MAX_BACKOFF_MINUTES
from apps.events.models import DeadLetterQueue
from infrastructure.kafka_client import dlq_backoff, kafka_client


class Command(BaseCommand):
    help = "Process Dead Letter Queue entries and retry failed Kafka events"

    def add_arguments(self, parser):
        parser.add_argument(
            "--max-retries",
            type=int,
            default=DLQ_DEFAULT_MAX_RETRIES,
            help=f"Maximum number of retry attempts per event (default: {DLQ_DEFAULT_MAX_RETRIES})",
        )
        parser.add_argument(
            "--batch-size",
            type=int,
            default=100,
            help="Number of DLQ entries to process in one run (default: 100)",
        )

    def handle(self, *args, **options):
        max_retries = options["max_retries"]
        batch_size = options["batch_size"]

        self.stdout.write("Processing Dead Letter Queue entries...")

        # Pending entries whose backoff has elapsed
        pending_entries = DeadLetterQueue.objects.filter(
            status="pending",
            next_retry_at__lte=timezone.now(),
            retry_count__lt=max_retries,
        ).order_by("next_retry_at")[:batch_size]

        processed = 0
        succeeded = 0
        failed = 0

        for entry in pending_entries:
            entry.status = "retrying"
            entry.save(update_fields=["status", "updated_at"])

            # Republish without re-queueing; this row tracks the retries
            success = kafka_client.publish(
                topic=entry.topic,
                event_data=entry.event_data,
                key=entry.event_data.get("order_id"),
                dead_letter=False,
            )

            if success:
                entry.status = "processed"
                entry.processed_at = timezone.now()
                succeeded += 1
            else:
                entry.retry_count += 1
                entry.next_retry_at = timezone.now() + dlq_backoff(
                    entry.retry_count, DLQ_MAX_BACKOFF_MINUTES
                )
                entry.status = "failed" if entry.retry_count >= max_retries else "pending"
                failed += 1
            entry.save()
            processed += 1

        self.stdout.write(
            self.style.SUCCESS(
                f"DLQ processing completed. Processed: {processed}, Succeeded: {succeeded}, Failed: {failed}"
            )
        )
