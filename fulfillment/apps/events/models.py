from apps.core.models import TimeStampedUUIDModel
from django.db import models

from .constants import DLQ_DEFAULT_MAX_RETRIES, EventTypes


class OrderEvent(TimeStampedUUIDModel):
    order = models.ForeignKey(
        "orders.Order", on_delete=models.CASCADE, related_name="events"
    )
    event_type = models.CharField(max_length=50, choices=EventTypes.CHOICES)
    from_status = models.CharField(max_length=20, blank=True, default="")
    to_status = models.CharField(max_length=20)
    actor_role = models.CharField(max_length=10)
    partner_id = models.UUIDField(null=True, blank=True)
    event_data = models.JSONField(default=dict, blank=True)
    timestamp = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "order_events"
        indexes = [
            models.Index(fields=["order", "timestamp"], name="order_events_order_idx"),
            models.Index(fields=["event_type"], name="order_events_type_idx"),
        ]
        ordering = ["timestamp", "created_at"]

    def __str__(self):
        return f"{self.event_type} - {self.order_id}"


class DeadLetterQueue(TimeStampedUUIDModel):
    STATUS_CHOICES = [
        ("pending", "Pending"),
        ("retrying", "Retrying"),
        ("processed", "Processed"),
        ("failed", "Failed"),
    ]

    topic = models.CharField(max_length=255, help_text="Kafka topic name")
    event_data = models.JSONField(help_text="Original event data")
    error_message = models.TextField(
        blank=True, null=True, help_text="Error that caused the failure"
    )
    retry_count = models.IntegerField(default=0, help_text="Number of retry attempts")
    max_retries = models.IntegerField(
        default=DLQ_DEFAULT_MAX_RETRIES, help_text="Maximum number of retries"
    )
    status = models.CharField(max_length=50, choices=STATUS_CHOICES, default="pending")
    next_retry_at = models.DateTimeField(
        null=True, blank=True, help_text="When to retry next"
    )
    processed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "dead_letter_queue"
        indexes = [
            models.Index(fields=["status"], name="dead_letter_status_idx"),
            models.Index(fields=["next_retry_at"], name="dead_letter_next_retry_idx"),
            models.Index(fields=["topic"], name="dead_letter_topic_idx"),
        ]
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.topic} ({self.status}, {self.retry_count} retries)"
