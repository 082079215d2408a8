import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("orders", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="OrderEvent",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "event_type",
                    models.CharField(
                        choices=[
                            ("order_placed", "Order Placed"),
                            ("order_status_changed", "Order Status Changed"),
                            ("partner_assigned", "Partner Assigned"),
                            ("partner_accepted", "Partner Accepted"),
                            ("partner_rejected", "Partner Rejected"),
                            ("order_delivered", "Order Delivered"),
                            ("order_cancelled", "Order Cancelled"),
                        ],
                        max_length=50,
                    ),
                ),
                ("from_status", models.CharField(blank=True, default="", max_length=20)),
                ("to_status", models.CharField(max_length=20)),
                ("actor_role", models.CharField(max_length=10)),
                ("partner_id", models.UUIDField(blank=True, null=True)),
                ("event_data", models.JSONField(blank=True, default=dict)),
                ("timestamp", models.DateTimeField(auto_now_add=True)),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="events",
                        to="orders.order",
                    ),
                ),
            ],
            options={
                "db_table": "order_events",
                "ordering": ["timestamp", "created_at"],
                "indexes": [
                    models.Index(fields=["order", "timestamp"], name="order_events_order_idx"),
                    models.Index(fields=["event_type"], name="order_events_type_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="DeadLetterQueue",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("topic", models.CharField(help_text="Kafka topic name", max_length=255)),
                ("event_data", models.JSONField(help_text="Original event data")),
                (
                    "error_message",
                    models.TextField(blank=True, help_text="Error that caused the failure", null=True),
                ),
                ("retry_count", models.IntegerField(default=0, help_text="Number of retry attempts")),
                ("max_retries", models.IntegerField(default=5, help_text="Maximum number of retries")),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("retrying", "Retrying"),
                            ("processed", "Processed"),
                            ("failed", "Failed"),
                        ],
                        default="pending",
                        max_length=50,
                    ),
                ),
                ("next_retry_at", models.DateTimeField(blank=True, help_text="When to retry next", null=True)),
                ("processed_at", models.DateTimeField(blank=True, null=True)),
            ],
            options={
                "db_table": "dead_letter_queue",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status"], name="dead_letter_status_idx"),
                    models.Index(fields=["next_retry_at"], name="dead_letter_next_retry_idx"),
                    models.Index(fields=["topic"], name="dead_letter_topic_idx"),
                ],
            },
        ),
    ]
