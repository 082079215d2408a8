import uuid
from decimal import Decimal

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("vendors", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="DeliveryPartner",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("user_id", models.UUIDField(unique=True)),
                ("full_name", models.CharField(blank=True, default="", max_length=100)),
                ("mobile_no", models.CharField(blank=True, default="", max_length=15)),
                ("alternate_no", models.CharField(blank=True, default="", max_length=15)),
                ("street", models.CharField(blank=True, default="", max_length=255)),
                ("city", models.CharField(blank=True, default="", max_length=100)),
                ("state", models.CharField(blank=True, default="", max_length=100)),
                ("pincode", models.CharField(blank=True, default="", max_length=6)),
                (
                    "vehicle_type",
                    models.CharField(
                        blank=True,
                        choices=[("bike", "Bike"), ("scooter", "Scooter"), ("bicycle", "Bicycle"), ("car", "Car")],
                        default="",
                        max_length=10,
                    ),
                ),
                ("vehicle_number", models.CharField(blank=True, default="", max_length=20)),
                ("license_number", models.CharField(blank=True, default="", max_length=30)),
                ("account_holder_name", models.CharField(blank=True, default="", max_length=100)),
                ("account_number", models.CharField(blank=True, default="", max_length=30)),
                ("ifsc_code", models.CharField(blank=True, default="", max_length=11)),
                ("bank_name", models.CharField(blank=True, default="", max_length=100)),
                ("working_hours", models.JSONField(blank=True, default=list)),
                ("delivery_zones", models.JSONField(blank=True, default=list)),
                ("is_available", models.BooleanField(default=False)),
                (
                    "verification_status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("in_review", "In Review"),
                            ("approved", "Approved"),
                            ("rejected", "Rejected"),
                        ],
                        default="pending",
                        max_length=10,
                    ),
                ),
                ("completed_deliveries", models.PositiveIntegerField(default=0)),
                ("cancelled_deliveries", models.PositiveIntegerField(default=0)),
                ("total_earnings", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("stats_month", models.CharField(blank=True, default="", max_length=7)),
                ("month_deliveries", models.PositiveIntegerField(default=0)),
                ("month_earnings", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("rating_average", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=3)),
                ("total_ratings", models.PositiveIntegerField(default=0)),
            ],
            options={
                "db_table": "delivery_partners",
                "indexes": [
                    models.Index(fields=["verification_status", "is_available"], name="partners_matching_idx")
                ],
            },
        ),
        migrations.CreateModel(
            name="VerificationRecord",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("vendor_name", models.CharField(blank=True, default="", max_length=150)),
                (
                    "action",
                    models.CharField(choices=[("approved", "Approved"), ("rejected", "Rejected")], max_length=10),
                ),
                ("reason", models.CharField(blank=True, default="", max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "partner",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="verification_history",
                        to="partners.deliverypartner",
                    ),
                ),
                (
                    "vendor",
                    models.ForeignKey(
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="partner_verifications",
                        to="vendors.vendor",
                    ),
                ),
            ],
            options={
                "db_table": "partner_verifications",
                "ordering": ["created_at", "id"],
                "indexes": [
                    models.Index(fields=["partner", "created_at"], name="partner_verif_history_idx")
                ],
            },
        ),
        migrations.CreateModel(
            name="DeliveryCredit",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("order_id", models.UUIDField()),
                (
                    "outcome",
                    models.CharField(choices=[("completed", "Completed"), ("cancelled", "Cancelled")], max_length=10),
                ),
                ("amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=10)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "partner",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="credits",
                        to="partners.deliverypartner",
                    ),
                ),
            ],
            options={
                "db_table": "delivery_credits",
                "constraints": [
                    models.UniqueConstraint(fields=("partner", "order_id"), name="unique_credit_per_order")
                ],
            },
        ),
    ]
