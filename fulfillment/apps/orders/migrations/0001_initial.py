import uuid
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models

PAYMENT_METHODS = [
    ("cod", "Cash on Delivery"),
    ("razorpay", "Razorpay"),
    ("card", "Card"),
    ("upi", "UPI"),
    ("wallet", "Wallet"),
]
ORDER_STATUSES = [
    ("placed", "Placed"),
    ("confirmed", "Confirmed"),
    ("preparing", "Preparing"),
    ("ready", "Ready"),
    ("assigned", "Assigned"),
    ("accepted", "Accepted"),
    ("picked_up", "Picked Up"),
    ("out_for_delivery", "Out for Delivery"),
    ("delivered", "Delivered"),
    ("cancelled", "Cancelled"),
]


def rating_field():
    return models.PositiveSmallIntegerField(
        blank=True,
        null=True,
        validators=[
            django.core.validators.MinValueValidator(1),
            django.core.validators.MaxValueValidator(5),
        ],
    )


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("vendors", "0001_initial"),
        ("partners", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Order",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("order_number", models.CharField(editable=False, max_length=20, unique=True)),
                ("customer_id", models.UUIDField()),
                ("customer_name", models.CharField(max_length=100)),
                ("customer_phone", models.CharField(max_length=15)),
                ("customer_address", models.CharField(max_length=255)),
                ("delivery_pincode", models.CharField(max_length=6)),
                ("restaurant_name", models.CharField(max_length=150)),
                ("restaurant_address", models.CharField(max_length=255)),
                ("total_amount", models.DecimalField(decimal_places=2, editable=False, max_digits=10)),
                ("status", models.CharField(choices=ORDER_STATUSES, default="placed", max_length=20)),
                ("version", models.PositiveIntegerField(default=0)),
                ("payment_method", models.CharField(choices=PAYMENT_METHODS, default="cod", max_length=10)),
                (
                    "payment_status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("completed", "Completed")],
                        default="pending",
                        max_length=10,
                    ),
                ),
                ("payment_reference", models.CharField(blank=True, default="", max_length=100)),
                ("partner_name", models.CharField(blank=True, default="", max_length=100)),
                ("partner_phone", models.CharField(blank=True, default="", max_length=15)),
                ("delivery_fee", models.DecimalField(decimal_places=2, default=Decimal("25.00"), max_digits=8)),
                ("partner_earnings", models.DecimalField(decimal_places=2, default=Decimal("20.00"), max_digits=8)),
                ("distance_km", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=6)),
                ("delivery_assigned_at", models.DateTimeField(blank=True, null=True)),
                ("delivery_accepted_at", models.DateTimeField(blank=True, null=True)),
                ("placed_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("confirmed_at", models.DateTimeField(blank=True, null=True)),
                ("preparing_at", models.DateTimeField(blank=True, null=True)),
                ("ready_at", models.DateTimeField(blank=True, null=True)),
                ("assigned_at", models.DateTimeField(blank=True, null=True)),
                ("accepted_at", models.DateTimeField(blank=True, null=True)),
                ("picked_up_at", models.DateTimeField(blank=True, null=True)),
                ("out_for_delivery_at", models.DateTimeField(blank=True, null=True)),
                ("delivered_at", models.DateTimeField(blank=True, null=True)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                ("food_rating", rating_field()),
                ("delivery_rating", rating_field()),
                ("overall_rating", rating_field()),
                ("feedback", models.TextField(blank=True, default="")),
                ("rated_at", models.DateTimeField(blank=True, null=True)),
                (
                    "vendor",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="orders",
                        to="vendors.vendor",
                    ),
                ),
                (
                    "delivery_partner",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="orders",
                        to="partners.deliverypartner",
                    ),
                ),
            ],
            options={
                "db_table": "orders",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status"], name="orders_status_idx"),
                    models.Index(fields=["customer_id"], name="orders_customer_idx"),
                    models.Index(fields=["vendor", "status"], name="orders_vendor_status_idx"),
                    models.Index(fields=["delivery_partner", "status"], name="orders_partner_status_idx"),
                    models.Index(fields=["delivered_at"], name="orders_delivered_at_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="OrderItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("menu_item_id", models.UUIDField()),
                ("name", models.CharField(max_length=150)),
                ("unit_price", models.DecimalField(decimal_places=2, max_digits=10)),
                (
                    "quantity",
                    models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)]),
                ),
                ("subtotal", models.DecimalField(decimal_places=2, max_digits=10)),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                        to="orders.order",
                    ),
                ),
            ],
            options={
                "db_table": "order_items",
                "ordering": ["id"],
            },
        ),
        migrations.CreateModel(
            name="OrderRejection",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("reason", models.CharField(default="Not specified", max_length=255)),
                ("rejected_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="rejections",
                        to="orders.order",
                    ),
                ),
                (
                    "partner",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="rejections",
                        to="partners.deliverypartner",
                    ),
                ),
            ],
            options={
                "db_table": "order_rejections",
                "ordering": ["rejected_at", "id"],
                "indexes": [
                    models.Index(fields=["order", "rejected_at"], name="order_rejections_order_idx"),
                    models.Index(fields=["partner"], name="order_rejections_partner_idx"),
                ],
            },
        ),
    ]
