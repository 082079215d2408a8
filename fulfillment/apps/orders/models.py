import random
from decimal import Decimal

from apps.core.models import TimeStampedUUIDModel
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone

from .constants import PAYMENT_METHODS, STATUS_TIMESTAMP_FIELDS, OrderStatus

RATING_VALIDATORS = [MinValueValidator(1), MaxValueValidator(5)]


class Order(TimeStampedUUIDModel):
    PAYMENT_STATUS_CHOICES = [
        ("pending", "Pending"),
        ("completed", "Completed"),
    ]

    order_number = models.CharField(max_length=20, unique=True, editable=False)

    # Parties
    customer_id = models.UUIDField()
    vendor = models.ForeignKey(
        "vendors.Vendor", on_delete=models.PROTECT, related_name="orders"
    )
    delivery_partner = models.ForeignKey(
        "partners.DeliveryPartner",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="orders",
    )

    # Checkout snapshots
    customer_name = models.CharField(max_length=100)
    customer_phone = models.CharField(max_length=15)
    customer_address = models.CharField(max_length=255)
    delivery_pincode = models.CharField(max_length=6)
    restaurant_name = models.CharField(max_length=150)
    restaurant_address = models.CharField(max_length=255)

    total_amount = models.DecimalField(max_digits=10, decimal_places=2, editable=False)
    status = models.CharField(
        max_length=20, choices=OrderStatus.choices, default=OrderStatus.PLACED
    )
    version = models.PositiveIntegerField(default=0)

    payment_method = models.CharField(max_length=10, choices=PAYMENT_METHODS, default="cod")
    payment_status = models.CharField(
        max_length=10, choices=PAYMENT_STATUS_CHOICES, default="pending"
    )
    payment_reference = models.CharField(max_length=100, blank=True, default="")

    # Delivery details; the partner snapshot is cleared on rejection
    partner_name = models.CharField(max_length=100, blank=True, default="")
    partner_phone = models.CharField(max_length=15, blank=True, default="")
    delivery_fee = models.DecimalField(
        max_digits=8, decimal_places=2, default=Decimal("25.00")
    )
    partner_earnings = models.DecimalField(
        max_digits=8, decimal_places=2, default=Decimal("20.00")
    )
    distance_km = models.DecimalField(
        max_digits=6, decimal_places=2, default=Decimal("0.00")
    )
    delivery_assigned_at = models.DateTimeField(null=True, blank=True)
    delivery_accepted_at = models.DateTimeField(null=True, blank=True)

    # First entry into each status; never overwritten
    placed_at = models.DateTimeField(default=timezone.now)
    confirmed_at = models.DateTimeField(null=True, blank=True)
    preparing_at = models.DateTimeField(null=True, blank=True)
    ready_at = models.DateTimeField(null=True, blank=True)
    assigned_at = models.DateTimeField(null=True, blank=True)
    accepted_at = models.DateTimeField(null=True, blank=True)
    picked_up_at = models.DateTimeField(null=True, blank=True)
    out_for_delivery_at = models.DateTimeField(null=True, blank=True)
    delivered_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)

    # Post-delivery feedback
    food_rating = models.PositiveSmallIntegerField(
        null=True, blank=True, validators=RATING_VALIDATORS
    )
    delivery_rating = models.PositiveSmallIntegerField(
        null=True, blank=True, validators=RATING_VALIDATORS
    )
    overall_rating = models.PositiveSmallIntegerField(
        null=True, blank=True, validators=RATING_VALIDATORS
    )
    feedback = models.TextField(blank=True, default="")
    rated_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "orders"
        indexes = [
            models.Index(fields=["status"], name="orders_status_idx"),
            models.Index(fields=["customer_id"], name="orders_customer_idx"),
            models.Index(fields=["vendor", "status"], name="orders_vendor_status_idx"),
            models.Index(fields=["delivery_partner", "status"], name="orders_partner_status_idx"),
            models.Index(fields=["delivered_at"], name="orders_delivered_at_idx"),
        ]
        ordering = ["-created_at"]

    def __str__(self):
        return f"Order #{self.order_number} - {self.status}"

    @property
    def is_terminal(self):
        return self.status in (OrderStatus.DELIVERED, OrderStatus.CANCELLED)

    @property
    def status_timestamps(self):
        return {
            status: getattr(self, field)
            for status, field in STATUS_TIMESTAMP_FIELDS.items()
        }

    @classmethod
    def generate_order_number(cls):
        """ORD + last 8 digits of the epoch milliseconds + 3 random digits."""
        millis = str(int(timezone.now().timestamp() * 1000))[-8:]
        return f"ORD{millis}{random.randint(0, 999):03d}"


class OrderItem(models.Model):
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")
    menu_item_id = models.UUIDField()

    # Snapshot
    name = models.CharField(max_length=150)
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)

    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    subtotal = models.DecimalField(max_digits=10, decimal_places=2)

    class Meta:
        db_table = "order_items"
        ordering = ["id"]

    def __str__(self):
        return f"{self.quantity}x {self.name}"


class OrderRejection(models.Model):
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="rejections")
    partner = models.ForeignKey(
        "partners.DeliveryPartner", on_delete=models.CASCADE, related_name="rejections"
    )
    reason = models.CharField(max_length=255, default="Not specified")
    rejected_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "order_rejections"
        indexes = [
            models.Index(fields=["order", "rejected_at"], name="order_rejections_order_idx"),
            models.Index(fields=["partner"], name="order_rejections_partner_idx"),
        ]
        ordering = ["rejected_at", "id"]

    def __str__(self):
        return f"{self.order_id} rejected by {self.partner_id}"
