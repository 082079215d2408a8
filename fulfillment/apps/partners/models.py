from decimal import Decimal

from apps.core.models import TimeStampedUUIDModel
from django.db import models


class DeliveryPartner(TimeStampedUUIDModel):
    VEHICLE_TYPES = [
        ("bike", "Bike"),
        ("scooter", "Scooter"),
        ("bicycle", "Bicycle"),
        ("car", "Car"),
    ]
    VERIFICATION_STATUS_CHOICES = [
        ("pending", "Pending"),
        ("in_review", "In Review"),
        ("approved", "Approved"),
        ("rejected", "Rejected"),
    ]

    user_id = models.UUIDField(unique=True)

    # Profile
    full_name = models.CharField(max_length=100, blank=True, default="")
    mobile_no = models.CharField(max_length=15, blank=True, default="")
    alternate_no = models.CharField(max_length=15, blank=True, default="")
    street = models.CharField(max_length=255, blank=True, default="")
    city = models.CharField(max_length=100, blank=True, default="")
    state = models.CharField(max_length=100, blank=True, default="")
    pincode = models.CharField(max_length=6, blank=True, default="")
    vehicle_type = models.CharField(
        max_length=10, choices=VEHICLE_TYPES, blank=True, default=""
    )
    vehicle_number = models.CharField(max_length=20, blank=True, default="")
    license_number = models.CharField(max_length=30, blank=True, default="")
    account_holder_name = models.CharField(max_length=100, blank=True, default="")
    account_number = models.CharField(max_length=30, blank=True, default="")
    ifsc_code = models.CharField(max_length=11, blank=True, default="")
    bank_name = models.CharField(max_length=100, blank=True, default="")

    # One {day, is_working, start_time, end_time} entry per weekday
    working_hours = models.JSONField(default=list, blank=True)
    delivery_zones = models.JSONField(default=list, blank=True)

    is_available = models.BooleanField(default=False)
    # Cached projection of the latest verification_history entry
    verification_status = models.CharField(
        max_length=10, choices=VERIFICATION_STATUS_CHOICES, default="pending"
    )

    # Delivery stats
    completed_deliveries = models.PositiveIntegerField(default=0)
    cancelled_deliveries = models.PositiveIntegerField(default=0)
    total_earnings = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    stats_month = models.CharField(max_length=7, blank=True, default="")
    month_deliveries = models.PositiveIntegerField(default=0)
    month_earnings = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )

    rating_average = models.DecimalField(
        max_digits=3, decimal_places=2, default=Decimal("0.00")
    )
    total_ratings = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = "delivery_partners"
        indexes = [
            models.Index(
                fields=["verification_status", "is_available"], name="partners_matching_idx"
            ),
        ]

    def __str__(self):
        return f"{self.full_name or 'Unnamed partner'} - ({self.mobile_no})"

    @property
    def is_verified(self):
        return self.verification_status == "approved"

    def covers(self, pincode):
        return bool(pincode) and pincode in (self.delivery_zones or [])

    def last_verification(self):
        return self.verification_history.order_by("-created_at", "-id").first()

    @property
    def verified_by(self):
        """Latest decision when it was an approval, else None."""
        last = self.last_verification()
        if last and last.action == VerificationRecord.ACTION_APPROVED:
            return last
        return None

    @property
    def rejected_by(self):
        """Latest decision when it was a rejection, else None."""
        last = self.last_verification()
        if last and last.action == VerificationRecord.ACTION_REJECTED:
            return last
        return None


class VerificationRecord(models.Model):
    ACTION_APPROVED = "approved"
    ACTION_REJECTED = "rejected"
    ACTION_CHOICES = [
        (ACTION_APPROVED, "Approved"),
        (ACTION_REJECTED, "Rejected"),
    ]

    partner = models.ForeignKey(
        DeliveryPartner, on_delete=models.CASCADE, related_name="verification_history"
    )
    vendor = models.ForeignKey(
        "vendors.Vendor",
        on_delete=models.SET_NULL,
        null=True,
        related_name="partner_verifications",
    )
    vendor_name = models.CharField(max_length=150, blank=True, default="")
    action = models.CharField(max_length=10, choices=ACTION_CHOICES)
    reason = models.CharField(max_length=255, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "partner_verifications"
        indexes = [
            models.Index(fields=["partner", "created_at"], name="partner_verif_history_idx"),
        ]
        ordering = ["created_at", "id"]

    def __str__(self):
        return f"{self.action} by {self.vendor_name} at {self.created_at}"


class DeliveryCredit(models.Model):
    """Marks an order as already counted in a partner's delivery stats."""

    OUTCOME_CHOICES = [
        ("completed", "Completed"),
        ("cancelled", "Cancelled"),
    ]

    partner = models.ForeignKey(
        DeliveryPartner, on_delete=models.CASCADE, related_name="credits"
    )
    order_id = models.UUIDField()
    outcome = models.CharField(max_length=10, choices=OUTCOME_CHOICES)
    amount = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal("0.00")
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "delivery_credits"
        constraints = [
            models.UniqueConstraint(
                fields=["partner", "order_id"], name="unique_credit_per_order"
            ),
        ]

    def __str__(self):
        return f"{self.outcome} {self.order_id} -> {self.partner_id}"
