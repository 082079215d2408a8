from apps.core.models import TimeStampedUUIDModel
from django.db import models


class Vendor(TimeStampedUUIDModel):
    user_id = models.UUIDField(unique=True)
    restaurant_name = models.CharField(max_length=150)
    address = models.CharField(max_length=255, blank=True, default="")
    pincode = models.CharField(max_length=6, blank=True, default="")
    delivery_pincodes = models.JSONField(default=list, blank=True)
    is_open = models.BooleanField(default=True)

    class Meta:
        db_table = "vendors"
        indexes = [
            models.Index(fields=["pincode"], name="vendors_pincode_idx"),
        ]

    def __str__(self):
        return f"{self.restaurant_name} ({self.pincode or 'no pincode'})"

    @property
    def coverage_pincodes(self):
        """Pincodes the vendor delivers to; falls back to its own pincode."""
        if self.delivery_pincodes:
            return list(self.delivery_pincodes)
        if self.pincode:
            return [self.pincode]
        return []
