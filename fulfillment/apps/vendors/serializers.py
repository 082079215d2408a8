import re

from rest_framework import serializers

from .models import Vendor

PINCODE_RE = re.compile(r"^\d{6}$")


class VendorSerializer(serializers.ModelSerializer):
    coverage_pincodes = serializers.ListField(read_only=True)

    class Meta:
        model = Vendor
        fields = [
            "id",
            "user_id",
            "restaurant_name",
            "address",
            "pincode",
            "delivery_pincodes",
            "coverage_pincodes",
            "is_open",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]

    def validate_delivery_pincodes(self, value):
        if not isinstance(value, list):
            raise serializers.ValidationError("Expected a list of pincodes.")
        cleaned = []
        for pincode in value:
            pincode = str(pincode).strip()
            if not PINCODE_RE.match(pincode):
                raise serializers.ValidationError(f"Invalid pincode: {pincode}")
            if pincode not in cleaned:
                cleaned.append(pincode)
        return cleaned
