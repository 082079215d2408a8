from rest_framework import serializers

from .models import DeliveryPartner, VerificationRecord

PROFILE_CHAR_FIELDS = {
    "full_name": 100,
    "mobile_no": 15,
    "alternate_no": 15,
    "street": 255,
    "city": 100,
    "state": 100,
    "pincode": 6,
    "vehicle_type": 10,
    "vehicle_number": 20,
    "license_number": 30,
    "account_holder_name": 100,
    "account_number": 30,
    "ifsc_code": 11,
    "bank_name": 100,
}


class DeliveryPartnerSerializer(serializers.ModelSerializer):
    is_verified = serializers.BooleanField(read_only=True)

    class Meta:
        model = DeliveryPartner
        fields = [
            "id",
            "user_id",
            *PROFILE_CHAR_FIELDS,
            "working_hours",
            "delivery_zones",
            "is_available",
            "verification_status",
            "is_verified",
            "completed_deliveries",
            "cancelled_deliveries",
            "total_earnings",
            "stats_month",
            "month_deliveries",
            "month_earnings",
            "rating_average",
            "total_ratings",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class WorkingHoursEntrySerializer(serializers.Serializer):
    day = serializers.CharField()
    is_working = serializers.BooleanField(required=False)
    start_time = serializers.CharField(required=False)
    end_time = serializers.CharField(required=False)


class PartnerProfileSerializer(serializers.Serializer):
    """Writable profile fields; every field is optional."""

    working_hours = WorkingHoursEntrySerializer(many=True, required=False)
    delivery_zones = serializers.ListField(
        child=serializers.CharField(max_length=6), required=False
    )

    def get_fields(self):
        fields = super().get_fields()
        for name, max_length in PROFILE_CHAR_FIELDS.items():
            fields[name] = serializers.CharField(
                max_length=max_length, required=False, allow_blank=True
            )
        return fields

    def to_internal_value(self, data):
        value = super().to_internal_value(data)
        if "working_hours" in value:
            value["working_hours"] = [dict(entry) for entry in value["working_hours"]]
        return value


class PartnerRegisterSerializer(PartnerProfileSerializer):
    user_id = serializers.UUIDField()


class AvailabilitySerializer(serializers.Serializer):
    is_available = serializers.BooleanField()


class VerificationDecisionSerializer(serializers.Serializer):
    vendor_id = serializers.UUIDField()
    action = serializers.CharField()
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True)


class VerificationRecordSerializer(serializers.ModelSerializer):
    class Meta:
        model = VerificationRecord
        fields = ["vendor", "vendor_name", "action", "reason", "created_at"]
