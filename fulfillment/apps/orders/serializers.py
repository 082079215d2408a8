from rest_framework import serializers

from .constants import PAYMENT_METHODS, ActorRole, OrderStatus
from .models import Order, OrderItem, OrderRejection


class OrderItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderItem
        fields = ["menu_item_id", "name", "unit_price", "quantity", "subtotal"]


class OrderRejectionSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderRejection
        fields = ["partner", "reason", "rejected_at"]


class OrderSerializer(serializers.ModelSerializer):
    items = OrderItemSerializer(many=True, read_only=True)
    rejections = OrderRejectionSerializer(many=True, read_only=True)
    status_timestamps = serializers.DictField(read_only=True)
    is_terminal = serializers.BooleanField(read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "customer_id",
            "vendor",
            "delivery_partner",
            "customer_name",
            "customer_phone",
            "customer_address",
            "delivery_pincode",
            "restaurant_name",
            "restaurant_address",
            "items",
            "total_amount",
            "status",
            "is_terminal",
            "version",
            "payment_method",
            "payment_status",
            "payment_reference",
            "partner_name",
            "partner_phone",
            "delivery_fee",
            "partner_earnings",
            "distance_km",
            "delivery_assigned_at",
            "delivery_accepted_at",
            "rejections",
            "status_timestamps",
            "food_rating",
            "delivery_rating",
            "overall_rating",
            "feedback",
            "rated_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class CheckoutItemSerializer(serializers.Serializer):
    menu_item_id = serializers.UUIDField()
    name = serializers.CharField(max_length=150)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    quantity = serializers.IntegerField(min_value=1)


class OrderCreateSerializer(serializers.Serializer):
    customer_id = serializers.UUIDField()
    vendor_id = serializers.UUIDField()
    items = CheckoutItemSerializer(many=True, allow_empty=False)
    customer_name = serializers.CharField(max_length=100)
    customer_phone = serializers.CharField(max_length=15)
    customer_address = serializers.CharField(max_length=255)
    delivery_pincode = serializers.RegexField(r"^\d{6}$")
    payment_method = serializers.ChoiceField(choices=PAYMENT_METHODS, default="cod")
    payment_confirmed = serializers.BooleanField(default=False)
    payment_reference = serializers.CharField(max_length=100, required=False, allow_blank=True)


class TransitionSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=OrderStatus.choices)
    actor_role = serializers.ChoiceField(choices=ActorRole.CHOICES)
    expected_version = serializers.IntegerField(required=False, min_value=0)


class AssignSerializer(serializers.Serializer):
    partner_id = serializers.UUIDField()
    expected_version = serializers.IntegerField(required=False, min_value=0)
    distance_km = serializers.DecimalField(
        max_digits=6, decimal_places=2, required=False, min_value=0
    )


class PartnerActionSerializer(serializers.Serializer):
    partner_id = serializers.UUIDField()
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True)


class AdvanceSerializer(serializers.Serializer):
    partner_id = serializers.UUIDField()
    status = serializers.ChoiceField(
        choices=[OrderStatus.PICKED_UP, OrderStatus.OUT_FOR_DELIVERY, OrderStatus.DELIVERED]
    )


class RateSerializer(serializers.Serializer):
    overall_rating = serializers.IntegerField(min_value=1, max_value=5)
    food_rating = serializers.IntegerField(min_value=1, max_value=5, required=False)
    delivery_rating = serializers.IntegerField(min_value=1, max_value=5, required=False)
    feedback = serializers.CharField(required=False, allow_blank=True)
