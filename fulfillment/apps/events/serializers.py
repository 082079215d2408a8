from rest_framework import serializers

from .models import DeadLetterQueue, OrderEvent


class OrderEventSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderEvent
        fields = [
            "id",
            "order",
            "event_type",
            "from_status",
            "to_status",
            "actor_role",
            "partner_id",
            "event_data",
            "timestamp",
        ]


class DeadLetterQueueSerializer(serializers.ModelSerializer):
    class Meta:
        model = DeadLetterQueue
        fields = "__all__"
