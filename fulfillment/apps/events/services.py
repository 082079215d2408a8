import logging

from django.conf import settings
from django.db import transaction
from infrastructure.cache import get_cache_key_value, set_cache_key
from infrastructure.kafka_client import kafka_client

from apps.orders.constants import OrderStatus

from .constants import EVENT_IDEMPOTENCY_TTL, KAFKA_TOPICS, EventTypes
from .models import OrderEvent

logger = logging.getLogger(__name__)


# Event Idempotency
def _processed_key(event_id, topic):
    return f"event:processed:{topic}:{event_id}"


def mark_event_processed(event_id, topic, ttl: int = EVENT_IDEMPOTENCY_TTL):
    try:
        set_cache_key(_processed_key(event_id, topic), "processed", ttl)
    except ValueError:
        logger.error(f"Could not remember event {event_id} as published")


def is_event_processed(event_id, topic) -> bool:
    try:
        return get_cache_key_value(_processed_key(event_id, topic)) == "processed"
    except ValueError:
        return False


def classify_transition(previous_status, new_status):
    if previous_status is None:
        return EventTypes.ORDER_PLACED
    if new_status == OrderStatus.ASSIGNED:
        return EventTypes.PARTNER_ASSIGNED
    if new_status == OrderStatus.ACCEPTED:
        return EventTypes.PARTNER_ACCEPTED
    if new_status == OrderStatus.READY and previous_status in (
        OrderStatus.ASSIGNED,
        OrderStatus.ACCEPTED,
    ):
        return EventTypes.PARTNER_REJECTED
    if new_status == OrderStatus.DELIVERED:
        return EventTypes.ORDER_DELIVERED
    if new_status == OrderStatus.CANCELLED:
        return EventTypes.ORDER_CANCELLED
    return EventTypes.ORDER_STATUS_CHANGED


class EventService:
    @staticmethod
    def record_transition(order, previous_status, actor_role, partner_id=None):
        """Write the event row for a committed-to-be transition and queue its publication."""
        event_type = classify_transition(previous_status, order.status)
        event_data = {
            "order_number": order.order_number,
            "version": order.version,
            "vendor_id": str(order.vendor_id),
        }
        if event_type == EventTypes.PARTNER_ASSIGNED:
            event_data["delivery_fee"] = str(order.delivery_fee)
            event_data["partner_earnings"] = str(order.partner_earnings)
        if event_type == EventTypes.PARTNER_REJECTED:
            last = order.rejections.order_by("-rejected_at", "-id").first()
            event_data["reason"] = last.reason if last else ""

        event = OrderEvent.objects.create(
            order=order,
            event_type=event_type,
            from_status=previous_status or "",
            to_status=order.status,
            actor_role=actor_role,
            partner_id=partner_id,
            event_data=event_data,
        )

        if settings.KAFKA_ENABLED:
            transaction.on_commit(lambda: EventService.publish(event), robust=True)
        return event

    @staticmethod
    def build_message(event):
        return {
            "event_id": str(event.id),
            "event_type": event.event_type,
            "timestamp": event.timestamp.isoformat(),
            "order_id": str(event.order_id),
            "partner_id": str(event.partner_id) if event.partner_id else None,
            "from_status": event.from_status or None,
            "to_status": event.to_status,
            "actor_role": event.actor_role,
            "data": event.event_data,
        }

    @staticmethod
    def publish(event):
        topics = [KAFKA_TOPICS["ORDER_STATUS_CHANGED"]]
        if event.event_type == EventTypes.PARTNER_ASSIGNED:
            topics.append(KAFKA_TOPICS["PARTNER_ASSIGNED"])

        message = EventService.build_message(event)
        published = 0
        for topic in topics:
            if is_event_processed(event.id, topic):
                logger.info(f"Event {event.id} already published to {topic}, skipping")
                continue
            if kafka_client.publish(topic=topic, event_data=message, key=str(event.order_id)):
                mark_event_processed(event.id, topic)
                published += 1
        return published

    @staticmethod
    def get_order_events(order_id):
        return OrderEvent.objects.filter(order_id=order_id).order_by("timestamp", "created_at")


event_service = EventService()
