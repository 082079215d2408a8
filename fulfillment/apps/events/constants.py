KAFKA_TOPICS = {
    "ORDER_STATUS_CHANGED": "fulfillment.order.status.changed",
    "PARTNER_ASSIGNED": "fulfillment.partner.assigned",
}


# Event Types
class EventTypes:
    ORDER_PLACED = "order_placed"
    ORDER_STATUS_CHANGED = "order_status_changed"
    PARTNER_ASSIGNED = "partner_assigned"
    PARTNER_ACCEPTED = "partner_accepted"
    PARTNER_REJECTED = "partner_rejected"
    ORDER_DELIVERED = "order_delivered"
    ORDER_CANCELLED = "order_cancelled"

    CHOICES = [
        (ORDER_PLACED, "Order Placed"),
        (ORDER_STATUS_CHANGED, "Order Status Changed"),
        (PARTNER_ASSIGNED, "Partner Assigned"),
        (PARTNER_ACCEPTED, "Partner Accepted"),
        (PARTNER_REJECTED, "Partner Rejected"),
        (ORDER_DELIVERED, "Order Delivered"),
        (ORDER_CANCELLED, "Order Cancelled"),
    ]


# Published event ids are remembered this long
EVENT_IDEMPOTENCY_TTL = 86400

# DLQ retry backoff cap, in minutes
DLQ_MAX_BACKOFF_MINUTES = 60
DLQ_DEFAULT_MAX_RETRIES = 5

# Per-topic layout for create_kafka_topics. Status changes are keyed by
# order id, so partitions bound how many orders are consumed in parallel.
KAFKA_TOPIC_SETTINGS = {
    KAFKA_TOPICS["ORDER_STATUS_CHANGED"]: {
        "partitions": 6,
        "config": {"retention.ms": str(7 * 24 * 3600 * 1000)},
    },
    KAFKA_TOPICS["PARTNER_ASSIGNED"]: {
        "partitions": 3,
        "config": {"retention.ms": str(3 * 24 * 3600 * 1000)},
    },
}
