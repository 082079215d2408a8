"""Order status values and the transition table every caller goes through."""

from django.db import models


class OrderStatus(models.TextChoices):
    PLACED = "placed", "Placed"
    CONFIRMED = "confirmed", "Confirmed"
    PREPARING = "preparing", "Preparing"
    READY = "ready", "Ready"
    ASSIGNED = "assigned", "Assigned"
    ACCEPTED = "accepted", "Accepted"
    PICKED_UP = "picked_up", "Picked Up"
    OUT_FOR_DELIVERY = "out_for_delivery", "Out for Delivery"
    DELIVERED = "delivered", "Delivered"
    CANCELLED = "cancelled", "Cancelled"


VALID_TRANSITIONS = {
    OrderStatus.PLACED: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.PREPARING, OrderStatus.CANCELLED},
    OrderStatus.PREPARING: {OrderStatus.READY, OrderStatus.CANCELLED},
    OrderStatus.READY: {OrderStatus.ASSIGNED, OrderStatus.CANCELLED},
    # back to ready when the partner rejects
    OrderStatus.ASSIGNED: {OrderStatus.ACCEPTED, OrderStatus.READY, OrderStatus.CANCELLED},
    # back to ready when the partner backs out
    OrderStatus.ACCEPTED: {OrderStatus.PICKED_UP, OrderStatus.READY, OrderStatus.CANCELLED},
    OrderStatus.PICKED_UP: {OrderStatus.OUT_FOR_DELIVERY, OrderStatus.CANCELLED},
    OrderStatus.OUT_FOR_DELIVERY: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
}

TERMINAL_STATES = {OrderStatus.DELIVERED, OrderStatus.CANCELLED}

# Statuses in which a partner is actively carrying the order
ACTIVE_DELIVERY_STATES = {
    OrderStatus.ACCEPTED,
    OrderStatus.PICKED_UP,
    OrderStatus.OUT_FOR_DELIVERY,
}

# First-entry timestamp column for each status
STATUS_TIMESTAMP_FIELDS = {
    OrderStatus.PLACED: "placed_at",
    OrderStatus.CONFIRMED: "confirmed_at",
    OrderStatus.PREPARING: "preparing_at",
    OrderStatus.READY: "ready_at",
    OrderStatus.ASSIGNED: "assigned_at",
    OrderStatus.ACCEPTED: "accepted_at",
    OrderStatus.PICKED_UP: "picked_up_at",
    OrderStatus.OUT_FOR_DELIVERY: "out_for_delivery_at",
    OrderStatus.DELIVERED: "delivered_at",
    OrderStatus.CANCELLED: "cancelled_at",
}


class ActorRole:
    CUSTOMER = "customer"
    VENDOR = "vendor"
    PARTNER = "partner"
    SYSTEM = "system"

    CHOICES = [CUSTOMER, VENDOR, PARTNER, SYSTEM]


# Targets each role may request through a plain status change. Assignment,
# acceptance and the return to ready go through the assignment coordinator.
ROLE_TARGETS = {
    ActorRole.CUSTOMER: {OrderStatus.CANCELLED},
    ActorRole.VENDOR: {
        OrderStatus.CONFIRMED,
        OrderStatus.PREPARING,
        OrderStatus.READY,
        OrderStatus.CANCELLED,
    },
    ActorRole.PARTNER: {
        OrderStatus.PICKED_UP,
        OrderStatus.OUT_FOR_DELIVERY,
        OrderStatus.DELIVERED,
    },
    ActorRole.SYSTEM: set(OrderStatus.values)
    - {OrderStatus.PLACED, OrderStatus.ASSIGNED, OrderStatus.ACCEPTED},
}

PAYMENT_METHODS = [
    ("cod", "Cash on Delivery"),
    ("razorpay", "Razorpay"),
    ("card", "Card"),
    ("upi", "UPI"),
    ("wallet", "Wallet"),
]

ORDER_NUMBER_MAX_RETRIES = 5


def can_transition(current, target):
    return target in VALID_TRANSITIONS[OrderStatus(current)]
