"""
Assignment of ready orders to delivery partners.

The coordinator never writes an order or a partner row itself: order writes go
through ``OrderLedger.apply_transition`` (one conditional UPDATE per write) and
partner reads through ``PartnerDirectory``. Binding a partner is exclusive per
order; the UPDATE only matches a ready, unbound row at the version that was
read, so of two concurrent assigns exactly one wins and the other gets
``AlreadyAssigned``.
"""
import logging
from datetime import timedelta

from django.db import transaction
from django.db.models import Count
from django.utils import timezone

from apps.core.exceptions import (
    AlreadyAssigned,
    AssignmentRejected,
    InvalidOrder,
    InvalidTransition,
    NotAssignedToYou,
    OrderConflict,
)
from apps.orders.constants import ACTIVE_DELIVERY_STATES, ActorRole, OrderStatus
from apps.orders.models import Order
from apps.orders.services import OrderLedger
from apps.partners.services import PartnerDirectory

from .constants import (
    ALL_ORDERS_LIMIT,
    AVAILABLE_ORDERS_LIMIT,
    COMPLETED_ORDERS_LIMIT,
    DEFAULT_REJECTION_REASON,
    ORDER_LIST_TYPES,
    UNASSIGNED_MAX_AGE_HOURS,
)
from .fees import calculate_delivery_fee

logger = logging.getLogger(__name__)

PARTNER_ADVANCE_TARGETS = (
    OrderStatus.PICKED_UP,
    OrderStatus.OUT_FOR_DELIVERY,
    OrderStatus.DELIVERED,
)
BOUND_STATES = {OrderStatus.ASSIGNED} | ACTIVE_DELIVERY_STATES

CLEARED_PARTNER_SNAPSHOT = {
    "delivery_partner": None,
    "partner_name": "",
    "partner_phone": "",
    "delivery_assigned_at": None,
    "delivery_accepted_at": None,
}


def _owned_by(order, partner_id):
    return order.delivery_partner_id is not None and str(order.delivery_partner_id) == str(
        partner_id
    )


class AssignmentCoordinator:
    @staticmethod
    def assign(order_id, partner_id, expected_version=None, distance_km=None):
        with transaction.atomic():
            order = OrderLedger.get_order(order_id, for_update=True)
            partner = PartnerDirectory.get_partner(partner_id)

            if expected_version is not None and order.version != int(expected_version):
                raise AlreadyAssigned()
            if order.delivery_partner_id and order.status in BOUND_STATES:
                raise AlreadyAssigned()
            if order.status != OrderStatus.READY:
                raise AssignmentRejected(AssignmentRejected.ORDER_NOT_READY)
            if not partner.is_verified:
                raise AssignmentRejected(AssignmentRejected.PARTNER_NOT_VERIFIED)
            if not partner.is_available:
                raise AssignmentRejected(AssignmentRejected.PARTNER_UNAVAILABLE)
            if not partner.covers(order.delivery_pincode):
                raise AssignmentRejected(AssignmentRejected.ZONE_MISMATCH)

            if distance_km is None:
                distance_km = order.distance_km
            fee, share = calculate_delivery_fee(distance_km)
            order = OrderLedger.apply_transition(
                order,
                OrderStatus.ASSIGNED,
                ActorRole.SYSTEM,
                changes={
                    "delivery_partner": partner,
                    "partner_name": partner.full_name,
                    "partner_phone": partner.mobile_no,
                    "delivery_fee": fee,
                    "partner_earnings": share,
                    "distance_km": distance_km or 0,
                    "delivery_assigned_at": timezone.now(),
                    "delivery_accepted_at": None,
                },
                extra_filters={"delivery_partner__isnull": True},
                conflict_error=AlreadyAssigned,
            )

        logger.info(
            f"Order {order.order_number} assigned to partner {partner.id} "
            f"(fee {fee}, partner share {share})"
        )
        return order

    @staticmethod
    def accept(order_id, partner_id):
        with transaction.atomic():
            order = OrderLedger.get_order(order_id, for_update=True)
            if order.status != OrderStatus.ASSIGNED:
                raise InvalidTransition(order.status, OrderStatus.ACCEPTED)
            if not _owned_by(order, partner_id):
                raise NotAssignedToYou()
            return OrderLedger.apply_transition(
                order,
                OrderStatus.ACCEPTED,
                ActorRole.PARTNER,
                changes={"delivery_accepted_at": timezone.now()},
                extra_filters={"delivery_partner_id": order.delivery_partner_id},
            )

    @staticmethod
    def _release(order_id, partner_id, reason, from_status):
        with transaction.atomic():
            order = OrderLedger.get_order(order_id, for_update=True)
            if order.status != from_status:
                raise InvalidTransition(order.status, OrderStatus.READY)
            if not _owned_by(order, partner_id):
                raise NotAssignedToYou()
            order = OrderLedger.apply_transition(
                order,
                OrderStatus.READY,
                ActorRole.PARTNER,
                changes=dict(CLEARED_PARTNER_SNAPSHOT),
                extra_filters={"delivery_partner_id": order.delivery_partner_id},
                rejection={
                    "partner_id": order.delivery_partner_id,
                    "reason": (reason or "").strip() or DEFAULT_REJECTION_REASON,
                },
            )

        logger.info(f"Partner {partner_id} released order {order.order_number}: {reason!r}")
        return order

    @staticmethod
    def reject(order_id, partner_id, reason=""):
        """Decline an assigned order; it returns to the ready pool."""
        return AssignmentCoordinator._release(order_id, partner_id, reason, OrderStatus.ASSIGNED)

    @staticmethod
    def back_out(order_id, partner_id, reason=""):
        """Give up an accepted order before pickup; it returns to the ready pool."""
        return AssignmentCoordinator._release(order_id, partner_id, reason, OrderStatus.ACCEPTED)

    @staticmethod
    def advance(order_id, partner_id, next_status):
        with transaction.atomic():
            order = OrderLedger.get_order(order_id, for_update=True)
            if next_status not in PARTNER_ADVANCE_TARGETS:
                raise InvalidTransition(
                    order.status,
                    next_status,
                    detail=f"Partners can only move orders to {', '.join(PARTNER_ADVANCE_TARGETS)}.",
                )
            if not _owned_by(order, partner_id):
                raise NotAssignedToYou()
            return OrderLedger.apply_transition(
                order,
                next_status,
                ActorRole.PARTNER,
                extra_filters={"delivery_partner_id": order.delivery_partner_id},
            )

    @staticmethod
    def candidates(order, skip_rejected=True):
        """Matchable partners for ``order``: best rated first, then least busy."""
        partners = PartnerDirectory.matchable_partners(order.delivery_pincode)
        if skip_rejected:
            rejected = {str(pid) for pid in order.rejections.values_list("partner_id", flat=True)}
            partners = [partner for partner in partners if str(partner.id) not in rejected]
        if not partners:
            return []

        workload = dict(
            Order.objects.filter(
                delivery_partner__in=[partner.id for partner in partners],
                status__in=BOUND_STATES,
            )
            .values_list("delivery_partner")
            .annotate(count=Count("id"))
        )
        return sorted(
            partners,
            key=lambda partner: (-partner.rating_average, workload.get(partner.id, 0)),
        )

    @staticmethod
    def auto_assign(order_id):
        order = OrderLedger.get_order(order_id)
        if order.status != OrderStatus.READY or order.delivery_partner_id:
            return None

        for partner in AssignmentCoordinator.candidates(order):
            try:
                return AssignmentCoordinator.assign(
                    order.id, partner.id, expected_version=order.version
                )
            except AssignmentRejected as e:
                logger.info(f"Skipping partner {partner.id} for {order.order_number}: {e.reason}")
            except AlreadyAssigned:
                logger.info(f"Order {order.order_number} was assigned concurrently")
                return None

        logger.warning(f"No partner available for order {order.order_number}")
        return None

    @staticmethod
    def retry_unassigned(max_age_hours=UNASSIGNED_MAX_AGE_HOURS):
        cutoff = timezone.now() - timedelta(hours=max_age_hours)
        result = {"retried": 0, "assigned": 0, "cancelled": 0}

        pending = Order.objects.filter(
            status=OrderStatus.READY, delivery_partner__isnull=True
        ).order_by("ready_at")
        for order in pending:
            if order.ready_at and order.ready_at < cutoff:
                # Only matches while the row is still the ready, unbound one read above
                try:
                    OrderLedger.apply_transition(
                        order,
                        OrderStatus.CANCELLED,
                        ActorRole.SYSTEM,
                        extra_filters={"delivery_partner__isnull": True},
                    )
                except (OrderConflict, InvalidTransition):
                    logger.info(f"Order {order.order_number} changed before it could be cancelled, skipping")
                    continue
                result["cancelled"] += 1
                logger.warning(f"Cancelled order {order.order_number}: unassigned for too long")
                continue
            result["retried"] += 1
            if AssignmentCoordinator.auto_assign(order.id):
                result["assigned"] += 1

        logger.info(f"Retry of unassigned orders finished: {result}")
        return result

    @staticmethod
    def partner_orders(partner_id, kind=None):
        partner = PartnerDirectory.get_partner(partner_id)
        if kind and kind not in ORDER_LIST_TYPES:
            raise InvalidOrder(f"Unknown order list type: {kind}")

        if kind == "available":
            return list(available_orders_for(partner).order_by("ready_at")[:AVAILABLE_ORDERS_LIMIT])

        mine = Order.objects.filter(delivery_partner=partner)
        if kind == "assigned":
            return list(mine.filter(status=OrderStatus.ASSIGNED).order_by("-delivery_assigned_at"))
        if kind == "active":
            return list(
                mine.filter(status__in=ACTIVE_DELIVERY_STATES).order_by("-delivery_accepted_at")
            )
        if kind == "completed":
            return list(
                mine.filter(status=OrderStatus.DELIVERED).order_by("-delivered_at")[
                    :COMPLETED_ORDERS_LIMIT
                ]
            )
        return list(mine.order_by("-created_at")[:ALL_ORDERS_LIMIT])

    @staticmethod
    def partner_order_counts(partner):
        mine = Order.objects.filter(delivery_partner=partner)
        return {
            "available": available_orders_for(partner).count(),
            "assigned": mine.filter(status=OrderStatus.ASSIGNED).count(),
            "active": mine.filter(status__in=ACTIVE_DELIVERY_STATES).count(),
            "completed": mine.filter(status=OrderStatus.DELIVERED).count(),
        }


def available_orders_for(partner):
    """Ready, unbound orders in the partner's zones that they have not turned down."""
    return Order.objects.filter(
        status=OrderStatus.READY,
        delivery_partner__isnull=True,
        delivery_pincode__in=list(partner.delivery_zones or []),
    ).exclude(rejections__partner=partner)


assignment_coordinator = AssignmentCoordinator()
