import logging
from decimal import Decimal, InvalidOperation

from django.db import IntegrityError, transaction
from django.db.models import DateTimeField, F, Value
from django.db.models.functions import Coalesce
from django.utils import timezone

from apps.core.exceptions import (
    InvalidOrder,
    InvalidTransition,
    OrderConflict,
    OrderNotFound,
)
from apps.vendors.services import get_vendor

from .constants import (
    ORDER_NUMBER_MAX_RETRIES,
    PAYMENT_METHODS,
    ROLE_TARGETS,
    STATUS_TIMESTAMP_FIELDS,
    ActorRole,
    OrderStatus,
    can_transition,
)
from .models import Order, OrderItem, OrderRejection
from .signals import order_rated, order_status_changed

logger = logging.getLogger(__name__)


def _price_items(items):
    """Validate checkout lines and compute their subtotals from the snapshot prices."""
    if not items:
        raise InvalidOrder("An order needs at least one item.")

    lines = []
    for index, item in enumerate(items):
        name = str(item.get("name", "")).strip()
        if not name:
            raise InvalidOrder(f"Item {index + 1} has no name.")
        if not item.get("menu_item_id"):
            raise InvalidOrder(f"Item '{name}' has no menu item reference.")
        try:
            unit_price = Decimal(str(item.get("price")))
        except (InvalidOperation, TypeError, ValueError):
            raise InvalidOrder(f"Item '{name}' has an invalid price.")
        if unit_price < 0:
            raise InvalidOrder(f"Item '{name}' has a negative price.")
        try:
            quantity = int(item.get("quantity", 1))
        except (TypeError, ValueError):
            raise InvalidOrder(f"Item '{name}' has an invalid quantity.")
        if quantity < 1:
            raise InvalidOrder(f"Item '{name}' needs a quantity of at least 1.")

        lines.append(
            {
                "menu_item_id": item["menu_item_id"],
                "name": name,
                "unit_price": unit_price,
                "quantity": quantity,
                "subtotal": unit_price * quantity,
            }
        )
    return lines


class OrderLedger:
    @staticmethod
    def get_order(order_id, for_update=False):
        queryset = Order.objects.all()
        if for_update:
            queryset = queryset.select_for_update()
        try:
            return queryset.get(id=order_id)
        except (Order.DoesNotExist, ValueError):
            raise OrderNotFound()

    @staticmethod
    def create_order(
        customer_id,
        vendor_id,
        items,
        customer_name,
        customer_phone,
        customer_address,
        delivery_pincode,
        payment_method="cod",
        payment_confirmed=False,
        payment_reference="",
        restaurant_name=None,
        restaurant_address=None,
    ):
        vendor = get_vendor(vendor_id)
        if payment_method not in dict(PAYMENT_METHODS):
            raise InvalidOrder(f"Unknown payment method: {payment_method}")
        if not str(delivery_pincode or "").strip():
            raise InvalidOrder("A delivery pincode is required.")

        lines = _price_items(items)
        total_amount = sum((line["subtotal"] for line in lines), Decimal("0.00"))

        for attempt in range(1, ORDER_NUMBER_MAX_RETRIES + 1):
            try:
                with transaction.atomic():
                    order = Order.objects.create(
                        order_number=Order.generate_order_number(),
                        customer_id=customer_id,
                        vendor=vendor,
                        customer_name=customer_name,
                        customer_phone=customer_phone,
                        customer_address=customer_address,
                        delivery_pincode=str(delivery_pincode).strip(),
                        restaurant_name=restaurant_name or vendor.restaurant_name,
                        restaurant_address=restaurant_address or vendor.address,
                        total_amount=total_amount,
                        payment_method=payment_method,
                        payment_status="completed" if payment_confirmed else "pending",
                        payment_reference=payment_reference or "",
                    )
                    OrderItem.objects.bulk_create(
                        [OrderItem(order=order, **line) for line in lines]
                    )
                    order_status_changed.send(
                        sender=Order,
                        order=order,
                        previous_status=None,
                        actor_role=ActorRole.CUSTOMER,
                        partner_id=None,
                    )
                break
            except IntegrityError:
                if attempt == ORDER_NUMBER_MAX_RETRIES:
                    raise
                logger.warning(f"Order number collision, retrying ({attempt})")

        logger.info(f"Order {order.order_number} placed for vendor {vendor.id}: {total_amount}")
        return order

    @staticmethod
    def apply_transition(
        order,
        target,
        actor_role,
        changes=None,
        extra_filters=None,
        rejection=None,
        conflict_error=OrderConflict,
    ):
        """
        Move ``order`` to ``target`` with one conditional UPDATE.

        The UPDATE only matches while the row still has the status and
        version that were read, so a concurrent writer makes it match zero
        rows and ``conflict_error`` is raised instead of overwriting.
        """
        if not can_transition(order.status, target):
            raise InvalidTransition(order.status, target)

        now = timezone.now()
        stamp_field = STATUS_TIMESTAMP_FIELDS[target]
        values = {
            "status": target,
            "version": F("version") + 1,
            "updated_at": now,
            stamp_field: Coalesce(F(stamp_field), Value(now, output_field=DateTimeField())),
        }
        values.update(changes or {})
        filters = {"id": order.id, "status": order.status, "version": order.version}
        filters.update(extra_filters or {})

        previous_status = order.status
        previous_partner_id = order.delivery_partner_id

        with transaction.atomic():
            if not Order.objects.filter(**filters).update(**values):
                logger.warning(
                    f"Order {order.order_number}: {previous_status} -> {target} lost to a concurrent write"
                )
                raise conflict_error()
            if rejection:
                OrderRejection.objects.create(order_id=order.id, rejected_at=now, **rejection)
            order.refresh_from_db()
            order_status_changed.send(
                sender=Order,
                order=order,
                previous_status=previous_status,
                actor_role=actor_role,
                partner_id=order.delivery_partner_id or previous_partner_id,
            )

        logger.info(f"Order {order.order_number}: {previous_status} -> {target} by {actor_role}")
        return order

    @staticmethod
    def transition_status(order_id, target, actor_role, expected_version=None):
        if actor_role not in ROLE_TARGETS:
            raise InvalidOrder(f"Unknown actor role: {actor_role}")

        with transaction.atomic():
            order = OrderLedger.get_order(order_id, for_update=True)
            if target not in OrderStatus.values:
                raise InvalidTransition(order.status, target, detail=f"Unknown status '{target}'.")
            if expected_version is not None and order.version != int(expected_version):
                raise OrderConflict()
            if target not in ROLE_TARGETS[actor_role]:
                raise InvalidTransition(
                    order.status,
                    target,
                    detail=f"Role '{actor_role}' cannot move an order to '{target}'.",
                )
            if target == OrderStatus.READY and order.status in (
                OrderStatus.ASSIGNED,
                OrderStatus.ACCEPTED,
            ):
                raise InvalidTransition(
                    order.status,
                    target,
                    detail="A bound order returns to ready only when its partner releases it.",
                )
            return OrderLedger.apply_transition(order, target, actor_role)

    @staticmethod
    def rate_order(order_id, overall, food=None, delivery=None, feedback=""):
        ratings = {"overall_rating": overall, "food_rating": food, "delivery_rating": delivery}
        for field, value in ratings.items():
            if value is None and field != "overall_rating":
                continue
            if not isinstance(value, int) or isinstance(value, bool) or not 1 <= value <= 5:
                raise InvalidOrder(f"{field} must be a whole number from 1 to 5.")

        with transaction.atomic():
            order = OrderLedger.get_order(order_id, for_update=True)
            if order.status != OrderStatus.DELIVERED:
                raise InvalidOrder("Only delivered orders can be rated.")
            if order.rated_at:
                raise InvalidOrder("This order has already been rated.")

            updated = Order.objects.filter(
                id=order.id, version=order.version, rated_at__isnull=True
            ).update(
                **ratings,
                feedback=feedback or "",
                rated_at=timezone.now(),
                version=F("version") + 1,
                updated_at=timezone.now(),
            )
            if not updated:
                raise OrderConflict()
            order.refresh_from_db()
            order_rated.send(
                sender=Order,
                order=order,
                partner_id=order.delivery_partner_id,
                delivery_rating=delivery,
            )
        return order


order_ledger = OrderLedger()
