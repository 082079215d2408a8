import logging

from django.dispatch import receiver

from apps.orders.constants import OrderStatus
from apps.orders.signals import order_rated, order_status_changed

from .constants import DeliveryOutcome
from .services import PartnerDirectory

logger = logging.getLogger(__name__)


@receiver(order_status_changed, dispatch_uid="partners.credit_terminal_order")
def credit_terminal_order(sender, order, previous_status, actor_role, partner_id, **kwargs):
    if not partner_id or order.status not in (OrderStatus.DELIVERED, OrderStatus.CANCELLED):
        return
    # A cancellation only counts against the partner while the order was still bound to them
    if order.status == OrderStatus.CANCELLED and not order.delivery_partner_id:
        return

    if order.status == OrderStatus.DELIVERED:
        PartnerDirectory.credit_delivery(
            partner_id,
            order.id,
            DeliveryOutcome.COMPLETED,
            amount=order.partner_earnings,
            when=order.delivered_at,
        )
    else:
        PartnerDirectory.credit_delivery(
            partner_id, order.id, DeliveryOutcome.CANCELLED, when=order.cancelled_at
        )


@receiver(order_rated, dispatch_uid="partners.record_delivery_rating")
def record_delivery_rating(sender, order, partner_id, delivery_rating, **kwargs):
    if partner_id and delivery_rating:
        PartnerDirectory.record_rating(partner_id, delivery_rating)
