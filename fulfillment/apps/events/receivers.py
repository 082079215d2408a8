from django.dispatch import receiver

from apps.orders.signals import order_status_changed

from .services import EventService


@receiver(order_status_changed, dispatch_uid="events.record_order_event")
def record_order_event(sender, order, previous_status, actor_role, partner_id, **kwargs):
    EventService.record_transition(order, previous_status, actor_role, partner_id)
