"""
Order ledger signals.

Receivers run inside the transaction that wrote the order, so anything they
write commits or rolls back together with the status change.
"""

from django.dispatch import Signal

# Provides: order, previous_status, actor_role, partner_id
order_status_changed = Signal()
# Provides: order, partner_id, delivery_rating
order_rated = Signal()
