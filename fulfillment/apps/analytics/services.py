"""
Read-only rollups over delivered orders.

Windows are computed in the configured local time zone: ``today`` starts at
local midnight and ``week`` at Monday 00:00 of the current ISO week. Nothing
here is cached; every call scans the orders table.
"""
from datetime import timedelta
from decimal import Decimal

from django.db.models import Count, DecimalField, Sum, Value
from django.db.models.functions import Coalesce
from django.utils import timezone

from apps.core.exceptions import InvalidOrder
from apps.deliveries.services import AssignmentCoordinator
from apps.orders.constants import TERMINAL_STATES, OrderStatus
from apps.orders.models import Order
from apps.partners.services import PartnerDirectory

from .constants import StatsWindow

ZERO = Value(Decimal("0.00"), output_field=DecimalField(max_digits=12, decimal_places=2))


def window_start(window, now=None):
    """Inclusive lower bound of ``window``, or None for all time."""
    if window not in StatsWindow.CHOICES:
        raise InvalidOrder(f"Unknown stats window: {window}")
    if window == StatsWindow.ALL:
        return None
    local_now = timezone.localtime(now or timezone.now())
    midnight = local_now.replace(hour=0, minute=0, second=0, microsecond=0)
    if window == StatsWindow.TODAY:
        return midnight
    return midnight - timedelta(days=midnight.weekday())


def _delivered(queryset, window, now=None):
    queryset = queryset.filter(status=OrderStatus.DELIVERED)
    start = window_start(window, now)
    if start is not None:
        queryset = queryset.filter(delivered_at__gte=start)
    return queryset


class StatsAggregator:
    @staticmethod
    def partner_stats(partner, window=StatsWindow.ALL, now=None):
        totals = _delivered(Order.objects.filter(delivery_partner=partner), window, now).aggregate(
            deliveries=Count("id"),
            earnings=Coalesce(Sum("partner_earnings"), ZERO),
        )
        return {"window": window, **totals}

    @staticmethod
    def vendor_stats(vendor, window=StatsWindow.ALL, now=None):
        totals = _delivered(Order.objects.filter(vendor=vendor), window, now).aggregate(
            orders=Count("id"),
            revenue=Coalesce(Sum("total_amount"), ZERO),
        )
        return {"window": window, **totals}

    @staticmethod
    def partner_dashboard(partner, now=None):
        windows = {
            window: StatsAggregator.partner_stats(partner, window, now)
            for window in StatsWindow.CHOICES
        }
        return {
            "partner": {
                "id": str(partner.id),
                "name": partner.full_name,
                "is_available": partner.is_available,
                "is_verified": partner.is_verified,
                "verification_status": partner.verification_status,
            },
            "stats": windows,
            "orders": AssignmentCoordinator.partner_order_counts(partner),
            "lifetime": {
                "completed_deliveries": partner.completed_deliveries,
                "cancelled_deliveries": partner.cancelled_deliveries,
                "total_earnings": partner.total_earnings,
                "stats_month": partner.stats_month,
                "month_deliveries": partner.month_deliveries,
                "month_earnings": partner.month_earnings,
            },
            "rating": {
                "average": partner.rating_average,
                "total": partner.total_ratings,
            },
            "completion": PartnerDirectory.completion(partner),
        }

    @staticmethod
    def vendor_summary(vendor, now=None):
        orders = Order.objects.filter(vendor=vendor)
        by_status = dict(
            orders.order_by().values_list("status").annotate(count=Count("id"))
        )
        return {
            "vendor": {"id": str(vendor.id), "restaurant_name": vendor.restaurant_name},
            "total_orders": sum(by_status.values()),
            "active_orders": sum(
                count for status, count in by_status.items() if status not in TERMINAL_STATES
            ),
            "by_status": {status: by_status.get(status, 0) for status in OrderStatus.values},
            "revenue": {
                window: StatsAggregator.vendor_stats(vendor, window, now)
                for window in StatsWindow.CHOICES
            },
        }


stats_aggregator = StatsAggregator()
