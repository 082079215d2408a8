import math
from decimal import Decimal, InvalidOperation

from .constants import (
    BASE_DELIVERY_FEE,
    BASE_PARTNER_SHARE,
    FEE_PER_EXTRA_KM,
    FREE_DISTANCE_KM,
    PLATFORM_MARGIN,
)


def calculate_delivery_fee(distance_km=None):
    """
    Return ``(delivery_fee, partner_share)`` for a trip of ``distance_km``.

    Up to five km the flat fee applies. Every full km beyond that adds to the
    fee and the platform keeps a fixed margin of it.
    """
    try:
        distance = Decimal(str(distance_km)) if distance_km is not None else Decimal("0")
    except (InvalidOperation, ValueError):
        distance = Decimal("0")
    if not distance.is_finite():
        distance = Decimal("0")

    if distance <= FREE_DISTANCE_KM:
        return BASE_DELIVERY_FEE, BASE_PARTNER_SHARE

    extra_km = math.floor(distance - FREE_DISTANCE_KM)
    fee = BASE_DELIVERY_FEE + FEE_PER_EXTRA_KM * extra_km
    return fee, fee - PLATFORM_MARGIN
