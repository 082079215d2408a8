from decimal import Decimal

# Delivery fee schedule
BASE_DELIVERY_FEE = Decimal("25.00")
BASE_PARTNER_SHARE = Decimal("20.00")
FREE_DISTANCE_KM = 5
FEE_PER_EXTRA_KM = Decimal("5.00")
PLATFORM_MARGIN = Decimal("5.00")

DEFAULT_REJECTION_REASON = "Not specified"

# Partner order listings
ORDER_LIST_TYPES = ["available", "assigned", "active", "completed"]
AVAILABLE_ORDERS_LIMIT = 20
COMPLETED_ORDERS_LIMIT = 50
ALL_ORDERS_LIMIT = 100

# Unassigned orders older than this are cancelled by the retry job
UNASSIGNED_MAX_AGE_HOURS = 24
