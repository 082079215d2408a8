WEEKDAYS = [
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
]

DEFAULT_START_TIME = "09:00"
DEFAULT_END_TIME = "22:00"

# Profile counts as complete at or above this percentage
PROFILE_COMPLETE_THRESHOLD = 90

# (attribute, label) pairs scored by the completion check
REQUIRED_PROFILE_FIELDS = [
    ("full_name", "Full Name"),
    ("mobile_no", "Mobile Number"),
    ("street", "Street Address"),
    ("city", "City"),
    ("state", "State"),
    ("pincode", "Pincode"),
    ("vehicle_type", "Vehicle Type"),
    ("vehicle_number", "Vehicle Number"),
    ("license_number", "License Number"),
    ("account_holder_name", "Account Holder Name"),
    ("account_number", "Account Number"),
    ("ifsc_code", "IFSC Code"),
    ("bank_name", "Bank Name"),
]

WORKING_HOURS_LABEL = "Working Hours"
DELIVERY_ZONES_LABEL = "Delivery Zones"


class VerificationAction:
    APPROVE = "approve"
    REJECT = "reject"

    # Request verbs and stored forms both normalize to the stored form
    NORMALIZED = {
        "approve": "approved",
        "approved": "approved",
        "reject": "rejected",
        "rejected": "rejected",
    }


class DeliveryOutcome:
    COMPLETED = "completed"
    CANCELLED = "cancelled"
