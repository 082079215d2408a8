import logging
import re
from decimal import ROUND_HALF_UP, Decimal

from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from apps.core.exceptions import InvalidProfile, PartnerNotFound

from .constants import (
    DEFAULT_END_TIME,
    DEFAULT_START_TIME,
    DELIVERY_ZONES_LABEL,
    PROFILE_COMPLETE_THRESHOLD,
    REQUIRED_PROFILE_FIELDS,
    WEEKDAYS,
    WORKING_HOURS_LABEL,
    DeliveryOutcome,
)
from .models import DeliveryCredit, DeliveryPartner

logger = logging.getLogger(__name__)

PINCODE_RE = re.compile(r"^\d{6}$")
TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

PROFILE_FIELDS = [
    "full_name",
    "mobile_no",
    "alternate_no",
    "street",
    "city",
    "state",
    "pincode",
    "vehicle_type",
    "vehicle_number",
    "license_number",
    "account_holder_name",
    "account_number",
    "ifsc_code",
    "bank_name",
]
UPPERCASE_FIELDS = {"vehicle_number", "ifsc_code"}


def default_working_hours():
    return [
        {
            "day": day,
            "is_working": True,
            "start_time": DEFAULT_START_TIME,
            "end_time": DEFAULT_END_TIME,
        }
        for day in WEEKDAYS
    ]


def _clean_zones(zones):
    if not isinstance(zones, (list, tuple)):
        raise InvalidProfile("delivery_zones must be a list of pincodes.")
    cleaned = []
    for zone in zones:
        zone = str(zone or "").strip()
        if not zone:
            continue
        if not PINCODE_RE.match(zone):
            raise InvalidProfile(f"Invalid pincode in delivery zones: {zone}")
        if zone not in cleaned:
            cleaned.append(zone)
    return cleaned


def _merge_working_hours(current, updates):
    """Overlay per-day updates on the full weekly schedule."""
    if not isinstance(updates, (list, tuple)):
        raise InvalidProfile("working_hours must be a list of daily entries.")
    schedule = {entry["day"]: dict(entry) for entry in (current or default_working_hours())}
    for day in WEEKDAYS:
        schedule.setdefault(day, default_working_hours()[WEEKDAYS.index(day)])

    for entry in updates:
        day = str(entry.get("day", "")).lower()
        if day not in WEEKDAYS:
            raise InvalidProfile(f"Unknown weekday: {entry.get('day')!r}")
        merged = schedule[day]
        if "is_working" in entry:
            merged["is_working"] = bool(entry["is_working"])
        for key in ("start_time", "end_time"):
            if key in entry:
                if not TIME_RE.match(str(entry[key])):
                    raise InvalidProfile(f"{key} for {day} must be HH:MM.")
                merged[key] = entry[key]
        if merged["start_time"] >= merged["end_time"]:
            raise InvalidProfile(f"start_time must be before end_time for {day}.")
    return [schedule[day] for day in WEEKDAYS]


class PartnerDirectory:
    @staticmethod
    def get_partner(partner_id, for_update=False):
        queryset = DeliveryPartner.objects.all()
        if for_update:
            queryset = queryset.select_for_update()
        try:
            return queryset.get(id=partner_id)
        except (DeliveryPartner.DoesNotExist, ValueError):
            raise PartnerNotFound()

    @staticmethod
    def register(user_id, **profile):
        """Create the partner profile for a user account; repeat calls return it."""
        with transaction.atomic():
            partner, created = DeliveryPartner.objects.get_or_create(user_id=user_id)
            PartnerDirectory.initialize_working_hours(partner)
            if profile:
                partner = PartnerDirectory.update_profile(partner, **profile)
        if created:
            logger.info(f"Registered delivery partner {partner.id} for user {user_id}")
        return partner

    @staticmethod
    def initialize_working_hours(partner):
        if partner.working_hours:
            return partner
        partner.working_hours = default_working_hours()
        partner.save(update_fields=["working_hours", "updated_at"])
        return partner

    @staticmethod
    def update_profile(partner, **data):
        """Partial update of profile fields, working hours and delivery zones."""
        unknown = set(data) - set(PROFILE_FIELDS) - {"working_hours", "delivery_zones"}
        if unknown:
            raise InvalidProfile(f"Fields not editable: {', '.join(sorted(unknown))}")

        update_fields = []
        for field in PROFILE_FIELDS:
            if field not in data:
                continue
            value = str(data[field] or "").strip()
            if field in UPPERCASE_FIELDS:
                value = value.upper()
            if field == "vehicle_type" and value:
                valid = {choice for choice, _ in DeliveryPartner.VEHICLE_TYPES}
                if value not in valid:
                    raise InvalidProfile(f"Unknown vehicle type: {value}")
            if field == "pincode" and value and not PINCODE_RE.match(value):
                raise InvalidProfile(f"Invalid pincode: {value}")
            setattr(partner, field, value)
            update_fields.append(field)

        if "working_hours" in data:
            partner.working_hours = _merge_working_hours(
                partner.working_hours, data["working_hours"]
            )
            update_fields.append("working_hours")
        if "delivery_zones" in data:
            partner.delivery_zones = _clean_zones(data["delivery_zones"])
            update_fields.append("delivery_zones")

        if update_fields:
            partner.save(update_fields=update_fields + ["updated_at"])
        return partner

    @staticmethod
    def completion(partner):
        missing = []
        completed = 0
        for field, label in REQUIRED_PROFILE_FIELDS:
            if str(getattr(partner, field, "") or "").strip():
                completed += 1
            else:
                missing.append(label)

        if partner.working_hours:
            completed += 1
        else:
            missing.append(WORKING_HOURS_LABEL)
        if partner.delivery_zones:
            completed += 1
        else:
            missing.append(DELIVERY_ZONES_LABEL)

        total_required = len(REQUIRED_PROFILE_FIELDS) + 2
        percentage = int(
            (Decimal(completed * 100) / total_required).quantize(
                Decimal("1"), rounding=ROUND_HALF_UP
            )
        )
        return {
            "percentage": percentage,
            "is_complete": percentage >= PROFILE_COMPLETE_THRESHOLD,
            "missing_fields": missing,
            "completed_fields": completed,
            "total_required": total_required,
        }

    @staticmethod
    def set_availability(partner_id, desired):
        partner = PartnerDirectory.get_partner(partner_id)
        desired = bool(desired)
        if partner.is_available != desired:
            partner.is_available = desired
            partner.save(update_fields=["is_available", "updated_at"])
            logger.info(
                f"Partner {partner.id} is now {'available' if desired else 'off duty'}"
            )
        return partner

    @staticmethod
    def matchable_partners(pincode):
        """Verified, on-duty partners whose zones contain ``pincode``."""
        return PartnerDirectory.partners_covering([pincode], matchable_only=True)

    @staticmethod
    def partners_covering(pincodes, matchable_only=False):
        # Zone membership is checked in Python; JSON containment lookups are not portable
        partners = DeliveryPartner.objects.order_by("created_at")
        if matchable_only:
            partners = partners.filter(verification_status="approved", is_available=True)
        wanted = set(pincodes or [])
        return [partner for partner in partners if wanted.intersection(partner.delivery_zones or [])]

    @staticmethod
    def credit_delivery(partner_id, order_id, outcome, amount=Decimal("0.00"), when=None):
        """
        Add a terminal order to the partner's stats.

        Returns False when the order was already credited, so the call is
        safe to replay.
        """
        when = when or timezone.now()
        month = timezone.localtime(when).strftime("%Y-%m")
        amount = Decimal(amount or 0)

        with transaction.atomic():
            try:
                with transaction.atomic():
                    DeliveryCredit.objects.create(
                        partner_id=partner_id,
                        order_id=order_id,
                        outcome=outcome,
                        amount=amount,
                    )
            except IntegrityError:
                logger.info(f"Order {order_id} already credited to partner {partner_id}")
                return False

            partner = PartnerDirectory.get_partner(partner_id, for_update=True)
            updates = {"updated_at": timezone.now()}
            if outcome == DeliveryOutcome.COMPLETED:
                updates["completed_deliveries"] = F("completed_deliveries") + 1
                updates["total_earnings"] = F("total_earnings") + amount
                if partner.stats_month == month:
                    updates["month_deliveries"] = F("month_deliveries") + 1
                    updates["month_earnings"] = F("month_earnings") + amount
                elif month > partner.stats_month:
                    updates["stats_month"] = month
                    updates["month_deliveries"] = 1
                    updates["month_earnings"] = amount
            else:
                updates["cancelled_deliveries"] = F("cancelled_deliveries") + 1
            DeliveryPartner.objects.filter(id=partner_id).update(**updates)

        logger.info(f"Credited {outcome} order {order_id} ({amount}) to partner {partner_id}")
        return True

    @staticmethod
    def record_rating(partner_id, score):
        with transaction.atomic():
            partner = PartnerDirectory.get_partner(partner_id, for_update=True)
            total = partner.rating_average * partner.total_ratings + Decimal(score)
            partner.total_ratings += 1
            partner.rating_average = (total / partner.total_ratings).quantize(
                Decimal("0.01"), rounding=ROUND_HALF_UP
            )
            partner.save(update_fields=["rating_average", "total_ratings", "updated_at"])
        return partner


partner_directory = PartnerDirectory()
