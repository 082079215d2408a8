"""
Vendor-driven verification of delivery partners.

A vendor may only approve or reject partners whose delivery zones overlap the
pincodes the vendor serves. Every decision is appended to the partner's
verification history; the current decision is read back from the latest
history entry, and ``verification_status`` is kept in step as an indexed
projection for matching queries.
"""
import logging

from django.db import transaction
from django.utils import timezone

from apps.core.exceptions import CoverageMismatch, InvalidProfile
from apps.vendors.services import get_vendor

from .constants import VerificationAction
from .models import DeliveryPartner, VerificationRecord
from .services import PartnerDirectory

logger = logging.getLogger(__name__)


def normalize_action(action):
    normalized = VerificationAction.NORMALIZED.get(str(action or "").strip().lower())
    if normalized is None:
        raise InvalidProfile("Invalid action. Use approve or reject")
    return normalized


class VerificationCoordinator:
    @staticmethod
    def can_verify(vendor, partner):
        zones = set(partner.delivery_zones or [])
        return bool(zones.intersection(vendor.coverage_pincodes))

    @staticmethod
    def decide(vendor_id, partner_id, action, reason=""):
        vendor = get_vendor(vendor_id)
        enum_action = normalize_action(action)

        with transaction.atomic():
            partner = PartnerDirectory.get_partner(partner_id, for_update=True)
            if not VerificationCoordinator.can_verify(vendor, partner):
                logger.warning(
                    f"Vendor {vendor.id} has no pincode overlap with partner {partner.id}"
                )
                raise CoverageMismatch(
                    vendor_pincodes=vendor.coverage_pincodes,
                    partner_pincodes=list(partner.delivery_zones or []),
                )

            if not reason:
                verb = "Approved" if enum_action == VerificationRecord.ACTION_APPROVED else "Rejected"
                reason = f"{verb} by vendor"

            VerificationRecord.objects.create(
                partner=partner,
                vendor=vendor,
                vendor_name=vendor.restaurant_name,
                action=enum_action,
                reason=reason,
            )
            partner.verification_status = enum_action
            partner.save(update_fields=["verification_status", "updated_at"])

        logger.info(
            f"Delivery partner {partner.id} {enum_action} by vendor {vendor.restaurant_name}"
        )
        return partner

    @staticmethod
    def summary(partner):
        history = list(partner.verification_history.all())
        last = history[-1] if history else None
        verified = last if last and last.action == VerificationRecord.ACTION_APPROVED else None
        rejected = last if last and last.action == VerificationRecord.ACTION_REJECTED else None
        return {
            "status": partner.verification_status,
            "is_verified": partner.is_verified,
            "verified_by": verified.vendor_name if verified else None,
            "verified_at": verified.created_at if verified else None,
            "rejected_by": rejected.vendor_name if rejected else None,
            "rejected_at": rejected.created_at if rejected else None,
            "total_verification_attempts": len(history),
            "last_action": {
                "vendor_id": last.vendor_id,
                "vendor_name": last.vendor_name,
                "action": last.action,
                "reason": last.reason,
                "action_date": last.created_at,
            }
            if last
            else None,
        }

    @staticmethod
    def mark_in_review(partner_id):
        """Move a pending partner into review once their profile is complete."""
        partner = PartnerDirectory.get_partner(partner_id)
        if partner.verification_status != "pending":
            return partner
        completion = PartnerDirectory.completion(partner)
        if not completion["is_complete"]:
            raise InvalidProfile(
                "Complete your profile before requesting verification.",
                completion=completion,
            )
        DeliveryPartner.objects.filter(id=partner.id, verification_status="pending").update(
            verification_status="in_review", updated_at=timezone.now()
        )
        partner.refresh_from_db()
        return partner


verification_coordinator = VerificationCoordinator()
