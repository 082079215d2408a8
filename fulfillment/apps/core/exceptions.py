"""
Domain errors raised by the fulfillment services.

Every error carries a stable ``code`` that callers can branch on and the HTTP
status the API layer answers with. None of them are fatal; the service layer
raises them and the DRF exception handler below renders them.
"""
import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class FulfillmentError(Exception):
    code = "fulfillment_error"
    http_status = status.HTTP_400_BAD_REQUEST
    default_detail = "The request could not be completed."

    def __init__(self, detail=None, **extra):
        self.detail = detail or self.default_detail
        self.extra = extra
        super().__init__(self.detail)

    def as_dict(self):
        return {"error": self.code, "detail": self.detail, **self.extra}


class InvalidTransition(FulfillmentError):
    code = "invalid_transition"
    http_status = status.HTTP_409_CONFLICT
    default_detail = "The requested status change is not allowed."

    def __init__(self, current, target, detail=None):
        super().__init__(
            detail or f"Cannot move order from '{current}' to '{target}'.",
            current_status=str(current),
            requested_status=str(target),
        )
        self.current = current
        self.target = target


class AssignmentRejected(FulfillmentError):
    """An assignment precondition failed; ``reason`` names which one."""

    code = "assignment_rejected"
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY

    ORDER_NOT_READY = "order_not_ready"
    PARTNER_NOT_VERIFIED = "partner_not_verified"
    PARTNER_UNAVAILABLE = "partner_unavailable"
    ZONE_MISMATCH = "zone_mismatch"

    def __init__(self, reason, detail=None):
        super().__init__(detail or f"Assignment refused: {reason}.", reason=reason)
        self.reason = reason


class AlreadyAssigned(FulfillmentError):
    code = "already_assigned"
    http_status = status.HTTP_409_CONFLICT
    default_detail = "The order was assigned by another request."


class NotAssignedToYou(FulfillmentError):
    code = "not_assigned_to_you"
    http_status = status.HTTP_403_FORBIDDEN
    default_detail = "This order is not assigned to you."


class CoverageMismatch(FulfillmentError):
    code = "coverage_mismatch"
    http_status = status.HTTP_403_FORBIDDEN
    default_detail = "You can only verify delivery partners in your delivery areas."


class OrderConflict(FulfillmentError):
    code = "order_conflict"
    http_status = status.HTTP_409_CONFLICT
    default_detail = "The order was modified concurrently; reload and retry."


class InvalidOrder(FulfillmentError):
    code = "invalid_order"


class InvalidProfile(FulfillmentError):
    code = "invalid_profile"


class OrderNotFound(FulfillmentError):
    code = "order_not_found"
    http_status = status.HTTP_404_NOT_FOUND
    default_detail = "Order not found."


class PartnerNotFound(FulfillmentError):
    code = "partner_not_found"
    http_status = status.HTTP_404_NOT_FOUND
    default_detail = "Delivery partner not found."


class VendorNotFound(FulfillmentError):
    code = "vendor_not_found"
    http_status = status.HTTP_404_NOT_FOUND
    default_detail = "Vendor not found."


def fulfillment_exception_handler(exc, context):
    """DRF exception handler that renders FulfillmentError as a typed payload."""
    if isinstance(exc, FulfillmentError):
        view = context.get("view")
        logger.warning(
            f"{exc.code} in {view.__class__.__name__ if view else 'unknown view'}: {exc.detail}"
        )
        return Response(exc.as_dict(), status=exc.http_status)
    return exception_handler(exc, context)
