"""
API tests for the delivery partner endpoints.
"""

import uuid

import pytest

from apps.orders.constants import OrderStatus
from apps.vendors.models import Vendor

PARTNERS_URL = "/api/v1/partners/"


def partner_url(partner, action=None):
    url = f"{PARTNERS_URL}{partner.id}/"
    return f"{url}{action}/" if action else url


# ==============================================================================
# PROFILE ENDPOINTS
# ==============================================================================

@pytest.mark.django_db
class TestProfileEndpoints:
    """Tests for registration and profile edits."""

    def test_register(self, api_client):
        """Test registering a partner with a partial profile."""
        response = api_client.post(
            PARTNERS_URL,
            {"user_id": str(uuid.uuid4()), "full_name": "Ravi Kumar", "mobile_no": "9876500001"},
            format="json",
        )

        assert response.status_code == 201
        data = response.json()
        assert data["full_name"] == "Ravi Kumar"
        assert data["verification_status"] == "pending"
        assert len(data["working_hours"]) == 7

    def test_partial_update_returns_completion(self, api_client, make_partner):
        """Test a profile edit reports the new completion."""
        partner = make_partner(bank_name="")

        response = api_client.patch(
            partner_url(partner), {"bank_name": "State Bank"}, format="json"
        )

        assert response.status_code == 200
        assert response.json()["partner"]["bank_name"] == "State Bank"
        assert response.json()["completion"]["percentage"] == 100

    def test_partial_update_invalid(self, api_client, partner):
        """Test an invalid pincode is refused with a typed error."""
        response = api_client.patch(partner_url(partner), {"pincode": "12"}, format="json")

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_profile"

    def test_completion(self, api_client, partner):
        """Test the completion endpoint."""
        response = api_client.get(partner_url(partner, "completion"))

        assert response.status_code == 200
        assert response.json()["is_complete"] is True

    def test_availability(self, api_client, make_partner):
        """Test going on duty."""
        partner = make_partner(available=False)

        response = api_client.post(
            partner_url(partner, "availability"), {"is_available": True}, format="json"
        )

        assert response.status_code == 200
        assert response.json() == {"id": str(partner.id), "is_available": True}

    def test_list_by_pincode(self, api_client, partner, make_partner):
        """Test listing partners serving a pincode."""
        make_partner(zones=("560001",))

        response = api_client.get(PARTNERS_URL, {"pincode": "110001"})

        assert [item["id"] for item in response.json()] == [str(partner.id)]

    def test_missing_partner(self, api_client, db):
        """Test an unknown partner is a 404."""
        response = api_client.get(f"{PARTNERS_URL}{uuid.uuid4()}/")

        assert response.status_code == 404
        assert response.json()["error"] == "partner_not_found"


# ==============================================================================
# VERIFICATION ENDPOINTS
# ==============================================================================

@pytest.mark.django_db
class TestVerificationEndpoints:
    """Tests for vendor decisions over HTTP."""

    def test_verify(self, api_client, vendor, make_partner):
        """Test a covering vendor approves a partner."""
        partner = make_partner(verified=False)

        response = api_client.post(
            partner_url(partner, "verify"),
            {"vendor_id": str(vendor.id), "action": "approve"},
            format="json",
        )

        assert response.status_code == 200
        assert response.json()["partner"]["verification_status"] == "approved"
        assert response.json()["summary"]["verified_by"] == "Spice Route"

    def test_verify_outside_coverage(self, api_client, make_partner):
        """Test a vendor in another city gets a 403 listing both pincode sets."""
        vendor = Vendor.objects.create(
            user_id=uuid.uuid4(), restaurant_name="Koramangala Kitchen", pincode="560001"
        )
        partner = make_partner(verified=False)

        response = api_client.post(
            partner_url(partner, "verify"),
            {"vendor_id": str(vendor.id), "action": "approve"},
            format="json",
        )

        assert response.status_code == 403
        assert response.json()["error"] == "coverage_mismatch"
        assert response.json()["vendor_pincodes"] == ["560001"]
        assert response.json()["partner_pincodes"] == ["110001"]

    def test_verify_bad_action(self, api_client, vendor, partner):
        """Test an unknown action is a 400."""
        response = api_client.post(
            partner_url(partner, "verify"),
            {"vendor_id": str(vendor.id), "action": "maybe"},
            format="json",
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid action. Use approve or reject"

    def test_verification_history(self, api_client, vendor, make_partner):
        """Test the summary and history after a rejection."""
        partner = make_partner(verified=False)
        api_client.post(
            partner_url(partner, "verify"),
            {"vendor_id": str(vendor.id), "action": "reject", "reason": "Blurry license"},
            format="json",
        )

        response = api_client.get(partner_url(partner, "verification"))

        assert response.status_code == 200
        assert response.json()["summary"]["rejected_by"] == "Spice Route"
        assert response.json()["history"][0]["reason"] == "Blurry license"

    def test_request_review(self, api_client, make_partner):
        """Test a complete pending profile can ask for review."""
        partner = make_partner(verified=False)

        response = api_client.post(partner_url(partner, "request-review"))

        assert response.status_code == 200
        assert response.json()["verification_status"] == "in_review"


# ==============================================================================
# ORDER LISTS AND DASHBOARD
# ==============================================================================

@pytest.mark.django_db
class TestPartnerOrderEndpoints:
    """Tests for the partner's order lists and dashboard."""

    def test_available_orders(self, api_client, ready_order, partner):
        """Test the available list shows ready orders in the partner's zone."""
        response = api_client.get(partner_url(partner, "orders"), {"type": "available"})

        assert response.status_code == 200
        assert [o["id"] for o in response.json()["orders"]] == [str(ready_order.id)]
        assert response.json()["stats"]["available"] == 1

    def test_unknown_list_type(self, api_client, partner):
        """Test an unknown list type is a 400."""
        response = api_client.get(partner_url(partner, "orders"), {"type": "archived"})

        assert response.status_code == 400

    def test_dashboard(self, api_client, order_at, partner):
        """Test the dashboard after one delivery."""
        order_at(OrderStatus.DELIVERED)

        response = api_client.get(partner_url(partner, "dashboard"))

        assert response.status_code == 200
        data = response.json()
        assert data["stats"]["all"]["deliveries"] == 1
        assert data["lifetime"]["completed_deliveries"] == 1
        assert data["orders"]["completed"] == 1
