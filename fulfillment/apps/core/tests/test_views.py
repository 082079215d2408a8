"""
Tests for the health endpoints and the API error handler.
"""

from unittest.mock import patch

import pytest
from rest_framework.test import APIRequestFactory
from rest_framework.views import APIView

from apps.core.exceptions import (
    AssignmentRejected,
    InvalidTransition,
    OrderNotFound,
    fulfillment_exception_handler,
)


@pytest.mark.django_db
class TestHealthChecks:
    """Tests for liveness and readiness."""

    def test_health(self, api_client):
        """Test the liveness probe."""
        response = api_client.get("/health/")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "service": "order-fulfillment"}

    def test_ready(self, api_client):
        """Test readiness with the database and cache reachable."""
        response = api_client.get("/health/ready/")

        assert response.status_code == 200
        assert response.json() == {
            "status": "ready",
            "checks": {"database": True, "cache": True},
        }

    def test_not_ready_when_cache_down(self, api_client):
        """Test readiness reports a failing dependency."""
        with patch(
            "apps.core.views.check_cache_connection", side_effect=ValueError("cache down")
        ):
            response = api_client.get("/health/ready/")

        assert response.status_code == 503
        assert response.json()["checks"] == {"database": True, "cache": False}

    def test_kafka_probed_when_enabled(self, api_client, settings):
        """Test readiness includes Kafka once publishing is switched on."""
        settings.KAFKA_ENABLED = True

        with patch("apps.core.views.kafka_client") as client:
            client.check_connection.side_effect = ValueError("no brokers")
            response = api_client.get("/health/ready/")

        assert response.status_code == 503
        assert response.json()["checks"] == {"database": True, "cache": True, "kafka": False}


# ==============================================================================
# EXCEPTION HANDLER
# ==============================================================================

class TestExceptionHandler:
    """Tests for rendering domain errors."""

    def context(self):
        request = APIRequestFactory().get("/")
        return {"view": APIView(), "request": request}

    def test_domain_error_payload(self):
        """Test a domain error renders its code, detail and extras."""
        response = fulfillment_exception_handler(
            AssignmentRejected(AssignmentRejected.ZONE_MISMATCH), self.context()
        )

        assert response.status_code == 422
        assert response.data == {
            "error": "assignment_rejected",
            "detail": "Assignment refused: zone_mismatch.",
            "reason": "zone_mismatch",
        }

    def test_default_detail(self):
        """Test errors without a message use their default detail."""
        response = fulfillment_exception_handler(OrderNotFound(), self.context())

        assert response.status_code == 404
        assert response.data == {"error": "order_not_found", "detail": "Order not found."}

    def test_transition_error_names_statuses(self):
        """Test transition errors carry both statuses."""
        response = fulfillment_exception_handler(
            InvalidTransition("delivered", "ready"), self.context()
        )

        assert response.status_code == 409
        assert response.data["current_status"] == "delivered"
        assert response.data["requested_status"] == "ready"

    def test_other_errors_fall_through(self):
        """Test non-domain exceptions are left to DRF."""
        assert fulfillment_exception_handler(KeyError("x"), self.context()) is None
