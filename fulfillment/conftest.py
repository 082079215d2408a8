"""
Pytest fixtures shared by the fulfillment test suite.
"""

import uuid
from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from apps.orders.constants import ActorRole, OrderStatus
from apps.orders.services import OrderLedger
from apps.partners.models import DeliveryPartner
from apps.partners.services import PartnerDirectory
from apps.vendors.models import Vendor

FULL_PROFILE = {
    "full_name": "Ravi Kumar",
    "mobile_no": "9876500001",
    "street": "12 MG Road",
    "city": "New Delhi",
    "state": "Delhi",
    "pincode": "110001",
    "vehicle_type": "bike",
    "vehicle_number": "dl01ab1234",
    "license_number": "DL-0420110012345",
    "account_holder_name": "Ravi Kumar",
    "account_number": "001234567890",
    "ifsc_code": "hdfc0001234",
    "bank_name": "HDFC Bank",
}

CHECKOUT_ITEMS = [
    {"menu_item_id": uuid.uuid4(), "name": "Paneer Tikka", "price": Decimal("85.00"), "quantity": 2},
    {"menu_item_id": uuid.uuid4(), "name": "Masala Chai", "price": Decimal("67.00"), "quantity": 1},
]


@pytest.fixture
def vendor(db):
    """Create a vendor delivering to 110001."""
    return Vendor.objects.create(
        user_id=uuid.uuid4(),
        restaurant_name="Spice Route",
        address="4 Janpath, New Delhi",
        pincode="110001",
        delivery_pincodes=["110001"],
    )


@pytest.fixture
def make_partner(db):
    """Factory for delivery partners with a complete profile."""

    def _make(verified=True, available=True, zones=("110001",), **profile):
        partner = PartnerDirectory.register(
            uuid.uuid4(), **{**FULL_PROFILE, **profile}, delivery_zones=list(zones)
        )
        DeliveryPartner.objects.filter(id=partner.id).update(
            verification_status="approved" if verified else "pending",
            is_available=available,
        )
        partner.refresh_from_db()
        return partner

    return _make


@pytest.fixture
def partner(make_partner):
    """A verified, available partner serving 110001."""
    return make_partner()


@pytest.fixture
def other_partner(make_partner):
    """A second verified, available partner serving 110001."""
    return make_partner(full_name="Anita Sharma", mobile_no="9876500002")


@pytest.fixture
def make_order(vendor):
    """Factory for placed orders: 2 x 85 + 1 x 67."""

    def _make(**overrides):
        data = {
            "customer_id": uuid.uuid4(),
            "vendor_id": vendor.id,
            "items": [dict(item) for item in CHECKOUT_ITEMS],
            "customer_name": "Meera Iyer",
            "customer_phone": "9811100000",
            "customer_address": "22 Connaught Place, New Delhi",
            "delivery_pincode": "110001",
        }
        data.update(overrides)
        return OrderLedger.create_order(**data)

    return _make


@pytest.fixture
def order(make_order):
    """A freshly placed order."""
    return make_order()


def advance_to(order, target):
    """Walk ``order`` along the vendor path up to ``target`` (at most ``ready``)."""
    path = [OrderStatus.CONFIRMED, OrderStatus.PREPARING, OrderStatus.READY]
    for status in path[: path.index(target) + 1]:
        order = OrderLedger.transition_status(order.id, status, ActorRole.VENDOR)
    return order


@pytest.fixture
def vendor_advance(db):
    """The vendor-path walker, for tests that need an order at a given status."""
    return advance_to


@pytest.fixture
def ready_order(order):
    """A placed order moved to ready by its vendor."""
    return advance_to(order, OrderStatus.READY)


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def order_at(make_order, partner, vendor_advance):
    """
    Factory returning a new order driven to ``status`` along the real path.

    Statuses past ``ready`` are reached through the assignment coordinator
    with the ``partner`` fixture as the delivery partner.
    """
    from apps.deliveries.services import AssignmentCoordinator

    path = [
        OrderStatus.PLACED,
        OrderStatus.CONFIRMED,
        OrderStatus.PREPARING,
        OrderStatus.READY,
        OrderStatus.ASSIGNED,
        OrderStatus.ACCEPTED,
        OrderStatus.PICKED_UP,
        OrderStatus.OUT_FOR_DELIVERY,
        OrderStatus.DELIVERED,
    ]

    def _make(status):
        order = make_order()
        if status == OrderStatus.CANCELLED:
            return OrderLedger.transition_status(order.id, status, ActorRole.CUSTOMER)
        if status == OrderStatus.PLACED:
            return order
        order = vendor_advance(order, min(status, OrderStatus.READY, key=path.index))
        for step in path[path.index(OrderStatus.READY) + 1 : path.index(status) + 1]:
            if step == OrderStatus.ASSIGNED:
                order = AssignmentCoordinator.assign(order.id, partner.id)
            elif step == OrderStatus.ACCEPTED:
                order = AssignmentCoordinator.accept(order.id, partner.id)
            else:
                order = AssignmentCoordinator.advance(order.id, partner.id, step)
        return order

    return _make
