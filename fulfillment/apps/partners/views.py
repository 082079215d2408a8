from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.analytics.services import stats_aggregator
from apps.deliveries.services import assignment_coordinator
from apps.orders.serializers import OrderSerializer

from .models import DeliveryPartner
from .serializers import (
    AvailabilitySerializer,
    DeliveryPartnerSerializer,
    PartnerProfileSerializer,
    PartnerRegisterSerializer,
    VerificationDecisionSerializer,
    VerificationRecordSerializer,
)
from .services import partner_directory
from .verification import verification_coordinator


class DeliveryPartnerViewSet(viewsets.ViewSet):
    def list(self, request):
        partners = DeliveryPartner.objects.all().order_by("created_at")
        verification_status = request.query_params.get("verification_status")
        if verification_status:
            partners = partners.filter(verification_status=verification_status)
        available = request.query_params.get("available")
        if available is not None:
            partners = partners.filter(is_available=available.lower() in ("1", "true", "yes"))
        pincode = request.query_params.get("pincode")
        if pincode:
            partners = [partner for partner in partners if partner.covers(pincode)]
        serializer = DeliveryPartnerSerializer(partners, many=True)
        return Response(serializer.data)

    def retrieve(self, request, pk=None):
        partner = partner_directory.get_partner(pk)
        return Response(DeliveryPartnerSerializer(partner).data)

    def create(self, request):
        serializer = PartnerRegisterSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        profile = dict(serializer.validated_data)
        partner = partner_directory.register(profile.pop("user_id"), **profile)
        return Response(DeliveryPartnerSerializer(partner).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        partner = partner_directory.get_partner(pk)
        serializer = PartnerProfileSerializer(data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        partner = partner_directory.update_profile(partner, **serializer.validated_data)
        return Response(
            {
                "partner": DeliveryPartnerSerializer(partner).data,
                "completion": partner_directory.completion(partner),
            }
        )

    @action(detail=True, methods=["post"])
    def availability(self, request, pk=None):
        serializer = AvailabilitySerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        partner = partner_directory.set_availability(pk, serializer.validated_data["is_available"])
        return Response({"id": str(partner.id), "is_available": partner.is_available})

    @action(detail=True, methods=["get"])
    def completion(self, request, pk=None):
        partner = partner_directory.get_partner(pk)
        return Response(partner_directory.completion(partner))

    @action(detail=True, methods=["get"])
    def verification(self, request, pk=None):
        partner = partner_directory.get_partner(pk)
        history = VerificationRecordSerializer(partner.verification_history.all(), many=True)
        return Response(
            {"summary": verification_coordinator.summary(partner), "history": history.data}
        )

    @action(detail=True, methods=["post"])
    def verify(self, request, pk=None):
        serializer = VerificationDecisionSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        partner = verification_coordinator.decide(
            serializer.validated_data["vendor_id"],
            pk,
            serializer.validated_data["action"],
            serializer.validated_data.get("reason", ""),
        )
        return Response(
            {
                "partner": DeliveryPartnerSerializer(partner).data,
                "summary": verification_coordinator.summary(partner),
            }
        )

    @action(detail=True, methods=["post"], url_path="request-review")
    def request_review(self, request, pk=None):
        partner = verification_coordinator.mark_in_review(pk)
        return Response(DeliveryPartnerSerializer(partner).data)

    @action(detail=True, methods=["get"])
    def orders(self, request, pk=None):
        kind = request.query_params.get("type")
        orders = assignment_coordinator.partner_orders(pk, kind)
        partner = partner_directory.get_partner(pk)
        return Response(
            {
                "orders": OrderSerializer(orders, many=True).data,
                "stats": assignment_coordinator.partner_order_counts(partner),
            }
        )

    @action(detail=True, methods=["get"])
    def dashboard(self, request, pk=None):
        partner = partner_directory.get_partner(pk)
        return Response(stats_aggregator.partner_dashboard(partner))
