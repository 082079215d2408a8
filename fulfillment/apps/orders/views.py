from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.deliveries.services import assignment_coordinator
from apps.events.serializers import OrderEventSerializer
from apps.events.services import event_service

from .models import Order
from .serializers import (
    AdvanceSerializer,
    AssignSerializer,
    OrderCreateSerializer,
    OrderSerializer,
    PartnerActionSerializer,
    RateSerializer,
    TransitionSerializer,
)
from .services import order_ledger


class OrderViewSet(viewsets.ViewSet):
    def list(self, request):
        orders = Order.objects.select_related("vendor").prefetch_related("items", "rejections")
        filters = {
            "status": request.query_params.get("status"),
            "vendor_id": request.query_params.get("vendor"),
            "delivery_partner_id": request.query_params.get("partner"),
            "customer_id": request.query_params.get("customer"),
        }
        orders = orders.filter(**{field: value for field, value in filters.items() if value})
        serializer = OrderSerializer(orders, many=True)
        return Response(serializer.data)

    def retrieve(self, request, pk=None):
        order = order_ledger.get_order(pk)
        return Response(OrderSerializer(order).data)

    def create(self, request):
        serializer = OrderCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        data = dict(serializer.validated_data)
        data["items"] = [dict(item) for item in data["items"]]
        order = order_ledger.create_order(**data)
        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def transition(self, request, pk=None):
        serializer = TransitionSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        order = order_ledger.transition_status(
            pk,
            serializer.validated_data["status"],
            serializer.validated_data["actor_role"],
            expected_version=serializer.validated_data.get("expected_version"),
        )
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["post"])
    def assign(self, request, pk=None):
        serializer = AssignSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        order = assignment_coordinator.assign(
            pk,
            serializer.validated_data["partner_id"],
            expected_version=serializer.validated_data.get("expected_version"),
            distance_km=serializer.validated_data.get("distance_km"),
        )
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["post"], url_path="auto-assign")
    def auto_assign(self, request, pk=None):
        order = assignment_coordinator.auto_assign(pk)
        if order is None:
            return Response(
                {"assigned": False, "detail": "No matching delivery partner is available."},
                status=status.HTTP_202_ACCEPTED,
            )
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["post"])
    def accept(self, request, pk=None):
        serializer = PartnerActionSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        order = assignment_coordinator.accept(pk, serializer.validated_data["partner_id"])
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["post"])
    def reject(self, request, pk=None):
        serializer = PartnerActionSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        order = assignment_coordinator.reject(
            pk,
            serializer.validated_data["partner_id"],
            serializer.validated_data.get("reason", ""),
        )
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["post"], url_path="back-out")
    def back_out(self, request, pk=None):
        serializer = PartnerActionSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        order = assignment_coordinator.back_out(
            pk,
            serializer.validated_data["partner_id"],
            serializer.validated_data.get("reason", ""),
        )
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["post"])
    def advance(self, request, pk=None):
        serializer = AdvanceSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        order = assignment_coordinator.advance(
            pk,
            serializer.validated_data["partner_id"],
            serializer.validated_data["status"],
        )
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["post"])
    def rate(self, request, pk=None):
        serializer = RateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        data = serializer.validated_data
        order = order_ledger.rate_order(
            pk,
            overall=data["overall_rating"],
            food=data.get("food_rating"),
            delivery=data.get("delivery_rating"),
            feedback=data.get("feedback", ""),
        )
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["get"])
    def events(self, request, pk=None):
        order = order_ledger.get_order(pk)
        serializer = OrderEventSerializer(event_service.get_order_events(order.id), many=True)
        return Response(serializer.data)
