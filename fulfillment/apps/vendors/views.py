from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.partners.serializers import DeliveryPartnerSerializer
from apps.partners.services import partner_directory
from apps.partners.verification import verification_coordinator

from .models import Vendor
from .serializers import VendorSerializer
from .services import get_vendor


class VendorViewSet(viewsets.ViewSet):
    def list(self, request):
        vendors = Vendor.objects.all().order_by("restaurant_name")
        serializer = VendorSerializer(vendors, many=True)
        return Response(serializer.data)

    def retrieve(self, request, pk=None):
        vendor = get_vendor(pk)
        return Response(VendorSerializer(vendor).data)

    def create(self, request):
        serializer = VendorSerializer(data=request.data)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    @action(detail=True, methods=["get"])
    def partners(self, request, pk=None):
        """Partners serving this vendor's area, with their verification state."""
        vendor = get_vendor(pk)
        partners = partner_directory.partners_covering(vendor.coverage_pincodes)
        verification_status = request.query_params.get("verification_status")
        if verification_status:
            partners = [p for p in partners if p.verification_status == verification_status]
        return Response(
            {
                "vendor_pincodes": vendor.coverage_pincodes,
                "partners": [
                    {
                        **DeliveryPartnerSerializer(partner).data,
                        "completion": partner_directory.completion(partner),
                        "verification": verification_coordinator.summary(partner),
                    }
                    for partner in partners
                ],
            }
        )

    @action(detail=True, methods=["get"], url_path="available-partners")
    def available_partners(self, request, pk=None):
        vendor = get_vendor(pk)
        partners = partner_directory.partners_covering(
            vendor.coverage_pincodes, matchable_only=True
        )
        serializer = DeliveryPartnerSerializer(partners, many=True)
        return Response({"count": len(partners), "partners": serializer.data})
