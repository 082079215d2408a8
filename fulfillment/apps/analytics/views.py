from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.exceptions import InvalidOrder
from apps.partners.services import PartnerDirectory
from apps.vendors.services import get_vendor

from .constants import StatsSubject, StatsWindow
from .services import stats_aggregator


class StatsView(APIView):
    """Delivered-order counts and earnings for one partner or vendor."""

    def get(self, request):
        subject = request.query_params.get("subject")
        subject_id = request.query_params.get("id")
        window = request.query_params.get("window", StatsWindow.ALL)

        if subject not in StatsSubject.CHOICES:
            raise InvalidOrder(f"subject must be one of {', '.join(StatsSubject.CHOICES)}")
        if not subject_id:
            raise InvalidOrder("id is required")

        if subject == StatsSubject.PARTNER:
            partner = PartnerDirectory.get_partner(subject_id)
            data = stats_aggregator.partner_stats(partner, window)
        else:
            vendor = get_vendor(subject_id)
            data = stats_aggregator.vendor_stats(vendor, window)

        return Response({"subject": subject, "id": subject_id, **data}, status=status.HTTP_200_OK)


class VendorSummaryView(APIView):
    def get(self, request, vendor_id):
        vendor = get_vendor(vendor_id)
        return Response(stats_aggregator.vendor_summary(vendor), status=status.HTTP_200_OK)
