from django.urls import path

from .views import StatsView, VendorSummaryView

app_name = "analytics"

urlpatterns = [
    path("stats/", StatsView.as_view(), name="stats"),
    path("vendors/<uuid:vendor_id>/summary/", VendorSummaryView.as_view(), name="vendor-summary"),
]
