from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import VendorViewSet

app_name = "vendors"

# Router for viewsets
router = DefaultRouter()
router.register(r"", VendorViewSet, basename="vendor")

urlpatterns = [
    # ViewSet routes
    path("", include(router.urls)),
]
