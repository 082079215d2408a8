from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import DeliveryPartnerViewSet

app_name = "partners"

# Router for viewsets
router = DefaultRouter()
router.register(r"", DeliveryPartnerViewSet, basename="partner")

urlpatterns = [
    # ViewSet routes
    path("", include(router.urls)),
]
