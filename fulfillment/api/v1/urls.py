from django.urls import include, path

urlpatterns = [
    path("orders/", include("apps.orders.urls")),
    path("partners/", include("apps.partners.urls")),
    path("vendors/", include("apps.vendors.urls")),
    path("analytics/", include("apps.analytics.urls")),
]
