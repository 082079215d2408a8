from apps.core.exceptions import VendorNotFound

from .models import Vendor


def get_vendor(vendor_id):
    try:
        return Vendor.objects.get(id=vendor_id)
    except (Vendor.DoesNotExist, ValueError):
        raise VendorNotFound()
