"""
Management command to create verified, on-duty test delivery partners.
Usage: python manage.py create_test_partners --pincode 110001
"""
import uuid

from django.core.management.base import BaseCommand

from apps.partners.models import DeliveryPartner
from apps.partners.services import partner_directory

TEST_PARTNERS = [
    {"full_name": "Test Partner 1", "vehicle_type": "bike", "city": "Delhi", "state": "Delhi"},
    {"full_name": "Test Partner 2", "vehicle_type": "scooter", "city": "Gurgaon", "state": "Haryana"},
    {"full_name": "Test Partner 3", "vehicle_type": "bicycle", "city": "Noida", "state": "Uttar Pradesh"},
    {"full_name": "Test Partner 4", "vehicle_type": "car", "city": "Delhi", "state": "Delhi"},
    {"full_name": "Test Partner 5", "vehicle_type": "bike", "city": "Lucknow", "state": "Uttar Pradesh"},
]


class Command(BaseCommand):
    help = "Create verified, available delivery partners for local testing"

    def add_arguments(self, parser):
        parser.add_argument(
            "--count",
            type=int,
            default=5,
            help="Number of test partners to create (default: 5)",
        )
        parser.add_argument(
            "--pincode",
            default="110001",
            help="Delivery zone the partners serve (default: 110001)",
        )

    def handle(self, *args, **options):
        pincode = options["pincode"]
        created_count = 0

        for i in range(options["count"]):
            template = TEST_PARTNERS[i % len(TEST_PARTNERS)]
            mobile_no = f"9876543{i:03d}"

            if DeliveryPartner.objects.filter(mobile_no=mobile_no).exists():
                self.stdout.write(
                    self.style.WARNING(
                        f"Partner with mobile {mobile_no} already exists, skipping..."
                    )
                )
                continue

            partner = partner_directory.register(
                uuid.uuid4(),
                **template,
                mobile_no=mobile_no,
                street=f"{i + 1} Test Street",
                pincode=pincode,
                vehicle_number=f"dl01ab{i:04d}",
                license_number=f"DL-TEST-{i:04d}",
                account_holder_name=template["full_name"],
                account_number=f"00001234{i:04d}",
                ifsc_code="test0001234",
                bank_name="Test Bank",
                delivery_zones=[pincode],
            )
            DeliveryPartner.objects.filter(id=partner.id).update(
                verification_status="approved", is_available=True
            )
            created_count += 1
            self.stdout.write(
                self.style.SUCCESS(
                    f"Created partner: {partner.full_name} (Mobile: {mobile_no}) serving {pincode}"
                )
            )

        self.stdout.write(
            self.style.SUCCESS(f"\nSuccessfully created {created_count} test partners!")
        )
