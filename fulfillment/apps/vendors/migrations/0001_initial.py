import uuid

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Vendor",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("user_id", models.UUIDField(unique=True)),
                ("restaurant_name", models.CharField(max_length=150)),
                ("address", models.CharField(blank=True, default="", max_length=255)),
                ("pincode", models.CharField(blank=True, default="", max_length=6)),
                ("delivery_pincodes", models.JSONField(blank=True, default=list)),
                ("is_open", models.BooleanField(default=True)),
            ],
            options={
                "db_table": "vendors",
                "indexes": [models.Index(fields=["pincode"], name="vendors_pincode_idx")],
            },
        ),
    ]
