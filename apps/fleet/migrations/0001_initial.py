import django.db.models.deletion
import uuid
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("authentication", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Driver",
            fields=[
                ("id",             models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name",           models.CharField(max_length=120)),
                ("phone",          models.CharField(max_length=20, unique=True)),
                ("vehicle_plate",  models.CharField(max_length=20)),
                ("vehicle_type",   models.CharField(
                    choices=[
                        ("TRUCK", "Truck"),
                        ("CONTAINER", "Container carrier"),
                        ("TANKER", "Tanker"),
                        ("FLATBED", "Flatbed"),
                    ],
                    default="TRUCK",
                    max_length=10,
                )),
                ("has_smartphone", models.BooleanField(default=True)),
                ("prefers_sms",    models.BooleanField(default=False)),
                ("push_token",     models.CharField(blank=True, max_length=255)),
                ("is_available",   models.BooleanField(default=True)),
                ("is_active",      models.BooleanField(default=True)),
                ("created_at",     models.DateTimeField(auto_now_add=True)),
                ("updated_at",     models.DateTimeField(auto_now=True)),
                ("organization",   models.ForeignKey(
                    blank=True, null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name="drivers",
                    to="authentication.organization",
                )),
            ],
            options={"ordering": ["name"]},
        ),
        migrations.AddIndex(
            model_name="driver",
            index=models.Index(fields=["organization", "is_available", "is_active"], name="driver_dispatch_idx"),
        ),
    ]
