import django.db.models.deletion
import uuid
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("fleet", "0001_initial"),
        ("permits", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Notification",
            fields=[
                ("id",              models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("title",           models.CharField(max_length=120)),
                ("message",         models.TextField()),
                ("type",            models.CharField(
                    choices=[
                        ("INFO", "Info"),
                        ("WARNING", "Warning"),
                        ("URGENT", "Urgent"),
                        ("RESCHEDULE", "Reschedule"),
                        ("APPROVAL", "Approval"),
                        ("DENIAL", "Denial"),
                    ],
                    default="INFO",
                    max_length=10,
                )),
                ("delivery_method", models.CharField(default="APP", max_length=3)),
                ("status",          models.CharField(
                    choices=[("PENDING", "Pending"), ("SENT", "Sent"), ("FAILED", "Failed")],
                    default="PENDING",
                    max_length=7,
                )),
                ("error_message",   models.TextField(blank=True)),
                ("created_at",      models.DateTimeField(auto_now_add=True)),
                ("sent_at",         models.DateTimeField(blank=True, null=True)),
                ("driver",          models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="notifications",
                    to="fleet.driver",
                )),
                ("permit",          models.ForeignKey(
                    blank=True, null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name="notifications",
                    to="permits.permit",
                )),
            ],
            options={"ordering": ["-created_at"]},
        ),
        migrations.AddIndex(
            model_name="notification",
            index=models.Index(fields=["driver", "status"], name="notification_driver_idx"),
        ),
    ]
