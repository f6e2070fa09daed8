import django.db.models.deletion
import uuid
from django.db import migrations, models


def create_permit_sequence(apps, schema_editor):
    PermitCodeSequence = apps.get_model("permits", "PermitCodeSequence")
    PermitCodeSequence.objects.get_or_create(name="permit")


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("fleet", "0001_initial"),
        ("scheduling", "0001_initial"),
        ("jobs", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="PermitCodeSequence",
            fields=[
                ("id",          models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name",        models.CharField(max_length=30, unique=True)),
                ("last_number", models.PositiveBigIntegerField(default=0)),
            ],
        ),
        migrations.CreateModel(
            name="Permit",
            fields=[
                ("id",                models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("permit_code",       models.CharField(max_length=20, unique=True)),
                ("qr_code",           models.CharField(max_length=40, unique=True)),
                ("cargo_type",        models.CharField(
                    choices=[
                        ("MEDICAL", "Medical supplies"),
                        ("PERISHABLE", "Perishable"),
                        ("HAZARDOUS", "Hazardous"),
                        ("TIME_SENSITIVE", "Time sensitive"),
                        ("STANDARD", "Standard"),
                        ("OTHER", "Other"),
                        ("BULK", "Bulk"),
                    ],
                    max_length=15,
                )),
                ("priority",          models.CharField(
                    choices=[
                        ("EMERGENCY", "Emergency"),
                        ("ESSENTIAL", "Essential"),
                        ("NORMAL", "Normal"),
                        ("LOW", "Low"),
                    ],
                    max_length=10,
                )),
                ("status",            models.CharField(
                    choices=[
                        ("PENDING", "Pending"),
                        ("APPROVED", "Approved"),
                        ("HALTED", "Halted"),
                        ("CANCELLED", "Cancelled"),
                        ("EXPIRED", "Expired"),
                        ("COMPLETED", "Completed"),
                    ],
                    default="APPROVED",
                    max_length=10,
                )),
                ("delivery_method",   models.CharField(
                    choices=[("APP", "App push"), ("SMS", "SMS")],
                    default="APP",
                    max_length=3,
                )),
                ("rescheduled_count", models.PositiveIntegerField(default=0)),
                ("approved_at",       models.DateTimeField(blank=True, null=True)),
                ("halted_at",         models.DateTimeField(blank=True, null=True)),
                ("completed_at",      models.DateTimeField(blank=True, null=True)),
                ("expires_at",        models.DateTimeField(blank=True, null=True)),
                ("notes",             models.TextField(blank=True)),
                ("created_at",        models.DateTimeField(auto_now_add=True)),
                ("updated_at",        models.DateTimeField(auto_now=True)),
                ("driver",            models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name="permits",
                    to="fleet.driver",
                )),
                ("slot",              models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name="permits",
                    to="scheduling.timeslot",
                )),
                ("job",               models.ForeignKey(
                    blank=True, null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name="permits",
                    to="jobs.job",
                )),
                ("vessel",            models.ForeignKey(
                    blank=True, null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name="permits",
                    to="scheduling.vesselschedule",
                )),
                ("original_slot",     models.ForeignKey(
                    blank=True, null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name="+",
                    to="scheduling.timeslot",
                )),
            ],
            options={"ordering": ["-created_at"]},
        ),
        migrations.AddIndex(
            model_name="permit",
            index=models.Index(fields=["status", "priority"], name="permit_status_priority_idx"),
        ),
        migrations.AddIndex(
            model_name="permit",
            index=models.Index(fields=["driver", "status"], name="permit_driver_status_idx"),
        ),
        migrations.RunPython(create_permit_sequence, migrations.RunPython.noop),
    ]
