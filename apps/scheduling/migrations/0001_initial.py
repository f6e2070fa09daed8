import django.core.validators
import uuid
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="TimeSlot",
            fields=[
                ("id",                models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("date",              models.DateField()),
                ("start_time",        models.TimeField()),
                ("end_time",          models.TimeField()),
                ("capacity",          models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)])),
                ("booked",            models.PositiveIntegerField(default=0)),
                ("status",            models.CharField(
                    choices=[("AVAILABLE", "Available"), ("FULL", "Full"), ("CLOSED", "Closed")],
                    default="AVAILABLE",
                    max_length=10,
                )),
                ("predicted_traffic", models.CharField(
                    choices=[("NORMAL", "Normal"), ("MODERATE", "Moderate"), ("CONGESTED", "Congested")],
                    default="NORMAL",
                    max_length=10,
                )),
                ("created_at",        models.DateTimeField(auto_now_add=True)),
                ("updated_at",        models.DateTimeField(auto_now=True)),
            ],
            options={"ordering": ["date", "start_time"]},
        ),
        migrations.CreateModel(
            name="VesselSchedule",
            fields=[
                ("id",               models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("vessel_name",      models.CharField(max_length=120)),
                ("arrival_date",     models.DateField()),
                ("arrival_time",     models.TimeField(blank=True, null=True)),
                ("estimated_trucks", models.PositiveIntegerField(default=0)),
                ("actual_trucks",    models.PositiveIntegerField(default=0)),
                ("cargo_priority",   models.CharField(blank=True, max_length=10)),
                ("status",           models.CharField(
                    choices=[
                        ("SCHEDULED", "Scheduled"),
                        ("ARRIVED", "Arrived"),
                        ("DEPARTED", "Departed"),
                        ("DELAYED", "Delayed"),
                    ],
                    default="SCHEDULED",
                    max_length=10,
                )),
                ("notes",            models.TextField(blank=True)),
                ("created_at",       models.DateTimeField(auto_now_add=True)),
                ("updated_at",       models.DateTimeField(auto_now=True)),
            ],
            options={"ordering": ["arrival_date", "arrival_time"]},
        ),
        migrations.AddConstraint(
            model_name="timeslot",
            constraint=models.UniqueConstraint(fields=["date", "start_time"], name="slot_unique_window"),
        ),
        migrations.AddConstraint(
            model_name="timeslot",
            constraint=models.CheckConstraint(
                condition=models.Q(booked__gte=0) & models.Q(booked__lte=models.F("capacity")),
                name="slot_booked_within_capacity",
            ),
        ),
        migrations.AddIndex(
            model_name="timeslot",
            index=models.Index(fields=["date", "status"], name="slot_date_status_idx"),
        ),
        migrations.AddIndex(
            model_name="vesselschedule",
            index=models.Index(fields=["arrival_date", "status"], name="vessel_arrival_idx"),
        ),
    ]
