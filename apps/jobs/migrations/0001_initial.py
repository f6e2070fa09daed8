import django.core.validators
import django.db.models.deletion
import uuid
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("authentication", "0001_initial"),
        ("fleet", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Job",
            fields=[
                ("id",               models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("job_number",       models.CharField(max_length=24, unique=True)),
                ("customer_name",    models.CharField(max_length=120)),
                ("container_number", models.CharField(blank=True, max_length=20)),
                ("container_count",  models.PositiveIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)])),
                ("cargo_type",       models.CharField(
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
                ("priority",         models.CharField(
                    choices=[
                        ("EMERGENCY", "Emergency"),
                        ("ESSENTIAL", "Essential"),
                        ("NORMAL", "Normal"),
                        ("LOW", "Low"),
                    ],
                    max_length=10,
                )),
                ("pickup_location",  models.CharField(max_length=200)),
                ("destination",      models.CharField(max_length=200)),
                ("preferred_date",   models.DateField()),
                ("preferred_time",   models.TimeField(blank=True, null=True)),
                ("notes",            models.TextField(blank=True)),
                ("status",           models.CharField(
                    choices=[
                        ("PENDING", "Pending"),
                        ("ASSIGNED", "Assigned"),
                        ("IN_PROGRESS", "In Progress"),
                        ("COMPLETED", "Completed"),
                        ("CANCELLED", "Cancelled"),
                    ],
                    default="PENDING",
                    max_length=12,
                )),
                ("assigned_at",      models.DateTimeField(blank=True, null=True)),
                ("started_at",       models.DateTimeField(blank=True, null=True)),
                ("completed_at",     models.DateTimeField(blank=True, null=True)),
                ("created_at",       models.DateTimeField(auto_now_add=True)),
                ("updated_at",       models.DateTimeField(auto_now=True)),
                ("organization",     models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name="jobs",
                    to="authentication.organization",
                )),
                ("assigned_driver",  models.ForeignKey(
                    blank=True, null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name="jobs",
                    to="fleet.driver",
                )),
            ],
            options={"ordering": ["-created_at"]},
        ),
        migrations.AddIndex(
            model_name="job",
            index=models.Index(fields=["organization", "status"], name="job_org_status_idx"),
        ),
        migrations.AddIndex(
            model_name="job",
            index=models.Index(fields=["assigned_driver", "status"], name="job_driver_status_idx"),
        ),
    ]
