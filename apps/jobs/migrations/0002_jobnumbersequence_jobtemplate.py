import django.db.models.deletion
import uuid
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("authentication", "0001_initial"),
        ("jobs", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="JobNumberSequence",
            fields=[
                ("id",          models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("day",         models.DateField(unique=True)),
                ("last_number", models.PositiveIntegerField(default=0)),
            ],
        ),
        migrations.CreateModel(
            name="JobTemplate",
            fields=[
                ("id",              models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("template_name",   models.CharField(max_length=120)),
                ("cargo_type",      models.CharField(
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
                ("priority",        models.CharField(
                    choices=[
                        ("EMERGENCY", "Emergency"),
                        ("ESSENTIAL", "Essential"),
                        ("NORMAL", "Normal"),
                        ("LOW", "Low"),
                    ],
                    max_length=10,
                )),
                ("pickup_location", models.CharField(max_length=200)),
                ("destination",     models.CharField(max_length=200)),
                ("notes",           models.TextField(blank=True)),
                ("created_at",      models.DateTimeField(auto_now_add=True)),
                ("updated_at",      models.DateTimeField(auto_now=True)),
                ("organization",    models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="job_templates",
                    to="authentication.organization",
                )),
            ],
            options={"ordering": ["-created_at"]},
        ),
        migrations.AddConstraint(
            model_name="jobtemplate",
            constraint=models.UniqueConstraint(fields=("organization", "template_name"), name="job_template_unique_name"),
        ),
    ]
