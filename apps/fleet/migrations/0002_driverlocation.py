import django.core.validators
import django.db.models.deletion
import uuid
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("fleet", "0001_initial"),
        ("permits", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="DriverLocation",
            fields=[
                ("id",          models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("latitude",    models.DecimalField(decimal_places=6, max_digits=9, validators=[
                    django.core.validators.MinValueValidator(-90),
                    django.core.validators.MaxValueValidator(90),
                ])),
                ("longitude",   models.DecimalField(decimal_places=6, max_digits=9, validators=[
                    django.core.validators.MinValueValidator(-180),
                    django.core.validators.MaxValueValidator(180),
                ])),
                ("accuracy",    models.FloatField(blank=True, null=True)),
                ("speed",       models.FloatField(blank=True, null=True)),
                ("heading",     models.PositiveSmallIntegerField(blank=True, null=True, validators=[
                    django.core.validators.MaxValueValidator(360),
                ])),
                ("eta_minutes", models.PositiveIntegerField(blank=True, null=True)),
                ("recorded_at", models.DateTimeField()),
                ("created_at",  models.DateTimeField(auto_now_add=True)),
                ("driver",      models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="locations",
                    to="fleet.driver",
                )),
                ("permit",      models.ForeignKey(
                    blank=True, null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name="locations",
                    to="permits.permit",
                )),
            ],
            options={"ordering": ["-recorded_at"]},
        ),
        migrations.AddIndex(
            model_name="driverlocation",
            index=models.Index(fields=["driver", "-recorded_at"], name="driver_location_latest_idx"),
        ),
    ]
