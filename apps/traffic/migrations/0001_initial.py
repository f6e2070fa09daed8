import uuid
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="TrafficUpdate",
            fields=[
                ("id",                models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("camera_id",         models.CharField(max_length=60)),
                ("timestamp",         models.DateTimeField()),
                ("status",            models.CharField(
                    choices=[("NORMAL", "Normal"), ("MODERATE", "Moderate"), ("CONGESTED", "Congested")],
                    max_length=10,
                )),
                ("vehicle_count",     models.PositiveIntegerField(default=0)),
                ("truck_count",       models.PositiveIntegerField(default=0)),
                ("recommendation",    models.TextField(blank=True)),
                ("processed",         models.BooleanField(default=False)),
                ("permits_halted",    models.PositiveIntegerField(default=0)),
                ("permits_protected", models.PositiveIntegerField(default=0)),
                ("created_at",        models.DateTimeField(auto_now_add=True)),
            ],
            options={"ordering": ["-timestamp"]},
        ),
        migrations.AddIndex(
            model_name="trafficupdate",
            index=models.Index(fields=["-timestamp"], name="traffic_latest_idx"),
        ),
    ]
