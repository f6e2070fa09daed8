import django.db.models.deletion
import uuid
from django.db import migrations, models

import apps.authentication.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("auth", "0012_alter_user_first_name_max_length"),
    ]

    operations = [
        migrations.CreateModel(
            name="Organization",
            fields=[
                ("id",             models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name",           models.CharField(max_length=120)),
                ("email",          models.EmailField(max_length=254, unique=True)),
                ("contact_person", models.CharField(blank=True, max_length=120)),
                ("phone",          models.CharField(blank=True, max_length=20)),
                ("authorized_priorities", models.JSONField(
                    default=apps.authentication.models.default_authorized_priorities,
                )),
                ("is_active",      models.BooleanField(default=True)),
                ("created_at",     models.DateTimeField(auto_now_add=True)),
            ],
            options={"ordering": ["name"]},
        ),
        migrations.CreateModel(
            name="Account",
            fields=[
                ("password",     models.CharField(max_length=128, verbose_name="password")),
                ("last_login",   models.DateTimeField(blank=True, null=True, verbose_name="last login")),
                ("is_superuser", models.BooleanField(default=False)),
                ("id",           models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("email",        models.EmailField(max_length=254, unique=True)),
                ("full_name",    models.CharField(max_length=120)),
                ("role",         models.CharField(
                    choices=[
                        ("ORG_USER", "Organization User"),
                        ("PORT_ADMIN", "Port Administrator"),
                    ],
                    default="ORG_USER",
                    max_length=12,
                )),
                ("is_active",    models.BooleanField(default=True)),
                ("is_staff",     models.BooleanField(default=False)),
                ("created_at",   models.DateTimeField(auto_now_add=True)),
                ("organization", models.ForeignKey(
                    blank=True, null=True,
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name="accounts",
                    to="authentication.organization",
                )),
                ("groups",           models.ManyToManyField(blank=True, related_name="user_set", related_query_name="user", to="auth.group")),
                ("user_permissions", models.ManyToManyField(blank=True, related_name="user_set", related_query_name="user", to="auth.permission")),
            ],
            options={"verbose_name": "Account"},
        ),
        migrations.AddIndex(
            model_name="account",
            index=models.Index(fields=["role"], name="account_role_idx"),
        ),
    ]
