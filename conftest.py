"""
pytest configuration for PortLink.
Sets Django settings and provides shared fixtures.
"""

import datetime
import uuid

import pytest
from django.conf import settings


def pytest_configure(config):
    """Configure Django settings before tests run."""
    if not settings.configured:
        settings.configure(
            DATABASES={
                "default": {
                    "ENGINE": "django.db.backends.sqlite3",
                    "NAME":   ":memory:",
                }
            },
            INSTALLED_APPS=[
                "django.contrib.admin",
                "django.contrib.contenttypes",
                "django.contrib.auth",
                "django.contrib.sessions",
                "django.contrib.messages",
                "django.contrib.staticfiles",
                "rest_framework",
                "rest_framework_simplejwt",
                "drf_spectacular",
                "channels",
                "django_filters",
                "corsheaders",
                "apps.authentication",
                "apps.fleet",
                "apps.scheduling",
                "apps.permits",
                "apps.jobs",
                "apps.traffic",
                "apps.notifications",
                "apps.ops",
            ],
            AUTH_USER_MODEL="authentication.Account",
            REST_FRAMEWORK={
                "DEFAULT_AUTHENTICATION_CLASSES": [
                    "rest_framework_simplejwt.authentication.JWTAuthentication",
                ],
                "DEFAULT_PERMISSION_CLASSES": [
                    "rest_framework.permissions.IsAuthenticated",
                ],
                "DEFAULT_FILTER_BACKENDS": [
                    "django_filters.rest_framework.DjangoFilterBackend",
                    "rest_framework.filters.SearchFilter",
                    "rest_framework.filters.OrderingFilter",
                ],
                "DEFAULT_PAGINATION_CLASS": "rest_framework.pagination.PageNumberPagination",
                "PAGE_SIZE": 50,
                "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
                "EXCEPTION_HANDLER": "portlink.exceptions.api_exception_handler",
            },
            SPECTACULAR_SETTINGS={
                "TITLE": "PortLink API",
                "DESCRIPTION": "Port truck scheduling, permits and congestion control",
                "VERSION": "1.0.0",
                "SERVE_INCLUDE_SCHEMA": False,
            },
            SECRET_KEY="test-secret-key-not-for-production",
            DEBUG=True,
            USE_TZ=True,
            TIME_ZONE="Asia/Riyadh",
            ROOT_URLCONF="portlink.urls",
            DEFAULT_AUTO_FIELD="django.db.models.BigAutoField",
            TEMPLATES=[{
                "BACKEND": "django.template.backends.django.DjangoTemplates",
                "DIRS": [],
                "APP_DIRS": True,
                "OPTIONS": {
                    "context_processors": [
                        "django.template.context_processors.debug",
                        "django.template.context_processors.request",
                        "django.contrib.auth.context_processors.auth",
                        "django.contrib.messages.context_processors.messages",
                    ],
                },
            }],
            MIDDLEWARE=[
                "django.middleware.security.SecurityMiddleware",
                "corsheaders.middleware.CorsMiddleware",
                "django.contrib.sessions.middleware.SessionMiddleware",
                "django.middleware.common.CommonMiddleware",
                "django.middleware.csrf.CsrfViewMiddleware",
                "django.contrib.auth.middleware.AuthenticationMiddleware",
                "django.contrib.messages.middleware.MessageMiddleware",
            ],
            CHANNEL_LAYERS={
                "default": {
                    "BACKEND": "channels.layers.InMemoryChannelLayer",
                }
            },
            ASGI_APPLICATION="portlink.asgi.application",
            STATIC_URL="/static/",
            STATIC_ROOT="/tmp/staticfiles_test",
            CACHES={
                "default": {
                    "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
                }
            },
            CELERY_TASK_ALWAYS_EAGER=True,   # Execute tasks synchronously in tests
            CELERY_TASK_EAGER_PROPAGATES=True,
            MAINTENANCE_MODE=False,
            CORS_ALLOW_ALL_ORIGINS=True,
            # External services: empty means log-only / open ingest
            SMS_GATEWAY_URL="",
            TRAFFIC_INGEST_KEY="",
            PORTLINK_SURGE_WINDOW=(8, 14),
            PORTLINK_SURGE_TRUCK_THRESHOLD=400,
            PORTLINK_SURGE_CONGESTED_THRESHOLD=600,
            PORTLINK_SURGE_ALTERNATIVES=5,
            PORTLINK_PERMIT_GRACE_HOURS=24,
            SIMPLE_JWT={
                "ACCESS_TOKEN_LIFETIME": datetime.timedelta(hours=8),
                "REFRESH_TOKEN_LIFETIME": datetime.timedelta(days=7),
                "ALGORITHM": "HS256",
                "AUTH_HEADER_TYPES": ("Bearer",),
            },
        )

    # Registers the project Celery app so shared tasks pick up eager mode
    import portlink  # noqa: F401


# ═══════════════════════════════════════════════════════════════════════════════
# SHARED FIXTURES
# ═══════════════════════════════════════════════════════════════════════════════

SLOT_DATE = datetime.date(2025, 1, 10)


@pytest.fixture
def api_client():
    from rest_framework.test import APIClient
    return APIClient()


@pytest.fixture
def make_org(db):
    from apps.authentication.models import Organization

    def _make(name="Gulf Clearing Co", priorities=("NORMAL", "LOW"), **kwargs):
        return Organization.objects.create(
            name=name,
            email=kwargs.pop("email", f"{uuid.uuid4().hex[:8]}@example.com"),
            authorized_priorities=list(priorities),
            **kwargs,
        )
    return _make


@pytest.fixture
def org(make_org):
    return make_org(priorities=["EMERGENCY", "ESSENTIAL", "NORMAL", "LOW"])


@pytest.fixture
def make_account(db):
    from apps.authentication.models import Account

    def _make(organization=None, role="ORG_USER", **kwargs):
        return Account.objects.create_user(
            email=kwargs.pop("email", f"{uuid.uuid4().hex[:8]}@example.com"),
            password="Test@1234",
            full_name=kwargs.pop("full_name", "Test User"),
            role=role,
            organization=organization,
            **kwargs,
        )
    return _make


@pytest.fixture
def org_user(make_account, org):
    return make_account(organization=org, full_name="Dispatcher Dana")


@pytest.fixture
def port_admin(make_account):
    return make_account(role="PORT_ADMIN", full_name="Control Room", is_staff=True)


@pytest.fixture
def auth_client(api_client, org_user):
    api_client.force_authenticate(user=org_user)
    return api_client


@pytest.fixture
def admin_client(api_client, port_admin):
    api_client.force_authenticate(user=port_admin)
    return api_client


@pytest.fixture
def make_driver(db):
    from apps.fleet.models import Driver

    def _make(organization=None, name=None, **kwargs):
        return Driver.objects.create(
            organization=organization,
            name=name or f"Driver {uuid.uuid4().hex[:4]}",
            phone=kwargs.pop("phone", f"+9665{uuid.uuid4().int % 10**8:08d}"),
            vehicle_plate=kwargs.pop("vehicle_plate", "ABC 1234"),
            **kwargs,
        )
    return _make


@pytest.fixture
def driver(make_driver, org):
    return make_driver(organization=org, name="Ahmed")


@pytest.fixture
def make_slot(db):
    from apps.scheduling.models import TimeSlot

    def _make(start="10:00", end=None, date=SLOT_DATE, capacity=10, booked=0, **kwargs):
        start_t = datetime.time.fromisoformat(start)
        end_t   = datetime.time.fromisoformat(end) if end else start_t.replace(hour=(start_t.hour + 1) % 24)
        return TimeSlot.objects.create(
            date=date, start_time=start_t, end_time=end_t,
            capacity=capacity, booked=booked, **kwargs,
        )
    return _make


@pytest.fixture
def make_job(db):
    from apps.jobs.models import Job
    from apps.scheduling.priority import classify

    def _make(organization, cargo_type="STANDARD", preferred_time="10:00", **kwargs):
        return Job.objects.create(
            organization=organization,
            job_number=kwargs.pop("job_number", f"JOB-20250110-{uuid.uuid4().hex[:6].upper()}"),
            customer_name=kwargs.pop("customer_name", "Acme Imports"),
            cargo_type=cargo_type,
            priority=kwargs.pop("priority", classify(cargo_type)),
            pickup_location="Berth 4",
            destination="Dry Port",
            preferred_date=kwargs.pop("preferred_date", SLOT_DATE),
            preferred_time=datetime.time.fromisoformat(preferred_time) if preferred_time else None,
            **kwargs,
        )
    return _make


@pytest.fixture
def make_permit(db):
    from apps.permits.models import Permit

    def _make(driver, slot, priority="NORMAL", status="APPROVED", **kwargs):
        return Permit.objects.create(
            permit_code=kwargs.pop("permit_code", f"PRM-T-{uuid.uuid4().hex[:10].upper()}"),
            qr_code=f"PERMIT-{uuid.uuid4().hex[:16].upper()}",
            driver=driver, slot=slot,
            cargo_type=kwargs.pop("cargo_type", "STANDARD"),
            priority=priority, status=status, **kwargs,
        )
    return _make
