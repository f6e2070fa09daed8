"""
Celery application.
Notification delivery and the permit-expiry sweep run here; in dev the
settings turn on CELERY_TASK_ALWAYS_EAGER so no broker is needed.
"""

import os
from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "portlink.settings_dev")

app = Celery("portlink")
app.config_from_object("django.conf:settings", namespace="CELERY")

app.autodiscover_tasks()
