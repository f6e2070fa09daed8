"""WSGI entrypoint for PortLink."""

import os
from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "portlink.settings")

application = get_wsgi_application()
