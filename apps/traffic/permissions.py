import hmac

from django.conf import settings
from rest_framework.permissions import BasePermission


class HasCameraKey(BasePermission):
    """Camera feeds authenticate with X-Camera-Key. No key configured means open ingest."""
    message = "Invalid or missing camera key."

    def has_permission(self, request, view):
        expected = settings.TRAFFIC_INGEST_KEY
        if not expected:
            return True
        supplied = request.headers.get("X-Camera-Key", "")
        return hmac.compare_digest(supplied.encode(), expected.encode())
