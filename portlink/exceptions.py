"""
Domain errors and the API error envelope.

Every error response has the shape {"success": false, "error": "..."}.
Validation errors add a field-level list:
    {"success": false, "error": "Validation failed",
     "errors": [{"field": "slot_id", "message": "..."}]}
"""

import logging

from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger("portlink.errors")


class NotFound(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found."
    default_code = "not_found"


class PriorityNotAuthorized(APIException):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Organization is not authorized for this priority tier."
    default_code = "priority_not_authorized"

    def __init__(self, priority, authorized=()):
        self.priority   = priority
        self.authorized = list(authorized)
        super().__init__(
            f"Your organization is not authorized to create {priority} priority jobs. "
            f"Contact admin to upgrade authorization."
        )


class JobNotPending(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "job_not_pending"

    def __init__(self, job_status):
        super().__init__(f"Job already {job_status.lower()}")


class NoSlotAvailable(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "No available slots found for the preferred date/time"
    default_code = "no_slot_available"


class NoDriverAvailable(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "No available drivers"
    default_code = "no_driver_available"


class SlotUnavailable(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Time slot is full"
    default_code = "slot_unavailable"


class DriverUnavailable(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Driver is not available"
    default_code = "driver_unavailable"


class DriverRegisteredElsewhere(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_code = "driver_registered_elsewhere"

    def __init__(self, phone):
        super().__init__(f"Driver with phone {phone} already registered with another organization")


class InvalidTransition(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_code = "invalid_transition"

    def __init__(self, entity, from_status, to_status):
        super().__init__(f"Cannot move {entity} from {from_status} to {to_status}")


def _flatten(detail, prefix=""):
    """Turn DRF's nested error dict into [{"field", "message"}]."""
    if isinstance(detail, dict):
        out = []
        for key, value in detail.items():
            field = f"{prefix}.{key}" if prefix else str(key)
            out.extend(_flatten(value, field))
        return out
    if isinstance(detail, list):
        out = []
        for item in detail:
            out.extend(_flatten(item, prefix))
        return out
    return [{"field": prefix or "non_field_errors", "message": str(detail)}]


def api_exception_handler(exc, context):
    response = exception_handler(exc, context)

    if response is None:
        view = context.get("view")
        logger.exception("Unhandled error in %s", type(view).__name__ if view else "view")
        return Response(
            {"success": False, "error": "Internal server error"},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if isinstance(exc, ValidationError):
        response.data = {
            "success": False,
            "error":   "Validation failed",
            "errors":  _flatten(exc.detail),
        }
        return response

    body = {"success": False, "error": str(getattr(exc, "detail", exc))}
    if isinstance(exc, PriorityNotAuthorized):
        body["authorized_priorities"] = exc.authorized
    if isinstance(exc, NoSlotAvailable):
        body["suggestion"] = "Try a different date or contact support"
    response.data = body
    return response
