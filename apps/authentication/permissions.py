"""Role checks shared by every app."""

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework.permissions import BasePermission

from portlink.exceptions import NotFound


class IsPortAdmin(BasePermission):
    message = "Port administrator only."

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.role == "PORT_ADMIN")


class IsOrganizationMember(BasePermission):
    """Organization staff, or a port admin acting on behalf of any organization."""
    message = "Account is not linked to an organization."

    def has_permission(self, request, view):
        user = request.user
        if not (user and user.is_authenticated):
            return False
        return user.role == "PORT_ADMIN" or user.organization_id is not None


def scope_to_organization(queryset, user, field="organization"):
    """Port admins see everything; organization staff only their own rows."""
    if user.role == "PORT_ADMIN":
        return queryset
    return queryset.filter(**{field: user.organization_id})


def get_scoped_or_404(queryset, user, field="organization", **lookup):
    try:
        return scope_to_organization(queryset, user, field).get(**lookup)
    except (queryset.model.DoesNotExist, ValueError, DjangoValidationError):
        raise NotFound(f"{queryset.model._meta.verbose_name.capitalize()} not found")
