"""Authentication: JWT login with organization claims, profile."""

from rest_framework import generics, serializers
from rest_framework.permissions import IsAuthenticated
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer
from rest_framework_simplejwt.views import TokenObtainPairView
from drf_spectacular.utils import extend_schema

from .models import Account, Organization


# ── Serializers ───────────────────────────────────────────────────────────────
class PortLinkTokenSerializer(TokenObtainPairSerializer):
    """
    Signed claims replace the old JSON session cookie: the access token
    carries the organization and its authorized tiers, and expires on its own.
    """

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token["role"] = user.role
        org = user.organization
        token["organization_id"]       = str(org.id) if org else None
        token["organization_name"]     = org.name if org else None
        token["authorized_priorities"] = list(org.authorized_priorities) if org else []
        return token

    def validate(self, attrs):
        data = super().validate(attrs)
        org = self.user.organization
        if org is not None and not org.is_active:
            raise serializers.ValidationError({"email": "Organization is inactive."})
        data["role"] = self.user.role
        data["organization"] = OrganizationSerializer(org).data if org else None
        return data


class OrganizationSerializer(serializers.ModelSerializer):
    class Meta:
        model  = Organization
        fields = ["id", "name", "email", "contact_person", "phone", "authorized_priorities"]


class AccountProfileSerializer(serializers.ModelSerializer):
    organization = OrganizationSerializer(read_only=True)

    class Meta:
        model  = Account
        fields = ["id", "email", "full_name", "role", "organization", "created_at"]
        read_only_fields = ["id", "email", "role", "organization", "created_at"]


# ── Views ─────────────────────────────────────────────────────────────────────
@extend_schema(tags=["Auth"])
class LoginView(TokenObtainPairView):
    """POST /api/auth/login/ — email + password → access/refresh pair."""
    serializer_class = PortLinkTokenSerializer


@extend_schema(tags=["Auth"])
class ProfileView(generics.RetrieveUpdateAPIView):
    """GET/PATCH /api/auth/me/ — Retrieve or update own profile."""
    serializer_class   = AccountProfileSerializer
    permission_classes = [IsAuthenticated]

    def get_object(self):
        return self.request.user
