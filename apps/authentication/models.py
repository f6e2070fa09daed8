"""
Authentication models.
Organization is the customer (shipping line, clearing agent, hospital supplier...).
Account is the custom User — organization staff and port administrators.
"""

import uuid
from django.db import models
from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin, BaseUserManager


def default_authorized_priorities():
    return ["NORMAL", "LOW"]


class Organization(models.Model):
    """A company allowed to submit truck jobs to the port."""
    id             = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name           = models.CharField(max_length=120)
    email          = models.EmailField(unique=True)
    contact_person = models.CharField(max_length=120, blank=True)
    phone          = models.CharField(max_length=20, blank=True)
    # Tiers this organization may request; EMERGENCY/ESSENTIAL are granted by the port
    authorized_priorities = models.JSONField(default=default_authorized_priorities)
    is_active      = models.BooleanField(default=True)
    created_at     = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name

    def is_authorized_for(self, priority: str) -> bool:
        return priority in (self.authorized_priorities or [])


class AccountManager(BaseUserManager):
    def create_user(self, email, password=None, **extra):
        if not email:
            raise ValueError("Email is required.")
        user = self.model(email=self.normalize_email(email), **extra)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password, **extra):
        extra.setdefault("is_staff", True)
        extra.setdefault("is_superuser", True)
        extra.setdefault("role", Account.Role.PORT_ADMIN)
        return self.create_user(email, password, **extra)


class Account(AbstractBaseUser, PermissionsMixin):
    """Every human who logs in — organization staff or port control room."""

    class Role(models.TextChoices):
        ORG_USER   = "ORG_USER",   "Organization User"
        PORT_ADMIN = "PORT_ADMIN", "Port Administrator"

    id           = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email        = models.EmailField(unique=True)
    full_name    = models.CharField(max_length=120)
    role         = models.CharField(max_length=12, choices=Role.choices, default=Role.ORG_USER)
    organization = models.ForeignKey(Organization, on_delete=models.PROTECT,
                                     null=True, blank=True, related_name="accounts")
    is_active    = models.BooleanField(default=True)
    is_staff     = models.BooleanField(default=False)
    created_at   = models.DateTimeField(auto_now_add=True)

    USERNAME_FIELD  = "email"
    REQUIRED_FIELDS = ["full_name"]

    objects = AccountManager()

    class Meta:
        verbose_name = "Account"
        indexes = [models.Index(fields=["role"], name="account_role_idx")]

    def __str__(self):
        return f"{self.full_name} ({self.role})"

    @property
    def is_port_admin(self) -> bool:
        return self.role == self.Role.PORT_ADMIN
