from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from .models import Account, Organization


@admin.register(Organization)
class OrganizationAdmin(admin.ModelAdmin):
    list_display  = ("name", "email", "contact_person", "authorized_priorities", "is_active")
    list_filter   = ("is_active",)
    search_fields = ("name", "email")


@admin.register(Account)
class AccountAdmin(BaseUserAdmin):
    list_display  = ("email", "full_name", "role", "organization", "is_active", "created_at")
    list_filter   = ("role", "is_active")
    search_fields = ("email", "full_name", "organization__name")
    ordering      = ("-created_at",)
    fieldsets = (
        (None,          {"fields": ("email", "password")}),
        ("Personal",    {"fields": ("full_name",)}),
        ("Role",        {"fields": ("role", "organization")}),
        ("Permissions", {"fields": ("is_active", "is_staff", "is_superuser", "groups", "user_permissions")}),
    )
    add_fieldsets = (
        (None, {"classes": ("wide",), "fields": ("email", "full_name", "role", "organization", "password1", "password2")}),
    )
