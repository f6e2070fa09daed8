from django.contrib import admin
from .models import Permit, PermitCodeSequence


@admin.register(Permit)
class PermitAdmin(admin.ModelAdmin):
    list_display    = ("permit_code", "priority", "status", "driver", "slot", "job", "approved_at", "halted_at")
    list_filter     = ("status", "priority", "cargo_type", "delivery_method")
    search_fields   = ("permit_code", "qr_code", "driver__name", "driver__phone")
    readonly_fields = ("id", "permit_code", "qr_code", "priority", "created_at", "updated_at")
    ordering        = ("-created_at",)


@admin.register(PermitCodeSequence)
class PermitCodeSequenceAdmin(admin.ModelAdmin):
    list_display    = ("name", "last_number")
    readonly_fields = ("last_number",)
