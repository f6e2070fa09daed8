from django.contrib import admin
from .models import TrafficUpdate


@admin.register(TrafficUpdate)
class TrafficUpdateAdmin(admin.ModelAdmin):
    list_display    = ("camera_id", "timestamp", "status", "vehicle_count", "truck_count", "permits_halted", "permits_protected")
    list_filter     = ("status", "camera_id")
    readonly_fields = ("created_at",)
    ordering        = ("-timestamp",)
