from django.contrib import admin
from .models import Driver, DriverLocation


@admin.register(Driver)
class DriverAdmin(admin.ModelAdmin):
    list_display  = ("name", "phone", "vehicle_plate", "vehicle_type", "organization", "is_available", "is_active")
    list_filter   = ("is_available", "is_active", "vehicle_type")
    search_fields = ("name", "phone", "vehicle_plate")


@admin.register(DriverLocation)
class DriverLocationAdmin(admin.ModelAdmin):
    list_display  = ("driver", "latitude", "longitude", "speed", "eta_minutes", "recorded_at")
    list_filter   = ("recorded_at",)
    search_fields = ("driver__name", "driver__phone")
