from django.contrib import admin
from .models import TimeSlot, VesselSchedule


@admin.register(TimeSlot)
class TimeSlotAdmin(admin.ModelAdmin):
    list_display    = ("date", "start_time", "end_time", "booked", "capacity", "status", "predicted_traffic")
    list_filter     = ("status", "predicted_traffic", "date")
    ordering        = ("date", "start_time")
    readonly_fields = ("booked",)


@admin.register(VesselSchedule)
class VesselScheduleAdmin(admin.ModelAdmin):
    list_display  = ("vessel_name", "arrival_date", "arrival_time", "estimated_trucks", "status")
    list_filter   = ("status",)
    search_fields = ("vessel_name",)
