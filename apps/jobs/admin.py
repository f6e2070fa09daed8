from django.contrib import admin
from .models import Job, JobTemplate


@admin.register(Job)
class JobAdmin(admin.ModelAdmin):
    list_display    = ("job_number", "organization", "priority", "status", "preferred_date", "preferred_time", "assigned_driver")
    list_filter     = ("status", "priority", "cargo_type")
    search_fields   = ("job_number", "customer_name", "container_number")
    readonly_fields = ("id", "job_number", "priority", "created_at", "updated_at")
    ordering        = ("-created_at",)


@admin.register(JobTemplate)
class JobTemplateAdmin(admin.ModelAdmin):
    list_display    = ("template_name", "organization", "cargo_type", "priority", "created_at")
    list_filter     = ("cargo_type", "priority")
    search_fields   = ("template_name", "pickup_location", "destination")
    readonly_fields = ("id", "priority", "created_at", "updated_at")
