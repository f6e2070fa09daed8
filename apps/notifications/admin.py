from django.contrib import admin
from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display    = ("title", "driver", "type", "delivery_method", "status", "created_at", "sent_at")
    list_filter     = ("type", "status", "delivery_method")
    search_fields   = ("title", "driver__name", "driver__phone")
    readonly_fields = ("created_at", "sent_at")
