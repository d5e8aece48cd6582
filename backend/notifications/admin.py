from django.contrib import admin
from .models import DeviceToken, Notification

@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("created_at", "organization", "user", "type", "title", "is_read", "priority")
    list_filter = ("type", "is_read", "priority")
    search_fields = ("title", "user__email", "organization__name")

@admin.register(DeviceToken)
class DeviceTokenAdmin(admin.ModelAdmin):
    list_display = ("user", "provider", "created_at", "last_seen_at", "deleted_at")
    list_filter = ("provider",)
    search_fields = ("user__email",)
