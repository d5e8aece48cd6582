from django.contrib import admin
from .models import Announcement

@admin.register(Announcement)
class AnnouncementAdmin(admin.ModelAdmin):
    list_display = ("title", "organization", "classroom", "author", "week_start", "is_public", "deleted_at")
    list_filter = ("organization", "is_public")
    search_fields = ("title", "body")
