from django.contrib import admin
from .models import Story, StoryItem

class StoryItemInline(admin.TabularInline):
    model = StoryItem
    extra = 0

@admin.register(Story)
class StoryAdmin(admin.ModelAdmin):
    list_display = ("title", "organization", "classroom", "author", "is_public", "expires_at", "deleted_at")
    list_filter = ("organization", "is_public")
    search_fields = ("title", "caption", "author__email")
    inlines = [StoryItemInline]
