from django.contrib import admin
from .models import Menu

@admin.register(Menu)
class MenuAdmin(admin.ModelAdmin):
    list_display = ("day", "organization", "classroom", "is_public", "created_by", "deleted_at")
    list_filter = ("organization", "is_public")
    search_fields = ("breakfast", "lunch", "snack")
