from django.contrib import admin
from .models import Attendance

@admin.register(Attendance)
class AttendanceAdmin(admin.ModelAdmin):
    list_display = ("student", "date", "status", "classroom", "organization", "recorded_by", "left_at")
    list_filter = ("organization", "status", "date")
    search_fields = ("student__first_name", "student__last_name")
