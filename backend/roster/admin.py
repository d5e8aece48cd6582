from django.contrib import admin
from .models import Classroom, ClassMembership, Guardian, Student, StudentGuardian

@admin.register(Classroom)
class ClassroomAdmin(admin.ModelAdmin):
    list_display = ("organization", "name", "code", "deleted_at", "created_at")
    list_filter = ("organization",)
    search_fields = ("organization__name", "name", "code")

@admin.register(ClassMembership)
class ClassMembershipAdmin(admin.ModelAdmin):
    list_display = ("classroom", "user", "membership_role", "created_at")
    list_filter = ("membership_role",)
    search_fields = ("classroom__name", "user__email")

@admin.register(Guardian)
class GuardianAdmin(admin.ModelAdmin):
    list_display = ("organization", "full_name", "email", "phone", "is_active")
    list_filter = ("organization", "is_active")
    search_fields = ("first_name", "last_name", "email", "phone")

@admin.register(Student)
class StudentAdmin(admin.ModelAdmin):
    list_display = ("organization", "full_name", "gender", "classroom", "barngildi", "deleted_at")
    list_filter = ("organization", "gender", "classroom")
    search_fields = ("first_name", "last_name")

@admin.register(StudentGuardian)
class StudentGuardianAdmin(admin.ModelAdmin):
    list_display = ("student", "guardian", "relation", "created_at")
    search_fields = ("student__first_name", "guardian__first_name", "guardian__email")
