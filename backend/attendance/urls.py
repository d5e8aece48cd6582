from django.urls import path
from . import views

app_name = "attendance"
urlpatterns = [
    path("api/attendance", views.attendance, name="list"),
    path("api/attendance/batch", views.attendance_batch, name="batch"),
    path("api/teacher-attendance-initial", views.teacher_attendance_initial, name="teacher_initial"),
]
