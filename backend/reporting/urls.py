from django.urls import path
from . import views

app_name = "reporting"
urlpatterns = [
    path("api/admin-dashboard", views.admin_dashboard, name="admin_dashboard"),
    path("api/principal-dashboard-metrics", views.principal_dashboard_metrics, name="principal_metrics"),
    path("api/teacher-dashboard-metrics", views.teacher_dashboard_metrics, name="teacher_metrics"),
    path("api/guardian-dashboard-metrics", views.guardian_dashboard_metrics, name="guardian_metrics"),
]
