from django.urls import path
from . import views

app_name = "notifications"
urlpatterns = [
    path("api/notifications", views.notifications, name="list"),
    path("api/notifications/unread-count", views.unread_count, name="unread_count"),
    path("api/notifications/read-all", views.mark_all_read, name="read_all"),
    path("api/notifications/<int:notification_id>/read", views.mark_read, name="read"),
    path("api/device-tokens", views.device_tokens, name="device_tokens"),
]
