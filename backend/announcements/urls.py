from django.urls import path
from . import views

app_name = "announcements"
urlpatterns = [
    path("api/announcements", views.announcements, name="list"),
    path("api/announcements/<int:announcement_id>", views.announcement_detail, name="detail"),
]
