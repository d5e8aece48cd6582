from django.conf import settings
from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path(f"{settings.ADMIN_URL}/", admin.site.urls),
    path("", include("ops.urls")),
    path("", include("accounts.urls")),
    path("", include("orgs.urls")),
    path("", include("roster.urls")),
    path("", include("stories.urls")),
    path("", include("notifications.urls")),
    path("", include("announcements.urls")),
    path("", include("invitations.urls")),
    path("", include("attendance.urls")),
    path("", include("menus.urls")),
    path("", include("reporting.urls")),
]
