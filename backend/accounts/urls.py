from django.urls import path

from . import views

app_name = "accounts"
urlpatterns = [
    path("api/auth/csrf", views.csrf, name="csrf"),
    path("api/auth/login", views.login_view, name="login"),
    path("api/auth/logout", views.logout_view, name="logout"),
    path("api/auth/user-context", views.user_context, name="user_context"),
    path("api/auth/switch-org", views.switch_org, name="switch_org"),
    path("api/user-preferences", views.user_preferences, name="user_preferences"),
]
