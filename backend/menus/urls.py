from django.urls import path
from . import views

app_name = "menus"
urlpatterns = [
    path("api/menus", views.menus, name="list"),
]
