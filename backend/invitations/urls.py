from django.urls import path
from . import views

app_name = "invitations"
urlpatterns = [
    path("api/invitations", views.invitations, name="list"),
    path("api/invitations/validate", views.validate, name="validate"),
    path("api/invitations/accept", views.accept, name="accept"),
]
