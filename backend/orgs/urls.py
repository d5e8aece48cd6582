from django.urls import path
from . import views

app_name = "orgs"
urlpatterns = [
    path("api/orgs", views.orgs, name="orgs"),
    path("api/orgs/my-org", views.my_org, name="my_org"),
    path("api/orgs/<int:org_id>", views.org_detail, name="org_detail"),
    path("api/principals", views.principals, name="principals"),
    path("api/principals/<int:user_id>", views.principal_detail, name="principal_detail"),
]
