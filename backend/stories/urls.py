from django.urls import path
from . import views

app_name = "stories"
urlpatterns = [
    path("api/stories", views.stories, name="list"),
    path("api/stories/<int:story_id>", views.story_detail, name="detail"),
    path("api/stories/<int:story_id>/items", views.story_items, name="items"),
]
