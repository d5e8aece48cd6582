from django.urls import path
from . import views

app_name = "roster"
urlpatterns = [
    path("api/classes", views.classes, name="classes"),
    path("api/classes/<int:class_id>", views.class_detail, name="class_detail"),
    path("api/assign-teacher-class", views.assign_teacher_class, name="assign_teacher_class"),
    path("api/remove-teacher-class", views.remove_teacher_class, name="remove_teacher_class"),
    path("api/assign-students-class", views.assign_students_class, name="assign_students_class"),
    path("api/teacher-classes", views.teacher_classes, name="teacher_classes"),
    path("api/teachers", views.teachers, name="teachers"),
    path("api/guardians", views.guardians, name="guardians"),
    path("api/students", views.students, name="students"),
    path("api/guardian-students", views.guardian_students, name="guardian_students"),
    path("api/search-students", views.search_students, name="search_students"),
    path("api/search-guardians", views.search_guardians, name="search_guardians"),
    path("api/search-classes", views.search_classes, name="search_classes"),
    path("api/search-teachers", views.search_teachers, name="search_teachers"),
]
