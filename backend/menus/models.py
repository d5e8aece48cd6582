from django.db import models
from django.utils import timezone
from accounts.models import Organization, User
from roster.models import Classroom, LiveQuerySet


class Menu(models.Model):
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name="menus")
    # null = whole school
    classroom = models.ForeignKey(Classroom, on_delete=models.CASCADE, null=True, blank=True, related_name="menus")
    day = models.DateField()
    breakfast = models.TextField(blank=True, max_length=1000)
    lunch = models.TextField(blank=True, max_length=1000)
    snack = models.TextField(blank=True, max_length=1000)
    notes = models.TextField(blank=True, max_length=5000)
    is_public = models.BooleanField(default=True)
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name="+")
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)
    deleted_at = models.DateTimeField(null=True, blank=True)

    objects = LiveQuerySet.as_manager()

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["organization", "day"], condition=models.Q(classroom__isnull=True),
                name="uniq_org_menu_per_day",
            ),
            models.UniqueConstraint(
                fields=["organization", "classroom", "day"], condition=models.Q(classroom__isnull=False),
                name="uniq_class_menu_per_day",
            ),
        ]
        indexes = [models.Index(fields=["organization", "-day"], name="menu_org_day_idx")]

    def __str__(self):
        return f"{self.day} {self.classroom or 'all classes'}"
