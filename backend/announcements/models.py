from django.db import models
from django.utils import timezone
from accounts.models import Organization, User
from roster.models import Classroom


class Announcement(models.Model):
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name="announcements")
    # null = every class
    classroom = models.ForeignKey(Classroom, on_delete=models.CASCADE, null=True, blank=True, related_name="announcements")
    author = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name="announcements")
    title = models.CharField(max_length=500)
    body = models.TextField(blank=True)
    week_start = models.DateField(null=True, blank=True)
    is_public = models.BooleanField(default=True)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)
    deleted_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        indexes = [models.Index(fields=["organization", "week_start"], name="announce_org_week_idx")]

    def __str__(self):
        return self.title
