from django.db import models
from django.utils import timezone
from accounts.models import Organization, User
from roster.models import Classroom


class StoryQuerySet(models.QuerySet):
    def live(self):
        return self.filter(deleted_at__isnull=True)

    def unexpired(self):
        return self.filter(expires_at__gt=timezone.now())


class Story(models.Model):
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name="stories")
    # null = organization-wide
    classroom = models.ForeignKey(Classroom, on_delete=models.CASCADE, null=True, blank=True, related_name="stories")
    author = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name="stories")
    title = models.CharField(max_length=500, blank=True)
    caption = models.TextField(max_length=2000, blank=True)
    is_public = models.BooleanField(default=False)
    expires_at = models.DateTimeField()
    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)
    deleted_at = models.DateTimeField(null=True, blank=True)

    objects = StoryQuerySet.as_manager()

    class Meta:
        verbose_name_plural = "stories"
        indexes = [
            models.Index(fields=["classroom", "expires_at"], name="story_class_expiry_idx"),
            models.Index(fields=["organization", "created_at"], name="story_org_created_idx"),
        ]

    def __str__(self):
        return self.title or f"Story {self.pk}"


class StoryItem(models.Model):
    story = models.ForeignKey(Story, on_delete=models.CASCADE, related_name="items")
    order_index = models.PositiveIntegerField(default=0)
    url = models.URLField(max_length=2000, blank=True)
    duration_ms = models.PositiveIntegerField(null=True, blank=True)
    caption = models.TextField(max_length=2000, blank=True)
    mime_type = models.CharField(max_length=100, blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["order_index"]
        unique_together = (("story", "order_index"),)

    def __str__(self):
        return f"{self.story_id}#{self.order_index}"
