from django.db import models
from django.utils import timezone
from accounts.models import Organization, User


class NotificationQuerySet(models.QuerySet):
    def current(self):
        now = timezone.now()
        return self.filter(models.Q(expires_at__isnull=True) | models.Q(expires_at__gt=now))


class Notification(models.Model):
    class Type(models.TextChoices):
        ANNOUNCEMENT_CLASS = "announcement_class", "Class announcement"
        ANNOUNCEMENT_ORG = "announcement_org", "Organization announcement"
        STORY_CLASS = "story_class", "Class story"
        STORY_ORG = "story_org", "Organization story"

    class Priority(models.TextChoices):
        NORMAL = "normal", "Normal"
        HIGH = "high", "High"

    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name="notifications")
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="notifications")
    type = models.CharField(max_length=32, choices=Type.choices)
    title = models.CharField(max_length=255)
    body = models.TextField(blank=True)
    data = models.JSONField(default=dict, blank=True)
    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    priority = models.CharField(max_length=8, choices=Priority.choices, default=Priority.NORMAL)
    expires_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    objects = NotificationQuerySet.as_manager()

    class Meta:
        indexes = [models.Index(fields=["user", "organization", "is_read", "created_at"], name="notif_user_org_read_idx")]

    def __str__(self):
        return f"{self.type} → {self.user_id}: {self.title}"


class DeviceToken(models.Model):
    class Provider(models.TextChoices):
        FCM = "fcm", "Firebase Cloud Messaging"
        APNS = "apns", "Apple Push"
        WEB_PUSH = "web-push", "Web Push"

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="device_tokens")
    provider = models.CharField(max_length=16, choices=Provider.choices, default=Provider.FCM)
    token = models.CharField(max_length=512)
    created_at = models.DateTimeField(default=timezone.now)
    last_seen_at = models.DateTimeField(default=timezone.now)
    deleted_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        unique_together = (("user", "provider", "token"),)

    def __str__(self):
        return f"{self.provider}:{self.token[:12]}… ({self.user_id})"
