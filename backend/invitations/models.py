import secrets
from datetime import timedelta

from django.conf import settings
from django.db import models
from django.utils import timezone
from accounts.models import Organization, Role, User


def _new_token():
    return secrets.token_urlsafe(32)


def _default_expiry():
    return timezone.now() + timedelta(days=settings.INVITE_TTL_DAYS)


class Invitation(models.Model):
    ROLE_CHOICES = [(Role.TEACHER, "Teacher"), (Role.GUARDIAN, "Guardian")]

    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name="invitations")
    email = models.EmailField(max_length=255)
    role = models.CharField(max_length=16, choices=ROLE_CHOICES)
    token = models.CharField(max_length=64, unique=True, default=_new_token)
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name="+")
    accepted_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name="+")
    accepted_at = models.DateTimeField(null=True, blank=True)
    expires_at = models.DateTimeField(default=_default_expiry)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        indexes = [models.Index(fields=["organization", "email"], name="invite_org_email_idx")]

    def __str__(self):
        return f"{self.email} → {self.organization} ({self.role})"

    @property
    def is_expired(self):
        return self.expires_at <= timezone.now()

    @property
    def is_accepted(self):
        return self.accepted_at is not None
