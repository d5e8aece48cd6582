from django.contrib.auth.models import AbstractUser
from django.db import models

from .managers import UserManager


class Role(models.TextChoices):
    PRINCIPAL = "PRINCIPAL", "Principal"
    TEACHER = "TEACHER", "Teacher"
    GUARDIAN = "GUARDIAN", "Guardian"


STAFF_ROLES = (Role.PRINCIPAL, Role.TEACHER)


class User(AbstractUser):
    """
    Email-first auth; username removed. Users can belong to multiple orgs via OrgMembership.
    The system-wide Admin is a superuser and needs no membership.
    """
    class Language(models.TextChoices):
        ENGLISH = "en", "English"
        ICELANDIC = "is", "Icelandic"

    class Theme(models.TextChoices):
        LIGHT = "light", "Light"
        DARK = "dark", "Dark"
        SYSTEM = "system", "System"

    username = None
    email = models.EmailField(unique=True)
    phone = models.CharField(max_length=50, blank=True)
    language = models.CharField(max_length=2, choices=Language.choices, default=Language.ICELANDIC)
    theme = models.CharField(max_length=8, choices=Theme.choices, default=Theme.SYSTEM)

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    objects = UserManager()

    def __str__(self):
        return self.email

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()


class Organization(models.Model):
    name = models.CharField(max_length=200)
    slug = models.SlugField(max_length=100, unique=True)
    email = models.EmailField(max_length=255, blank=True)
    phone = models.CharField(max_length=50, blank=True)
    website = models.URLField(max_length=255, blank=True)
    address = models.CharField(max_length=500, blank=True)
    city = models.CharField(max_length=100, blank=True)
    state = models.CharField(max_length=100, blank=True)
    postal_code = models.CharField(max_length=20, blank=True)
    timezone = models.CharField(max_length=64, default="UTC")
    # capacity figures
    total_area = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    play_area = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    square_meters_per_student = models.DecimalField(max_digits=8, decimal_places=2, null=True, blank=True)
    maximum_allowed_students = models.PositiveIntegerField(null=True, blank=True)
    is_active = models.BooleanField(default=True)
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name="+")
    updated_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name="+")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name


class OrgMembership(models.Model):
    """
    Many-to-many link: a user can have different roles in different organizations.
    """
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="memberships")
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name="memberships")
    role = models.CharField(max_length=16, choices=Role.choices)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = (("user", "organization", "role"),)
        indexes = [
            models.Index(fields=["organization", "role"], name="membership_org_role_idx"),
            models.Index(fields=["user", "organization"], name="membership_user_org_idx"),
        ]

    def __str__(self):
        return f"{self.user.email} @ {self.organization.name} ({self.role})"
