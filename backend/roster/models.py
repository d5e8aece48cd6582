from decimal import Decimal

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone
from accounts.models import Organization, User


class TimeStampedModel(models.Model):
    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)
    class Meta:
        abstract = True


class LiveQuerySet(models.QuerySet):
    def live(self):
        return self.filter(deleted_at__isnull=True)


class Classroom(TimeStampedModel):
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name="classrooms")
    name = models.CharField(max_length=200)
    code = models.CharField(max_length=50, null=True, blank=True)
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name="+")
    deleted_at = models.DateTimeField(null=True, blank=True)

    objects = LiveQuerySet.as_manager()

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["organization", "code"], condition=models.Q(deleted_at__isnull=True),
                name="uniq_live_class_code_per_org",
            ),
        ]
        indexes = [models.Index(fields=["organization", "name"], name="classroom_org_name_idx")]

    def __str__(self):
        return f"{self.name} ({self.code})" if self.code else self.name


class ClassMembership(models.Model):
    class MembershipRole(models.TextChoices):
        TEACHER = "teacher", "Teacher"
        TEACHER_ASSISTANT = "teacher_assistant", "Teacher assistant"
        OBSERVER = "observer", "Observer"

    classroom = models.ForeignKey(Classroom, on_delete=models.CASCADE, related_name="memberships")
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="class_memberships")
    membership_role = models.CharField(max_length=20, choices=MembershipRole.choices, default=MembershipRole.TEACHER)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        unique_together = (("classroom", "user"),)


class Guardian(TimeStampedModel):
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name="guardians")
    # login account; one guardian row per account and org
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name="guardian_profiles")
    first_name = models.CharField(max_length=128)
    last_name = models.CharField(max_length=128)
    email = models.EmailField(max_length=255)
    phone = models.CharField(max_length=50, blank=True)
    ssn = models.CharField(max_length=32, blank=True)
    address = models.CharField(max_length=500, blank=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        indexes = [
            models.Index(fields=["organization", "last_name", "first_name"], name="guardian_org_name_idx"),
            models.Index(fields=["organization", "email"], name="guardian_org_email_idx"),
        ]
        constraints = [
            models.UniqueConstraint(fields=["organization", "user"], name="uniq_guardian_user_per_org"),
        ]

    def __str__(self):
        return f"{self.full_name} <{self.email}>"

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()


class Student(TimeStampedModel):
    class Gender(models.TextChoices):
        MALE = "male", "Male"
        FEMALE = "female", "Female"
        OTHER = "other", "Other"
        UNKNOWN = "unknown", "Unknown"

    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name="students")
    classroom = models.ForeignKey(Classroom, on_delete=models.SET_NULL, null=True, blank=True, related_name="students")
    first_name = models.CharField(max_length=128)
    last_name = models.CharField(max_length=128)
    dob = models.DateField()
    gender = models.CharField(max_length=8, choices=Gender.choices, default=Gender.UNKNOWN)
    start_date = models.DateField(null=True, blank=True)
    barngildi = models.DecimalField(
        max_digits=2, decimal_places=1, default=Decimal("1.0"),
        validators=[MinValueValidator(Decimal("0.5")), MaxValueValidator(Decimal("1.9"))],
    )
    student_language = models.CharField(max_length=2, choices=User.Language.choices, default=User.Language.ICELANDIC)
    medical_notes = models.TextField(max_length=5000, blank=True)
    allergies = models.TextField(max_length=5000, blank=True)
    emergency_contact = models.TextField(max_length=5000, blank=True)
    address = models.CharField(max_length=500)
    social_security_number = models.CharField(max_length=32)
    deleted_at = models.DateTimeField(null=True, blank=True)

    objects = LiveQuerySet.as_manager()

    class Meta:
        indexes = [models.Index(fields=["organization", "last_name", "first_name"], name="student_org_name_idx")]

    def __str__(self):
        return self.full_name

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()


class StudentGuardian(TimeStampedModel):
    student = models.ForeignKey(Student, on_delete=models.CASCADE, related_name="guardian_links")
    guardian = models.ForeignKey(Guardian, on_delete=models.CASCADE, related_name="student_links")
    relation = models.CharField(max_length=32, default="parent")

    class Meta:
        unique_together = (("student", "guardian"),)
