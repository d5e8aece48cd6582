from django.db import models
from django.utils import timezone
from accounts.models import Organization, User
from roster.models import Classroom, Student


class Attendance(models.Model):
    class Status(models.TextChoices):
        ARRIVED = "arrived", "Arrived"
        ABSENT = "absent", "Absent"
        LATE = "late", "Late"
        EXCUSED = "excused", "Excused"
        AWAY_HOLIDAY = "away_holiday", "Away (holiday)"
        AWAY_SICK = "away_sick", "Away (sick)"
        GONE = "gone", "Gone home"

    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name="attendance")
    classroom = models.ForeignKey(Classroom, on_delete=models.CASCADE, null=True, blank=True, related_name="attendance")
    student = models.ForeignKey(Student, on_delete=models.CASCADE, related_name="attendance")
    date = models.DateField()
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.ARRIVED)
    notes = models.TextField(blank=True, max_length=5000)
    recorded_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name="+")
    # set when the child is picked up
    left_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = (("student", "date"),)
        indexes = [
            models.Index(fields=["classroom", "-date"], name="attendance_class_date_idx"),
            models.Index(fields=["organization", "date"], name="attendance_org_date_idx"),
        ]

    def __str__(self):
        return f"{self.student_id} {self.date} {self.status}"
