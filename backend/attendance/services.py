"""Roll-call writes. Every write is an upsert on (student, date)."""

from __future__ import annotations

from django.db import transaction

from accounts.models import Organization, OrgMembership, Role, User
from roster.models import Classroom, Student
from roster.services import guardian_student_ids
from .models import Attendance


class UnknownStudents(Exception):
    def __init__(self, ids):
        super().__init__("Some students were not found in this organization")
        self.ids = ids


class UnknownClass(Exception):
    pass


def visible_attendance(user: User, membership: OrgMembership):
    """Staff read the whole organization; guardians only their own children."""
    org = membership.organization
    qs = Attendance.objects.filter(organization=org, student__deleted_at__isnull=True)
    if membership.role == Role.GUARDIAN:
        qs = qs.filter(student_id__in=guardian_student_ids(user, org))
    return qs


def _apply(row: Attendance, rec: dict) -> None:
    status = rec.get("status")
    # picking a child up keeps the morning status unless it was already "gone"
    if status and not (row.pk and rec.get("left_at") and row.status != Attendance.Status.GONE):
        row.status = status
    if rec.get("class_id"):
        row.classroom_id = rec["class_id"]
    if "notes" in rec:
        row.notes = rec["notes"] or ""
    if "left_at" in rec:
        row.left_at = rec["left_at"]


@transaction.atomic
def record_attendance(org: Organization, user: User, records: list[dict]) -> list[Attendance]:
    """
    Upsert roll-call records. All-or-nothing: a student or class outside the
    organization aborts the whole batch.
    """
    wanted = list(dict.fromkeys(r["student_id"] for r in records))
    students = {s.id: s for s in Student.objects.live().filter(organization=org, id__in=wanted)}
    missing = [sid for sid in wanted if sid not in students]
    if missing:
        raise UnknownStudents(missing)
    class_ids = {r["class_id"] for r in records if r.get("class_id")}
    if class_ids and Classroom.objects.live().filter(organization=org, id__in=class_ids).count() != len(class_ids):
        raise UnknownClass("Class not found")

    out = []
    for rec in records:
        student = students[rec["student_id"]]
        row = Attendance.objects.select_for_update().filter(student=student, date=rec["date"]).first()
        if row is None:
            row = Attendance(organization=org, student=student, date=rec["date"],
                             classroom_id=student.classroom_id)
        _apply(row, rec)
        row.recorded_by = user
        row.save()
        out.append(row)
    return out
