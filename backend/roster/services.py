"""Roster lookups shared by the class, story, announcement and dashboard views.

Audience questions ("which classes does this teacher teach", "which classes
are this guardian's children in") are answered here, always from the
server-side roster and never from ids the client sends.
"""

from __future__ import annotations

from django.db import transaction
from django.utils import timezone

from accounts.models import Organization, OrgMembership, Role, User
from .models import Classroom, ClassMembership, Guardian, Student, StudentGuardian


def taught_class_ids(user: User, org: Organization) -> set[int]:
    return set(
        ClassMembership.objects.filter(
            user=user, classroom__organization=org, classroom__deleted_at__isnull=True
        ).values_list("classroom_id", flat=True)
    )


def guardian_student_ids(user: User, org: Organization) -> set[int]:
    return set(
        StudentGuardian.objects.filter(
            guardian__user=user, guardian__organization=org, guardian__is_active=True,
            student__deleted_at__isnull=True,
        ).values_list("student_id", flat=True)
    )


def guardian_class_ids(user: User, org: Organization) -> set[int]:
    return set(
        Student.objects.live().filter(
            id__in=guardian_student_ids(user, org), classroom__isnull=False
        ).values_list("classroom_id", flat=True)
    )


def audience_class_ids(user: User, membership: OrgMembership) -> set[int] | None:
    """Class ids a member may see class-scoped content for; None means every class."""
    if membership.role == Role.PRINCIPAL:
        return None
    if membership.role == Role.TEACHER:
        return taught_class_ids(user, membership.organization)
    return guardian_class_ids(user, membership.organization)


def is_active_teacher(user_id: int, org: Organization) -> bool:
    return OrgMembership.objects.filter(
        user_id=user_id, organization=org, role=Role.TEACHER, is_active=True
    ).exists()


def assign_teacher(classroom: Classroom, user_id: int) -> ClassMembership:
    cm, _ = ClassMembership.objects.get_or_create(
        classroom=classroom, user_id=user_id,
        defaults={"membership_role": ClassMembership.MembershipRole.TEACHER},
    )
    return cm


@transaction.atomic
def assign_students(classroom: Classroom, student_ids: list[int]) -> tuple[int, list[int]]:
    """
    Move students into a class. All-or-nothing: when any id is not a live
    student of the class's org, nothing changes and the missing ids are returned.
    """
    wanted = list(dict.fromkeys(student_ids))
    found = set(
        Student.objects.live().filter(organization=classroom.organization, id__in=wanted)
        .values_list("id", flat=True)
    )
    missing = [sid for sid in wanted if sid not in found]
    if missing:
        return 0, missing
    n = Student.objects.filter(id__in=found).update(classroom=classroom, updated_at=timezone.now())
    return n, []


@transaction.atomic
def soft_delete_classroom(classroom: Classroom) -> None:
    now = timezone.now()
    classroom.students.update(classroom=None, updated_at=now)
    classroom.memberships.all().delete()
    classroom.deleted_at = now
    classroom.save(update_fields=["deleted_at", "updated_at"])


@transaction.atomic
def set_student_guardians(student: Student, guardian_ids: list[int]) -> list[int]:
    """Replace the student's guardian set; ids outside the org are ignored."""
    valid = list(
        Guardian.objects.filter(organization=student.organization, id__in=guardian_ids)
        .values_list("id", flat=True)
    )
    StudentGuardian.objects.filter(student=student).exclude(guardian_id__in=valid).delete()
    for gid in valid:
        StudentGuardian.objects.get_or_create(student=student, guardian_id=gid)
    return valid


class EmailInUse(Exception):
    pass


@transaction.atomic
def create_guardian(org: Organization, data: dict, student: Student | None = None) -> Guardian:
    """
    Guardians sign in, so each one gets a User (unusable password until they
    accept an invitation or reset) plus a GUARDIAN membership.

    A parent already known to another organization keeps their account; only
    a second guardian row in the same organization is refused.
    """
    email = data["email"].strip().lower()
    if Guardian.objects.filter(organization=org, email__iexact=email).exists():
        raise EmailInUse("This email is already being used by another user")
    user = User.objects.filter(email__iexact=email).first()
    if user is None:
        user = User.objects.create_user(
            email=email, first_name=data["first_name"], last_name=data["last_name"],
            phone=data.get("phone") or "",
        )
    elif Guardian.objects.filter(organization=org, user=user).exists():
        raise EmailInUse("This email is already being used by another user")
    mem, created = OrgMembership.objects.get_or_create(user=user, organization=org, role=Role.GUARDIAN)
    if not created and not mem.is_active:
        mem.is_active = True
        mem.save(update_fields=["is_active"])
    guardian = Guardian.objects.create(
        organization=org, user=user, email=email,
        first_name=data["first_name"], last_name=data["last_name"],
        phone=data.get("phone") or "", ssn=data.get("ssn") or "",
        address=data.get("address") or "",
    )
    if student is not None:
        StudentGuardian.objects.create(student=student, guardian=guardian, relation=data.get("relation") or "parent")
    return guardian
