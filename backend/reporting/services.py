"""Dashboard metric queries. Every count is scoped to one organization except the Admin totals."""

from __future__ import annotations

from datetime import timedelta

from django.utils import timezone

from accounts.models import Organization, OrgMembership, Role, User
from announcements.services import visible_announcements
from notifications.services import unread_count
from roster.models import Classroom, Guardian, Student
from roster.services import guardian_student_ids, taught_class_ids
from stories.models import Story
from stories.services import visible_stories


def _week_start(today=None):
    today = today or timezone.localdate()
    return today - timedelta(days=today.weekday())


def admin_totals() -> dict:
    roles = OrgMembership.objects.filter(is_active=True)
    return {
        "total_orgs": Organization.objects.count(),
        "active_orgs": Organization.objects.filter(is_active=True).count(),
        "total_principals": roles.filter(role=Role.PRINCIPAL).values("user_id").distinct().count(),
        "total_teachers": roles.filter(role=Role.TEACHER).values("user_id").distinct().count(),
        "total_guardians": Guardian.objects.filter(is_active=True).count(),
        "total_students": Student.objects.live().count(),
    }


def principal_metrics(org: Organization) -> dict:
    roles = OrgMembership.objects.filter(organization=org, is_active=True)
    return {
        "students": Student.objects.live().filter(organization=org).count(),
        "teachers": roles.filter(role=Role.TEACHER).count(),
        "guardians": Guardian.objects.filter(organization=org, is_active=True).count(),
        "classes": Classroom.objects.live().filter(organization=org).count(),
        "active_stories": Story.objects.live().unexpired().filter(organization=org).count(),
        "announcements_this_week": org.announcements.filter(
            deleted_at__isnull=True, created_at__date__gte=_week_start()
        ).count(),
    }


def teacher_metrics(user: User, membership: OrgMembership) -> dict:
    org = membership.organization
    class_ids = taught_class_ids(user, org)
    return {
        "my_classes": len(class_ids),
        "my_students": Student.objects.live().filter(organization=org, classroom_id__in=class_ids).count(),
        "active_stories": visible_stories(user, membership).count(),
        "unread_notifications": unread_count(user, org),
    }


def guardian_metrics(user: User, membership: OrgMembership) -> dict:
    org = membership.organization
    latest = visible_announcements(user, membership).order_by("-created_at", "-id")[:3]
    return {
        "children": len(guardian_student_ids(user, org)),
        "active_stories": visible_stories(user, membership).count(),
        "unread_notifications": unread_count(user, org),
        "latest_announcements": [
            {"id": a.id, "title": a.title, "class_id": a.classroom_id, "created_at": a.created_at}
            for a in latest
        ],
    }
