import datetime as dt

import pytest
from django.urls import reverse
from django.utils import timezone

from announcements.models import Announcement
from notifications.models import Notification
from stories.models import Story


def _story(org, author, classroom=None, days=1):
    return Story.objects.create(organization=org, author=author, classroom=classroom,
                                expires_at=timezone.now() + dt.timedelta(days=days))


@pytest.mark.django_db
def test_admin_dashboard(login, admin_user, org, other_org, principal, teacher, guardian_user):
    other_org.is_active = False
    other_org.save()
    body = login(admin_user).get(reverse("reporting:admin_dashboard")).json()
    assert body["total_orgs"] == 2 and body["active_orgs"] == 1
    assert body["total_principals"] == 1
    assert body["total_teachers"] == 1
    assert body["total_guardians"] == 1
    assert body["total_students"] == 1
    assert len(body["recent_orgs"]) == 2


@pytest.mark.django_db
def test_principal_metrics(login, org, principal, teacher, classroom, guardian_user):
    _story(org, principal)
    _story(org, principal, days=-1)
    Announcement.objects.create(organization=org, author=principal, title="This week")
    body = login(principal).get(reverse("reporting:principal_metrics")).json()
    assert body == {
        "students": 1,
        "teachers": 1,
        "guardians": 1,
        "classes": 1,
        "active_stories": 1,
        "announcements_this_week": 1,
    }


@pytest.mark.django_db
def test_teacher_metrics(login, org, principal, teacher, classroom, other_classroom, taught, student):
    _story(org, principal, classroom=classroom)
    _story(org, principal, classroom=other_classroom)
    Notification.objects.create(organization=org, user=teacher, type="story_class", title="t")
    body = login(teacher).get(reverse("reporting:teacher_metrics")).json()
    assert body == {"my_classes": 1, "my_students": 1, "active_stories": 1, "unread_notifications": 1}


@pytest.mark.django_db
def test_guardian_metrics(login, org, principal, guardian_user):
    _story(org, principal)
    Announcement.objects.create(organization=org, author=principal, title="Hello parents")
    body = login(guardian_user).get(reverse("reporting:guardian_metrics")).json()
    assert body["children"] == 1
    assert body["active_stories"] == 1
    assert body["unread_notifications"] == 0
    assert [a["title"] for a in body["latest_announcements"]] == ["Hello parents"]


@pytest.mark.django_db
def test_metrics_are_role_bound(login, teacher):
    assert login(teacher).get(reverse("reporting:guardian_metrics")).status_code == 403
