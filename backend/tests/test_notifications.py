import datetime as dt

import pytest
from django.urls import reverse
from django.utils import timezone

from notifications import services
from notifications.i18n import choose_language, render
from notifications.models import DeviceToken, Notification
from notifications.providers import InvalidTokenError
from notifications.tasks import purge_expired_notifications, send_push_notifications

JSON = "application/json"


def _note(org, user, **extra):
    defaults = {"type": Notification.Type.STORY_ORG, "title": "t", "body": "b"}
    defaults.update(extra)
    return Notification.objects.create(organization=org, user=user, **defaults)


@pytest.mark.django_db
def test_targets(org, classroom, taught, teacher, guardian_user, principal, make_member):
    make_member("other@sunny.test", "TEACHER", org)
    assert services.class_notification_targets(classroom) == {teacher.id, guardian_user.id}
    org_targets = services.org_notification_targets(org)
    assert teacher.id in org_targets and guardian_user.id in org_targets
    assert principal.id not in org_targets


@pytest.mark.django_db
def test_create_bulk_dedupes_and_localizes(org, teacher, guardian_user):
    teacher.language = "en"
    teacher.save()
    ids = services.create_bulk_notifications(
        org, [teacher.id, teacher.id, guardian_user.id], Notification.Type.ANNOUNCEMENT_ORG,
        context={"title": "Closed Friday"},
    )
    assert len(ids) == 2
    assert Notification.objects.get(user=teacher).title == "New announcement"
    assert Notification.objects.get(user=guardian_user).title == "Ný tilkynning"
    assert Notification.objects.get(user=guardian_user).body == "Closed Friday"


@pytest.mark.django_db
def test_create_bulk_queues_push_on_commit(org, teacher, django_capture_on_commit_callbacks, monkeypatch):
    queued = []
    monkeypatch.setattr(send_push_notifications, "delay", lambda ids: queued.append(ids))
    with django_capture_on_commit_callbacks(execute=True):
        ids = services.create_bulk_notifications(org, [teacher.id], Notification.Type.STORY_ORG, "Hi", "there")
    assert queued == [ids]


def test_choose_language_defaults_to_icelandic():
    assert choose_language(None) == "is"
    assert choose_language("en-GB") == "en"
    assert render("story_org", "en", author="Pia", title="")[1] == "Pia shared a new story:"


@pytest.mark.django_db
def test_list_and_unread(login, org, other_org, teacher):
    _note(org, teacher, title="old", created_at=timezone.now() - dt.timedelta(hours=1))
    _note(org, teacher, title="new")
    _note(org, teacher, title="read", is_read=True)
    _note(org, teacher, title="expired", expires_at=timezone.now() - dt.timedelta(minutes=1))
    _note(other_org, teacher, title="elsewhere")
    c = login(teacher)
    body = c.get(reverse("notifications:list")).json()
    assert {n["title"] for n in body["notifications"]} == {"old", "new", "read"}
    assert body["unread_count"] == 2
    unread = c.get(reverse("notifications:list") + "?unreadOnly=true&limit=1").json()["notifications"]
    assert len(unread) == 1 and unread[0]["is_read"] is False
    assert c.get(reverse("notifications:list") + "?limit=101").status_code == 400
    assert c.get(reverse("notifications:unread_count")).json() == {"unread_count": 2}


@pytest.mark.django_db
def test_mark_read_and_read_all(login, org, teacher, principal):
    n = _note(org, teacher)
    _note(org, teacher)
    foreign = _note(org, principal)
    c = login(teacher)
    assert c.post(reverse("notifications:read", args=[foreign.id])).status_code == 404
    body = c.post(reverse("notifications:read", args=[n.id])).json()
    assert body["notification"]["is_read"] is True
    assert c.post(reverse("notifications:read_all")).json()["updated"] == 1
    assert c.get(reverse("notifications:unread_count")).json()["unread_count"] == 0


@pytest.mark.django_db
def test_device_token_register_is_idempotent(login, teacher):
    c = login(teacher)
    url = reverse("notifications:device_tokens")
    assert c.post(url, {"token": "abc", "provider": "fcm"}, content_type=JSON).status_code == 201
    assert c.post(url, {"token": "abc", "provider": "fcm"}, content_type=JSON).status_code == 200
    assert DeviceToken.objects.filter(user=teacher).count() == 1

    assert c.delete(url, {"token": "abc"}, content_type=JSON).json()["removed"] == 1
    assert DeviceToken.objects.get(user=teacher).deleted_at is not None
    c.post(url, {"token": "abc", "provider": "fcm"}, content_type=JSON)
    assert DeviceToken.objects.get(user=teacher).deleted_at is None


@pytest.mark.django_db
def test_device_token_rejects_unknown_provider(login, teacher):
    resp = login(teacher).post(reverse("notifications:device_tokens"), {"token": "x", "provider": "pager"},
                               content_type=JSON)
    assert resp.status_code == 400


class RecordingProvider:
    def __init__(self, bad=()):
        self.bad = set(bad)
        self.sent = []

    def send(self, token, title, body, data=None):
        if token in self.bad:
            raise InvalidTokenError("unregistered")
        self.sent.append((token, title, data))
        return "id-1"


@pytest.mark.django_db
def test_send_push_drops_invalid_tokens(org, teacher, monkeypatch):
    prov = RecordingProvider(bad={"dead"})
    monkeypatch.setattr(services, "_provider", lambda: prov)
    DeviceToken.objects.create(user=teacher, token="live")
    DeviceToken.objects.create(user=teacher, token="dead")
    DeviceToken.objects.create(user=teacher, token="old", deleted_at=timezone.now())
    n = _note(org, teacher, title="Ný saga", data={"story_id": 7})

    result = send_push_notifications([n.id])
    assert result == {"sent": 1, "dropped_tokens": 1}
    token, title, data = prov.sent[0]
    assert (token, title) == ("live", "Ný saga")
    assert data["story_id"] == 7 and data["notification_id"] == n.id
    assert DeviceToken.objects.get(token="dead").deleted_at is not None


@pytest.mark.django_db
def test_send_push_with_mock_provider(org, teacher, settings):
    settings.PUSH_PROVIDER = "mock"
    DeviceToken.objects.create(user=teacher, token="tok")
    n = _note(org, teacher)
    assert send_push_notifications([n.id]) == {"sent": 1, "dropped_tokens": 0}


@pytest.mark.django_db
def test_purge_expired_notifications(org, teacher, settings):
    settings.NOTIFICATION_RETENTION_DAYS = 90
    _note(org, teacher, expires_at=timezone.now() - dt.timedelta(seconds=1))
    _note(org, teacher, created_at=timezone.now() - dt.timedelta(days=91))
    keep = _note(org, teacher)
    assert purge_expired_notifications() == 2
    assert list(Notification.objects.values_list("id", flat=True)) == [keep.id]
