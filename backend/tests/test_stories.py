import datetime as dt

import pytest
from django.urls import reverse
from django.utils import timezone

from notifications.models import Notification
from roster.models import Classroom
from stories.models import Story, StoryItem
from stories.tasks import purge_expired_stories

JSON = "application/json"


def _story(org, author, classroom=None, days=1, **extra):
    return Story.objects.create(
        organization=org, author=author, classroom=classroom, title=extra.pop("title", "Trip"),
        expires_at=timezone.now() + dt.timedelta(days=days), **extra,
    )


@pytest.mark.django_db
def test_create_story_normalizes_items(login, principal, future):
    payload = {
        "title": "Spring",
        "expires_at": future,
        "items": [
            {"url": "https://cdn.test/a.jpg", "mime_type": "image/jpeg"},
            {"caption": "", "url": ""},
            {"caption": "Text only", "duration_ms": 5000},
        ],
    }
    resp = login(principal).post(reverse("stories:list"), payload, content_type=JSON)
    assert resp.status_code == 201
    items = resp.json()["items"]
    assert [(i["order_index"], i["duration_ms"]) for i in items] == [(0, 30000), (2, 5000)]
    story = Story.objects.get(title="Spring")
    assert story.classroom is None and story.is_public is False


@pytest.mark.django_db
def test_create_story_requires_future_expiry(login, principal):
    past = (timezone.now() - dt.timedelta(hours=1)).isoformat()
    resp = login(principal).post(reverse("stories:list"), {"title": "x", "expires_at": past}, content_type=JSON)
    assert resp.status_code == 400
    assert "expires_at" in resp.json()["details"]


@pytest.mark.django_db
def test_create_story_rejects_duplicate_order(login, principal, future):
    items = [{"url": "https://cdn.test/a.jpg", "order_index": 1}, {"caption": "b", "order_index": 1}]
    resp = login(principal).post(reverse("stories:list"), {"expires_at": future, "items": items},
                                 content_type=JSON)
    assert resp.status_code == 400
    assert not Story.objects.exists()


@pytest.mark.django_db
def test_teacher_posts_only_to_taught_classes(login, teacher, classroom, other_classroom, taught, future):
    c = login(teacher)
    bad = c.post(reverse("stories:list"), {"class_id": other_classroom.id, "expires_at": future}, content_type=JSON)
    assert bad.status_code == 403
    ok = c.post(reverse("stories:list"), {"class_id": classroom.id, "expires_at": future}, content_type=JSON)
    assert ok.status_code == 201


@pytest.mark.django_db
def test_guardian_cannot_post(login, guardian_user, future):
    resp = login(guardian_user).post(reverse("stories:list"), {"expires_at": future}, content_type=JSON)
    assert resp.status_code == 403


@pytest.mark.django_db
def test_class_story_notifies_class_audience(login, teacher, principal, classroom, taught, guardian_user, future,
                                             org, make_member):
    outsider = make_member("other-teacher@sunny.test", "TEACHER", org)
    resp = login(teacher).post(reverse("stories:list"), {"class_id": classroom.id, "title": "Bakstur",
                                                         "expires_at": future}, content_type=JSON)
    assert resp.status_code == 201
    notes = Notification.objects.filter(type="story_class")
    # the author is excluded; the unrelated teacher gets nothing
    assert set(notes.values_list("user_id", flat=True)) == {guardian_user.id}
    n = notes.get()
    assert n.title == "Ný saga"
    assert "Bakstur" in n.body
    assert n.data["story_id"] == resp.json()["story"]["id"]
    assert not Notification.objects.filter(user=outsider).exists()


@pytest.mark.django_db
def test_org_story_notifies_teachers_and_guardians(login, principal, teacher, guardian_user, future):
    guardian_user.language = "en"
    guardian_user.save()
    login(principal).post(reverse("stories:list"), {"title": "Hello", "expires_at": future}, content_type=JSON)
    notes = Notification.objects.filter(type="story_org")
    assert set(notes.values_list("user_id", flat=True)) == {teacher.id, guardian_user.id}
    assert notes.get(user=guardian_user).title == "New story"


@pytest.mark.django_db
def test_audiences(login, org, principal, teacher, classroom, other_classroom, taught, guardian_user):
    org_wide = _story(org, principal, title="org")
    mine = _story(org, principal, classroom=classroom, title="ugla")
    theirs = _story(org, principal, classroom=other_classroom, title="refur")
    by_teacher = _story(org, teacher, classroom=classroom, title="teacher")
    _story(org, principal, title="expired", days=-1)

    def titles(user):
        return {s["title"] for s in login(user).get(reverse("stories:list")).json()["stories"]}

    assert titles(principal) == {"org", "ugla", "refur"}
    assert titles(teacher) == {"org", "ugla", "teacher"}
    assert titles(guardian_user) == {"org", "ugla", "teacher"}
    assert theirs.id and org_wide.id and mine.id and by_teacher.id


@pytest.mark.django_db
def test_client_cannot_widen_audience(login, org, principal, other_classroom, guardian_user):
    _story(org, principal, classroom=other_classroom, title="refur")
    body = login(guardian_user).get(reverse("stories:list") + f"?classId={other_classroom.id}").json()
    assert body["stories"] == []


@pytest.mark.django_db
def test_deleted_stories_only_for_author(login, org, teacher, classroom, taught, guardian_user):
    s = _story(org, teacher, classroom=classroom, deleted_at=timezone.now())
    url = reverse("stories:list") + "?includeDeleted=true"
    assert [x["id"] for x in login(teacher).get(url).json()["stories"]] == [s.id]
    assert login(guardian_user).get(url).json()["stories"] == []


@pytest.mark.django_db
def test_only_public_filter(login, org, teacher, principal):
    _story(org, principal, title="public", is_public=True)
    _story(org, principal, title="private")
    body = login(teacher).get(reverse("stories:list") + "?onlyPublic=1").json()
    assert [s["title"] for s in body["stories"]] == ["public"]


@pytest.mark.django_db
def test_detail_returns_items_and_timeline(login, org, principal, teacher):
    s = _story(org, principal)
    StoryItem.objects.create(story=s, order_index=1, url="https://cdn.test/b.jpg", duration_ms=500)
    StoryItem.objects.create(story=s, order_index=0, url="https://cdn.test/a.jpg", duration_ms=None)
    body = login(teacher).get(reverse("stories:detail", args=[s.id])).json()
    assert [i["order_index"] for i in body["items"]] == [0, 1]
    assert body["timeline"]["total_ms"] == 31000


@pytest.mark.django_db
def test_detail_errors(login, org, other_org, principal, teacher, other_classroom, make_member):
    foreign_author = make_member("p@other.test", "PRINCIPAL", other_org)
    foreign = _story(other_org, foreign_author)
    gone = _story(org, principal, deleted_at=timezone.now())
    hidden = _story(org, principal, classroom=other_classroom)
    c = login(teacher)
    assert c.get(reverse("stories:detail", args=[foreign.id])).status_code == 403
    assert c.get(reverse("stories:detail", args=[gone.id])).status_code == 404
    assert c.get(reverse("stories:detail", args=[999999])).status_code == 404
    assert c.get(reverse("stories:detail", args=[hidden.id])).status_code == 403


@pytest.mark.django_db
def test_only_author_updates_and_deletes(login, org, principal, teacher):
    s = _story(org, principal)
    assert login(teacher).put(reverse("stories:detail", args=[s.id]), {"title": "no"},
                              content_type=JSON).status_code == 403
    c = login(principal)
    resp = c.put(reverse("stories:detail", args=[s.id]), {"title": "Renamed"}, content_type=JSON)
    assert resp.json()["story"]["title"] == "Renamed"
    assert c.delete(reverse("stories:detail", args=[s.id])).status_code == 200
    s.refresh_from_db()
    assert s.deleted_at is not None


@pytest.mark.django_db
def test_author_edits_expired_story(login, org, principal):
    s = _story(org, principal, days=-1)
    c = login(principal)
    resp = c.put(reverse("stories:detail", args=[s.id]), {"title": "Renamed"}, content_type=JSON)
    assert resp.status_code == 200
    assert resp.json()["story"]["title"] == "Renamed"
    past = (timezone.now() - dt.timedelta(hours=1)).isoformat()
    resp = c.put(reverse("stories:detail", args=[s.id]), {"expires_at": past}, content_type=JSON)
    assert resp.status_code == 400
    assert "expires_at" in resp.json()["details"]


@pytest.mark.django_db
def test_items_append_and_clear(login, org, principal):
    s = _story(org, principal)
    StoryItem.objects.create(story=s, order_index=0, url="https://cdn.test/a.jpg")
    c = login(principal)
    url = reverse("stories:items", args=[s.id])
    resp = c.post(url, {"items": [{"caption": "more"}, {"url": "https://cdn.test/c.jpg"}]}, content_type=JSON)
    assert resp.status_code == 201
    assert [i["order_index"] for i in resp.json()["items"]] == [1, 2]
    assert c.post(url, {"items": [{"caption": ""}]}, content_type=JSON).status_code == 400
    clash = c.post(url, {"items": [{"caption": "x", "order_index": 0}]}, content_type=JSON)
    assert clash.status_code == 400
    assert len(c.get(url).json()["items"]) == 3
    assert c.delete(url).json()["deleted"] == 3


@pytest.mark.django_db
def test_purge_expired_stories(org, principal, settings):
    settings.STORY_RETENTION_DAYS = 30
    old = _story(org, principal, days=-31)
    recent = _story(org, principal, days=-2)
    purge_expired_stories()
    assert not Story.objects.filter(id=old.id).exists()
    assert Story.objects.filter(id=recent.id).exists()


@pytest.mark.django_db
def test_deleted_class_story_cascade(org, principal, classroom):
    _story(org, principal, classroom=classroom)
    Classroom.objects.filter(id=classroom.id).delete()
    assert not Story.objects.exists()
