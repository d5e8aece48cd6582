import datetime as dt

import pytest
from django.urls import reverse

from menus.models import Menu

JSON = "application/json"
DAY = "2026-03-02"


def _menu(org, author, classroom=None, day=dt.date(2026, 3, 2), **extra):
    return Menu.objects.create(organization=org, classroom=classroom, day=day, created_by=author, **extra)


@pytest.mark.django_db
def test_post_same_day_updates_sent_fields(login, principal):
    c = login(principal)
    url = reverse("menus:list")
    resp = c.post(url, {"day": DAY, "breakfast": "Oatmeal", "lunch": "Fish"}, content_type=JSON)
    assert resp.status_code == 201
    assert resp.json()["menu"]["is_public"] is True
    resp = c.post(url, {"day": DAY, "lunch": "Soup"}, content_type=JSON)
    assert resp.status_code == 201
    m = Menu.objects.get()
    assert (m.breakfast, m.lunch) == ("Oatmeal", "Soup")


@pytest.mark.django_db
def test_class_menu_is_separate_from_org_menu(login, principal, classroom):
    c = login(principal)
    url = reverse("menus:list")
    c.post(url, {"day": DAY, "lunch": "Fish"}, content_type=JSON)
    c.post(url, {"day": DAY, "lunch": "Pasta", "class_id": classroom.id}, content_type=JSON)
    assert Menu.objects.count() == 2
    body = c.get(url, {"classId": classroom.id}).json()
    assert [m["lunch"] for m in body["menus"]] == ["Pasta"]


@pytest.mark.django_db
def test_deleted_menu_comes_back_on_post(login, principal, org):
    m = _menu(org, principal, lunch="Fish")
    c = login(principal)
    url = reverse("menus:list")
    assert c.delete(url + f"?id={m.id}").status_code == 200
    assert c.get(url).json()["total_menus"] == 0
    resp = c.post(url, {"day": DAY, "snack": "Apples"}, content_type=JSON)
    assert resp.json()["menu"]["id"] == m.id
    m.refresh_from_db()
    assert m.deleted_at is None and m.snack == "Apples"


@pytest.mark.django_db
def test_put_is_partial(login, principal, org):
    m = _menu(org, principal, breakfast="Bread")
    resp = login(principal).put(reverse("menus:list"), {"id": m.id, "is_public": False}, content_type=JSON)
    assert resp.status_code == 200
    m.refresh_from_db()
    assert m.is_public is False and m.breakfast == "Bread"


@pytest.mark.django_db
def test_validation(login, principal):
    c = login(principal)
    url = reverse("menus:list")
    assert c.post(url, {"lunch": "Fish"}, content_type=JSON).status_code == 400
    resp = c.post(url, {"day": DAY, "lunch": "x" * 1001}, content_type=JSON)
    assert resp.status_code == 400
    assert "lunch" in resp.json()["details"]


@pytest.mark.django_db
def test_guardian_sees_public_menus_for_their_classes(login, org, principal, guardian_user, classroom,
                                                      other_classroom):
    shown = _menu(org, principal, lunch="Fish")
    mine = _menu(org, principal, classroom, lunch="Pasta")
    _menu(org, principal, other_classroom, lunch="Rice")
    _menu(org, principal, day=dt.date(2026, 3, 3), is_public=False)
    c = login(guardian_user)
    body = c.get(reverse("menus:list")).json()
    assert {m["id"] for m in body["menus"]} == {shown.id, mine.id}
    assert c.post(reverse("menus:list"), {"day": DAY}, content_type=JSON).status_code == 403


@pytest.mark.django_db
def test_teacher_posts_only_to_taught_classes(login, org, principal, teacher, taught, classroom, other_classroom):
    _menu(org, principal, lunch="Fish")
    c = login(teacher)
    url = reverse("menus:list")
    resp = c.post(url, {"day": DAY, "class_id": other_classroom.id}, content_type=JSON)
    assert resp.status_code == 403
    resp = c.post(url, {"day": DAY, "class_id": classroom.id, "lunch": "Pasta"}, content_type=JSON)
    assert resp.status_code == 201
    # the org-wide menu belongs to the principal
    assert c.post(url, {"day": DAY, "lunch": "Soup"}, content_type=JSON).status_code == 403
    body = c.get(url).json()
    assert [m["lunch"] for m in body["menus"]] == ["Pasta"]


@pytest.mark.django_db
def test_teacher_cannot_edit_principals_menu(login, org, principal, teacher):
    m = _menu(org, principal)
    url = reverse("menus:list")
    c = login(teacher)
    assert c.put(url, {"id": m.id, "lunch": "x"}, content_type=JSON).status_code == 403
    assert c.delete(url + f"?id={m.id}").status_code == 403


@pytest.mark.django_db
def test_other_org_menu_not_found(login, principal, other_org, make_member):
    boss = make_member("boss@other.test", "PRINCIPAL", other_org)
    m = _menu(other_org, boss)
    c = login(principal)
    assert c.get(reverse("menus:list")).json()["total_menus"] == 0
    assert c.put(reverse("menus:list"), {"id": m.id, "lunch": "x"}, content_type=JSON).status_code == 404
