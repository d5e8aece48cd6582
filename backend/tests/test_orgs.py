import pytest
from django.urls import reverse

from accounts.models import Organization, OrgMembership, Role, User
from audit.models import AuditLog

ORG_PAYLOAD = {
    "name": "Lake School",
    "slug": "lake-school",
    "email": "hello@lake.test",
    "phone": "555-1234",
    "address": "Main street 2",
    "city": "Akureyri",
    "state": "NE",
    "postal_code": "600",
    "timezone": "Atlantic/Reykjavik",
    "maximum_allowed_students": 80,
}


@pytest.fixture
def many_orgs(db):
    return [Organization.objects.create(name=f"School {i}", slug=f"school-{i}") for i in range(25)]


@pytest.mark.django_db
def test_orgs_pagination(login, admin_user, many_orgs):
    body = login(admin_user).get(reverse("orgs:orgs") + "?page=2&pageSize=10").json()
    assert body["totalCount"] == 25
    assert body["totalPages"] == 3
    assert body["currentPage"] == 2
    assert len(body["orgs"]) == 10
    # newest first
    assert body["orgs"][0]["slug"] == "school-14"


@pytest.mark.django_db
def test_orgs_empty_still_has_one_page(login, admin_user):
    body = login(admin_user).get(reverse("orgs:orgs")).json()
    assert body == {"orgs": [], "totalCount": 0, "totalPages": 1, "currentPage": 1}


@pytest.mark.django_db
@pytest.mark.parametrize("query", ["page=0", "pageSize=0", "pageSize=101", "page=abc"])
def test_orgs_pagination_bounds(login, admin_user, query):
    assert login(admin_user).get(reverse("orgs:orgs") + "?" + query).status_code == 400


@pytest.mark.django_db
def test_orgs_by_ids_is_unpaginated(login, admin_user, many_orgs):
    ids = ",".join(str(o.id) for o in many_orgs[:3])
    body = login(admin_user).get(reverse("orgs:orgs") + f"?ids={ids}").json()
    assert sorted(o["id"] for o in body["orgs"]) == sorted(o.id for o in many_orgs[:3])
    assert "totalCount" not in body


@pytest.mark.django_db
def test_create_org(login, admin_user):
    resp = login(admin_user).post(reverse("orgs:orgs"), ORG_PAYLOAD, content_type="application/json")
    assert resp.status_code == 201
    org = Organization.objects.get(slug="lake-school")
    assert org.created_by == admin_user
    assert AuditLog.objects.filter(action="ORG_CREATED", organization=org).exists()


@pytest.mark.django_db
@pytest.mark.parametrize("field,value", [
    ("slug", "Lake_School"),
    ("email", "not-an-email"),
    ("city", ""),
    ("timezone", "Mars/Olympus"),
    ("website", "nope"),
    ("play_area", "-3"),
])
def test_create_org_validation(login, admin_user, field, value):
    payload = dict(ORG_PAYLOAD, **{field: value})
    resp = login(admin_user).post(reverse("orgs:orgs"), payload, content_type="application/json")
    assert resp.status_code == 400
    assert field in resp.json()["details"]


@pytest.mark.django_db
def test_duplicate_slug(login, admin_user, org):
    payload = dict(ORG_PAYLOAD, slug=org.slug)
    resp = login(admin_user).post(reverse("orgs:orgs"), payload, content_type="application/json")
    assert resp.status_code == 400
    assert "slug" in resp.json()["details"]


@pytest.mark.django_db
def test_update_and_delete_org(login, admin_user, org):
    c = login(admin_user)
    payload = dict(ORG_PAYLOAD, id=org.id, slug=org.slug, name="Sunny Hill 2")
    resp = c.put(reverse("orgs:orgs"), payload, content_type="application/json")
    assert resp.status_code == 200
    assert resp.json()["org"]["name"] == "Sunny Hill 2"
    assert c.delete(reverse("orgs:orgs") + f"?id={org.id}").json() == {"success": True}
    assert not Organization.objects.filter(id=org.id).exists()


@pytest.mark.django_db
def test_org_detail_metrics(login, admin_user, org, teacher, guardian_user, principal):
    body = login(admin_user).get(reverse("orgs:org_detail", args=[org.id])).json()
    assert body["metrics"] == {"students": 1, "teachers": 1, "parents": 1, "principals": 1, "totalUsers": 4}


@pytest.mark.django_db
def test_principal_edits_own_org(login, principal, org):
    c = login(principal)
    assert c.get(reverse("orgs:my_org")).json()["org"]["slug"] == "sunny-hill"
    payload = dict(ORG_PAYLOAD, slug="sunny-hill-2")
    resp = c.put(reverse("orgs:my_org"), payload, content_type="application/json")
    assert resp.status_code == 200
    org.refresh_from_db()
    assert org.slug == "sunny-hill-2"
    assert org.updated_by == principal


@pytest.mark.django_db
def test_principal_cannot_take_another_slug(login, principal, other_org):
    payload = dict(ORG_PAYLOAD, slug=other_org.slug)
    resp = login(principal).put(reverse("orgs:my_org"), payload, content_type="application/json")
    assert resp.status_code == 400


@pytest.mark.django_db
def test_teacher_cannot_edit_org(login, teacher):
    assert login(teacher).get(reverse("orgs:my_org")).status_code == 403


@pytest.mark.django_db
def test_principal_admin_flow(login, admin_user, org):
    c = login(admin_user)
    payload = {"email": "New@Lake.test", "first_name": "Nina", "last_name": "Boss", "org_id": org.id}
    resp = c.post(reverse("orgs:principals"), payload, content_type="application/json")
    assert resp.status_code == 201
    user = User.objects.get(email="new@lake.test")
    assert not user.has_usable_password()

    listing = c.get(reverse("orgs:principals") + f"?orgId={org.id}").json()
    assert listing["totalCount"] == 1
    assert listing["principals"][0]["email"] == "new@lake.test"

    resp = c.put(reverse("orgs:principal_detail", args=[user.id]), {"phone": "777"},
                 content_type="application/json")
    assert resp.json()["principal"]["phone"] == "777"

    assert c.delete(reverse("orgs:principal_detail", args=[user.id])).status_code == 200
    assert not OrgMembership.objects.get(user=user, role=Role.PRINCIPAL).is_active


@pytest.mark.django_db
def test_principal_detail_404(login, admin_user, teacher):
    assert login(admin_user).get(reverse("orgs:principal_detail", args=[teacher.id])).status_code == 404
