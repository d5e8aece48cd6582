import pytest
from django.core.management import call_command
from django.urls import reverse

from accounts.models import Organization, OrgMembership, Role, User


@pytest.mark.django_db
def test_login_pins_single_org(client, teacher, org):
    resp = client.post(reverse("accounts:login"), {"email": "Teacher@Sunny.test", "password": "pass12345"},
                       content_type="application/json")
    assert resp.status_code == 200
    body = resp.json()
    assert body["user"]["email"] == "teacher@sunny.test"
    assert [m["role"] for m in body["memberships"]] == [Role.TEACHER]
    assert client.session["current_org_id"] == org.id


@pytest.mark.django_db
def test_login_rejects_bad_password(client, teacher):
    resp = client.post(reverse("accounts:login"), {"email": teacher.email, "password": "nope"},
                       content_type="application/json")
    assert resp.status_code == 400


@pytest.mark.django_db
def test_login_rejects_malformed_json(client):
    resp = client.post(reverse("accounts:login"), "{not json", content_type="application/json")
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid JSON body"


@pytest.mark.django_db
def test_user_context(login, principal, org):
    body = login(principal).get(reverse("accounts:user_context")).json()
    assert body["active_org"]["id"] == org.id
    assert body["active_role"] == Role.PRINCIPAL
    assert body["roles"] == [Role.PRINCIPAL]
    assert body["is_admin"] is False


@pytest.mark.django_db
def test_switch_org(login, teacher, other_org):
    OrgMembership.objects.create(user=teacher, organization=other_org, role=Role.GUARDIAN)
    c = login(teacher)
    resp = c.post(reverse("accounts:switch_org"), {"org_id": other_org.id}, content_type="application/json")
    assert resp.status_code == 200
    assert c.get(reverse("accounts:user_context")).json()["active_role"] == Role.GUARDIAN


@pytest.mark.django_db
def test_switch_org_refuses_foreign_org(login, teacher, other_org):
    resp = login(teacher).post(reverse("accounts:switch_org"), {"org_id": other_org.id},
                               content_type="application/json")
    assert resp.status_code == 403


@pytest.mark.django_db
def test_preferences_defaults_and_update(login, teacher):
    c = login(teacher)
    assert c.get(reverse("accounts:user_preferences")).json() == {"theme": "system", "language": "is"}
    resp = c.put(reverse("accounts:user_preferences"), {"theme": "dark", "language": "en"},
                 content_type="application/json")
    assert resp.json() == {"theme": "dark", "language": "en"}
    teacher.refresh_from_db()
    assert teacher.theme == "dark"


@pytest.mark.django_db
def test_preferences_reject_unknown_theme(login, teacher):
    resp = login(teacher).put(reverse("accounts:user_preferences"), {"theme": "neon"},
                              content_type="application/json")
    assert resp.status_code == 400
    assert "theme" in resp.json()["details"]


@pytest.mark.django_db
def test_logout(login, teacher):
    c = login(teacher)
    assert c.post(reverse("accounts:logout")).json() == {"success": True}
    assert c.get(reverse("accounts:user_context")).status_code == 401


@pytest.mark.django_db
def test_bootstrap_foundations_is_idempotent():
    call_command("bootstrap_foundations", "--superuser-password", "x" * 12, "--principal-password", "y" * 12)
    call_command("bootstrap_foundations")
    assert User.objects.filter(is_superuser=True).count() == 1
    org = Organization.objects.get(slug="demo-school")
    assert OrgMembership.objects.filter(organization=org, role=Role.PRINCIPAL).count() == 1
