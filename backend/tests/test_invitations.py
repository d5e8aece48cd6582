import datetime as dt

import pytest
from django.core import mail
from django.urls import reverse
from django.utils import timezone

from accounts.models import OrgMembership, Role, User
from invitations import ratelimit
from invitations.models import Invitation
from invitations.tasks import send_invitation_email
from roster.models import Guardian

JSON = "application/json"


@pytest.mark.django_db
def test_principal_invites(login, principal, org):
    resp = login(principal).post(reverse("invitations:list"), {"email": "New@Teach.test", "role": "TEACHER"},
                                 content_type=JSON)
    assert resp.status_code == 201
    inv = Invitation.objects.get()
    assert inv.email == "new@teach.test" and inv.organization == org
    assert "token" not in resp.json()["invitation"]
    assert len(inv.token) >= 32
    assert (inv.expires_at - timezone.now()).days in (6, 7)


@pytest.mark.django_db
def test_invite_role_limited(login, principal):
    resp = login(principal).post(reverse("invitations:list"), {"email": "x@y.test", "role": "PRINCIPAL"},
                                 content_type=JSON)
    assert resp.status_code == 400


@pytest.mark.django_db
def test_teacher_cannot_invite(login, teacher):
    resp = login(teacher).post(reverse("invitations:list"), {"email": "x@y.test", "role": "TEACHER"},
                               content_type=JSON)
    assert resp.status_code == 403


@pytest.mark.django_db
def test_rate_limited(login, principal, monkeypatch):
    def boom(key, window_sec, max_count):
        raise ratelimit.RateLimitExceeded(key)
    monkeypatch.setattr(ratelimit, "_bucket", boom)
    resp = login(principal).post(reverse("invitations:list"), {"email": "x@y.test", "role": "TEACHER"},
                                 content_type=JSON)
    assert resp.status_code == 429
    assert not Invitation.objects.exists()


@pytest.mark.django_db
def test_invitation_email(org, principal, settings):
    settings.PUBLIC_BASE_URL = "https://app.samvera.test/"
    inv = Invitation.objects.create(organization=org, email="t@x.test", role=Role.TEACHER, created_by=principal)
    assert send_invitation_email(inv.id) == "ok"
    assert len(mail.outbox) == 1
    msg = mail.outbox[0]
    assert msg.to == ["t@x.test"]
    assert "Sunny Hill" in msg.subject
    assert f"https://app.samvera.test/invite?token={inv.token}" in msg.body


@pytest.mark.django_db
def test_invitation_email_skips_stale(org, principal):
    inv = Invitation.objects.create(organization=org, email="t@x.test", role=Role.TEACHER,
                                    expires_at=timezone.now() - dt.timedelta(minutes=1))
    assert send_invitation_email(inv.id) == "stale"
    assert mail.outbox == []


@pytest.mark.django_db
def test_validate(client, org):
    inv = Invitation.objects.create(organization=org, email="t@x.test", role=Role.TEACHER)
    url = reverse("invitations:validate")
    assert client.get(url + "?token=nope").status_code == 404
    body = client.get(url + f"?token={inv.token}").json()
    assert body["invitation"]["org_name"] == "Sunny Hill"

    inv.expires_at = timezone.now() - dt.timedelta(seconds=1)
    inv.save()
    resp = client.get(url + f"?token={inv.token}")
    assert resp.status_code == 400 and resp.json()["error"] == "Invitation expired"


@pytest.mark.django_db
def test_accept_new_teacher(client, org):
    inv = Invitation.objects.create(organization=org, email="fresh@x.test", role=Role.TEACHER)
    payload = {"token": inv.token, "password": "longpassword", "first_name": "Fríða"}
    resp = client.post(reverse("invitations:accept"), payload, content_type=JSON)
    assert resp.status_code == 200
    user = User.objects.get(email="fresh@x.test")
    assert user.check_password("longpassword") and user.first_name == "Fríða"
    assert OrgMembership.objects.filter(user=user, organization=org, role=Role.TEACHER, is_active=True).exists()
    # logged in with the org pinned
    ctx = client.get(reverse("accounts:user_context")).json()
    assert ctx["active_org"]["id"] == org.id

    again = client.post(reverse("invitations:accept"), payload, content_type=JSON)
    assert again.status_code == 400
    assert again.json()["error"] == "Invitation already accepted"


@pytest.mark.django_db
def test_accept_existing_guardian_sets_password(client, org, guardian_user):
    guardian_user.set_unusable_password()
    guardian_user.save()
    inv = Invitation.objects.create(organization=org, email=guardian_user.email, role=Role.GUARDIAN)
    resp = client.post(reverse("invitations:accept"), {"token": inv.token, "password": "anotherpass"},
                       content_type=JSON)
    assert resp.status_code == 200
    guardian_user.refresh_from_db()
    assert guardian_user.check_password("anotherpass")
    assert Guardian.objects.filter(user=guardian_user).count() == 1


@pytest.mark.django_db
def test_accept_guardian_creates_profile(client, org):
    inv = Invitation.objects.create(organization=org, email="mom@x.test", role=Role.GUARDIAN)
    client.post(reverse("invitations:accept"), {"token": inv.token, "password": "anotherpass",
                                                "first_name": "Mamma", "last_name": "Mia"}, content_type=JSON)
    g = Guardian.objects.get(email="mom@x.test")
    assert g.organization == org and g.full_name == "Mamma Mia"


@pytest.mark.django_db
def test_guardian_of_one_org_joins_another(client, org, other_org, guardian_user):
    inv = Invitation.objects.create(organization=other_org, email=guardian_user.email, role=Role.GUARDIAN)
    resp = client.post(reverse("invitations:accept"), {"token": inv.token, "password": "anotherpass"},
                       content_type=JSON)
    assert resp.status_code == 200
    assert Guardian.objects.filter(user=guardian_user, organization=other_org).count() == 1
    assert Guardian.objects.filter(user=guardian_user, organization=org).count() == 1


@pytest.mark.django_db
def test_accept_short_password(client, org):
    inv = Invitation.objects.create(organization=org, email="a@x.test", role=Role.TEACHER)
    resp = client.post(reverse("invitations:accept"), {"token": inv.token, "password": "short"}, content_type=JSON)
    assert resp.status_code == 400
    assert "password" in resp.json()["details"]
