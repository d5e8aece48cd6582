import datetime as dt

import pytest
from django.utils import timezone

from accounts.models import Organization, OrgMembership, Role, User
from roster.models import Classroom, ClassMembership, Guardian, Student, StudentGuardian


@pytest.fixture(autouse=True)
def _no_redis(monkeypatch):
    # rate limit buckets live in Redis; tests never talk to it
    monkeypatch.setattr("invitations.ratelimit._bucket", lambda key, window_sec, max_count: None)


@pytest.fixture
def org(db):
    return Organization.objects.create(name="Sunny Hill", slug="sunny-hill", email="office@sunny.test",
                                       city="Reykjavik", timezone="Atlantic/Reykjavik")


@pytest.fixture
def other_org(db):
    return Organization.objects.create(name="Other School", slug="other-school")


@pytest.fixture
def make_member(db):
    def _make(email, role, organization, password="pass12345", **extra):
        user = User.objects.create_user(email=email, password=password, **extra)
        OrgMembership.objects.create(user=user, organization=organization, role=role)
        return user
    return _make


@pytest.fixture
def admin_user(db):
    return User.objects.create_superuser(email="admin@samvera.test", password="pass12345")


@pytest.fixture
def principal(org, make_member):
    return make_member("principal@sunny.test", Role.PRINCIPAL, org, first_name="Pia", last_name="Principal")


@pytest.fixture
def teacher(org, make_member):
    return make_member("teacher@sunny.test", Role.TEACHER, org, first_name="Tom", last_name="Teacher")


@pytest.fixture
def classroom(org, principal):
    return Classroom.objects.create(organization=org, name="Ugla", code="UG1", created_by=principal)


@pytest.fixture
def other_classroom(org, principal):
    return Classroom.objects.create(organization=org, name="Refur", code="RF1", created_by=principal)


@pytest.fixture
def taught(classroom, teacher):
    return ClassMembership.objects.create(classroom=classroom, user=teacher)


def _student(organization, classroom=None, first_name="Anna", **extra):
    return Student.objects.create(
        organization=organization, classroom=classroom, first_name=first_name, last_name="Jónsdóttir",
        dob=dt.date(2020, 5, 1), address="Laugavegur 1", social_security_number="0105203390", **extra,
    )


@pytest.fixture
def make_student():
    return _student


@pytest.fixture
def student(org, classroom):
    return _student(org, classroom)


@pytest.fixture
def guardian_user(org, student, make_member):
    user = make_member("parent@sunny.test", Role.GUARDIAN, org, first_name="Gunna", last_name="Parent")
    g = Guardian.objects.create(organization=org, user=user, first_name="Gunna", last_name="Parent",
                                email=user.email)
    StudentGuardian.objects.create(student=student, guardian=g)
    return user


@pytest.fixture
def login(client):
    def _login(user):
        client.force_login(user)
        return client
    return _login


@pytest.fixture
def future():
    return (timezone.now() + dt.timedelta(days=1)).isoformat()
