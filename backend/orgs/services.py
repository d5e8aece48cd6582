from django.db import transaction

from accounts.models import Organization, OrgMembership, Role, User
from roster.models import Guardian, Student


def org_metrics(org: Organization) -> dict:
    roles = OrgMembership.objects.filter(organization=org, is_active=True)
    students = Student.objects.live().filter(organization=org).count()
    teachers = roles.filter(role=Role.TEACHER).count()
    principals = roles.filter(role=Role.PRINCIPAL).count()
    parents = Guardian.objects.filter(organization=org, is_active=True).count()
    return {
        "students": students,
        "teachers": teachers,
        "parents": parents,
        "principals": principals,
        "totalUsers": students + teachers + parents + principals,
    }


@transaction.atomic
def ensure_principal(org: Organization, data: dict) -> tuple[OrgMembership, bool]:
    """Create or reuse the user by email and make sure it has an active PRINCIPAL membership."""
    user, user_created = User.objects.get_or_create(
        email=data["email"],
        defaults={
            "first_name": data["first_name"],
            "last_name": data["last_name"],
            "phone": data.get("phone") or "",
        },
    )
    if user_created:
        if data.get("password"):
            user.set_password(data["password"])
        else:
            user.set_unusable_password()
        user.save()
    mem, created = OrgMembership.objects.get_or_create(user=user, organization=org, role=Role.PRINCIPAL)
    if not created and not mem.is_active:
        mem.is_active = True
        mem.save(update_fields=["is_active"])
    return mem, created
