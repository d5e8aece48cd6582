from django.db import transaction
from django.db.models import Q

from accounts.models import Role
from roster.services import guardian_class_ids
from .models import Menu

MENU_FIELDS = ("breakfast", "lunch", "snack", "notes", "is_public")


def visible_menus(user, membership):
    """
    Principals see every menu, teachers the menus they wrote, guardians the
    public ones for the whole school or their children's classes.
    """
    org = membership.organization
    qs = Menu.objects.live().filter(organization=org)
    if membership.role == Role.PRINCIPAL:
        return qs
    if membership.role == Role.TEACHER:
        return qs.filter(created_by=user)
    return qs.filter(is_public=True).filter(
        Q(classroom__isnull=True) | Q(classroom_id__in=guardian_class_ids(user, org))
    )


@transaction.atomic
def upsert_menu(org, classroom, day, user, data: dict, sent) -> tuple[Menu, bool]:
    """
    One menu per (org, class, day). Posting again overwrites the fields that
    were sent and brings a deleted menu back.
    """
    menu = Menu.objects.select_for_update().filter(organization=org, classroom=classroom, day=day).first()
    created = menu is None
    if created:
        menu = Menu(organization=org, classroom=classroom, day=day, created_by=user)
    for name in MENU_FIELDS:
        if created or name in sent:
            setattr(menu, name, data[name])
    menu.deleted_at = None
    menu.save()
    return menu, created
