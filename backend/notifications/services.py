import logging
from typing import Iterable, Optional

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from accounts.models import Organization, OrgMembership, Role, User
from roster.models import Classroom, ClassMembership, StudentGuardian
from .i18n import choose_language, render
from .models import DeviceToken, Notification

log = logging.getLogger(__name__)


# provider picker
def _provider():
    prov = (settings.PUSH_PROVIDER or "mock").lower()
    if prov == "fcm":
        from .providers.fcm import FCMProvider
        return FCMProvider()
    from .providers.mock import MockProvider
    return MockProvider()


def class_notification_targets(classroom: Classroom) -> set[int]:
    """Teachers of the class plus the guardians of its students."""
    teachers = ClassMembership.objects.filter(classroom=classroom).values_list("user_id", flat=True)
    guardians = StudentGuardian.objects.filter(
        student__classroom=classroom, student__deleted_at__isnull=True,
        guardian__is_active=True, guardian__user__isnull=False,
    ).values_list("guardian__user_id", flat=True)
    return set(teachers) | set(guardians)


def org_notification_targets(org: Organization) -> set[int]:
    """Every active teacher and guardian of the organization."""
    return set(
        OrgMembership.objects.filter(
            organization=org, is_active=True, role__in=(Role.TEACHER, Role.GUARDIAN)
        ).values_list("user_id", flat=True)
    )


@transaction.atomic
def create_bulk_notifications(
    org: Organization,
    user_ids: Iterable[int],
    type: str,
    title: Optional[str] = None,
    body: Optional[str] = None,
    data: Optional[dict] = None,
    priority: str = Notification.Priority.NORMAL,
    expires_at=None,
    context: Optional[dict] = None,
) -> list[int]:
    """
    One row per distinct user. When title/body are omitted they are rendered
    in each recipient's language. Push delivery is queued after commit.
    """
    ids = sorted(set(user_ids))
    if not ids:
        return []
    langs = dict(User.objects.filter(id__in=ids).values_list("id", "language"))
    created = []
    for uid in ids:
        if uid not in langs:
            continue
        t, b = title, body
        if t is None or b is None:
            dt, db = render(type, choose_language(langs[uid]), **(context or {}))
            t = dt if t is None else t
            b = db if b is None else b
        n = Notification.objects.create(
            organization=org, user_id=uid, type=type, title=t[:255], body=b,
            data=data or {}, priority=priority, expires_at=expires_at,
        )
        created.append(n.id)

    from .tasks import send_push_notifications
    transaction.on_commit(lambda: send_push_notifications.delay(created))
    return created


def notify_audience(org: Organization, classroom: Optional[Classroom], author: User, kind: str,
                    context: dict, data: dict) -> list[int]:
    """
    kind is "story" or "announcement". Class-scoped content reaches the class
    audience, org-wide content reaches every teacher and guardian. The author
    never notifies themselves.
    """
    if classroom is not None:
        targets = class_notification_targets(classroom)
        ntype = f"{kind}_class"
        context = dict(context, class_name=classroom.name)
    else:
        targets = org_notification_targets(org)
        ntype = f"{kind}_org"
    targets.discard(author.id)
    context = dict(context, author=author.full_name or author.email)
    return create_bulk_notifications(org, targets, ntype, data=data, context=context)


def unread_count(user: User, org: Organization) -> int:
    return Notification.objects.current().filter(user=user, organization=org, is_read=False).count()


def mark_read(user: User, org: Organization, notification_id: int) -> Optional[Notification]:
    n = Notification.objects.filter(user=user, organization=org, id=notification_id).first()
    if n and not n.is_read:
        n.is_read = True
        n.read_at = timezone.now()
        n.save(update_fields=["is_read", "read_at"])
    return n


def mark_all_read(user: User, org: Organization) -> int:
    return Notification.objects.filter(user=user, organization=org, is_read=False).update(
        is_read=True, read_at=timezone.now()
    )


def register_device_token(user: User, token: str, provider: str) -> tuple[DeviceToken, bool]:
    dt, created = DeviceToken.objects.get_or_create(user=user, provider=provider, token=token)
    if not created:
        dt.deleted_at = None
        dt.last_seen_at = timezone.now()
        dt.save(update_fields=["deleted_at", "last_seen_at"])
    return dt, created


def remove_device_token(user: User, token: str, provider: Optional[str] = None) -> int:
    qs = DeviceToken.objects.filter(user=user, token=token, deleted_at__isnull=True)
    if provider:
        qs = qs.filter(provider=provider)
    return qs.update(deleted_at=timezone.now())
