import logging
from urllib.parse import urlencode

from celery import shared_task
from django.conf import settings
from django.core.mail import send_mail

from accounts.models import User
from notifications.i18n import choose_language
from .emails import compose
from .models import Invitation

log = logging.getLogger(__name__)


def accept_link(inv: Invitation) -> str:
    return f"{settings.PUBLIC_BASE_URL.rstrip('/')}/invite?{urlencode({'token': inv.token})}"


@shared_task(bind=True, max_retries=3, default_retry_delay=60)
def send_invitation_email(self, invitation_id: int):
    inv = Invitation.objects.select_related("organization", "created_by").filter(id=invitation_id).first()
    if not inv:
        return "gone"
    if inv.is_accepted or inv.is_expired:
        return "stale"

    existing = User.objects.filter(email__iexact=inv.email).values_list("language", flat=True).first()
    lang = choose_language(existing)
    inviter = (inv.created_by.full_name or inv.created_by.email) if inv.created_by else inv.organization.name
    subject, body = compose(
        lang, inv.organization.name, inviter, inv.role, accept_link(inv), inv.expires_at.strftime("%Y-%m-%d"),
    )
    try:
        send_mail(subject, body, settings.DEFAULT_FROM_EMAIL, [inv.email])
    except Exception as e:
        log.warning("invitation %s email failed: %s", inv.id, e)
        raise self.retry(exc=e)
    return "ok"
