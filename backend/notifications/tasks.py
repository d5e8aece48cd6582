import logging
from datetime import timedelta

from celery import shared_task
from django.conf import settings
from django.db.models import Q
from django.utils import timezone

from .models import DeviceToken, Notification
from .providers import InvalidTokenError

log = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=5, default_retry_delay=30)
def send_push_notifications(self, notification_ids):
    from .services import _provider
    notes = list(Notification.objects.filter(id__in=notification_ids))
    if not notes:
        return "gone"

    prov = _provider()
    tokens = {}
    for dt in DeviceToken.objects.filter(user_id__in={n.user_id for n in notes}, deleted_at__isnull=True):
        tokens.setdefault(dt.user_id, []).append(dt)

    sent = dropped = 0
    failed = []
    for n in notes:
        data = {"notification_id": n.id, "type": n.type, **{k: v for k, v in (n.data or {}).items()}}
        for dt in tokens.get(n.user_id, []):
            try:
                prov.send(dt.token, n.title, n.body, data)
                sent += 1
            except InvalidTokenError:
                dt.deleted_at = timezone.now()
                dt.save(update_fields=["deleted_at"])
                dropped += 1
            except Exception as e:
                log.warning("push for notification %s failed: %s", n.id, e)
                failed.append(n.id)

    if failed:
        retry_ids = sorted(set(failed))
        raise self.retry(args=[retry_ids], countdown=min(300, (self.request.retries + 1) * 30))
    return {"sent": sent, "dropped_tokens": dropped}


@shared_task
def purge_expired_notifications():
    now = timezone.now()
    cutoff = now - timedelta(days=settings.NOTIFICATION_RETENTION_DAYS)
    n, _ = Notification.objects.filter(Q(expires_at__lt=now) | Q(created_at__lt=cutoff)).delete()
    log.info("purged %s notifications", n)
    return n
