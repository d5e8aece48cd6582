import logging
from datetime import timedelta

from celery import shared_task
from django.conf import settings
from django.db.models import Q
from django.utils import timezone

from .models import Story

log = logging.getLogger(__name__)


@shared_task
def purge_expired_stories():
    cutoff = timezone.now() - timedelta(days=settings.STORY_RETENTION_DAYS)
    n, _ = Story.objects.filter(Q(expires_at__lt=cutoff) | Q(deleted_at__lt=cutoff)).delete()
    log.info("purged %s story rows (items included)", n)
    return n
