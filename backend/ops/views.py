from django.http import JsonResponse
from django.utils import timezone
from .models import Heartbeat

BEAT_STALE_AFTER_SEC = 180


def health(request):
    return JsonResponse({"ok": True})


def healthz(request):
    beat = Heartbeat.objects.filter(key="beat").first()
    beat_ok = False
    if beat:
        beat_ok = (timezone.now() - beat.seen_at).total_seconds() < BEAT_STALE_AFTER_SEC
    return JsonResponse({"ok": True, "celery_beat_ok": beat_ok})
