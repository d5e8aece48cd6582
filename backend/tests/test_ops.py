import datetime as dt
import json
import logging

import pytest
from django.urls import reverse
from django.utils import timezone

from ops.middleware import _scrub
from ops.models import Heartbeat
from ops.tasks import beat_heartbeat


@pytest.mark.django_db
def test_health(client):
    assert client.get(reverse("ops:health")).json() == {"ok": True}


@pytest.mark.django_db
def test_healthz_tracks_beat(client):
    assert client.get(reverse("ops:healthz")).json() == {"ok": True, "celery_beat_ok": False}
    beat_heartbeat()
    assert client.get(reverse("ops:healthz")).json()["celery_beat_ok"] is True
    Heartbeat.objects.filter(key="beat").update(seen_at=timezone.now() - dt.timedelta(minutes=5))
    assert client.get(reverse("ops:healthz")).json()["celery_beat_ok"] is False


def test_scrub_redacts_pii():
    out = _scrub({"email": "a@b.c", "Password": "x", "nested": {"ssn": "1"}, "q": "ok"})
    assert out == {"email": "***redacted***", "Password": "***redacted***",
                   "nested": {"ssn": "***redacted***"}, "q": "ok"}


@pytest.mark.django_db
def test_request_log_line(client, caplog):
    # the request logger does not propagate to root
    logger = logging.getLogger("request")
    logger.addHandler(caplog.handler)
    try:
        with caplog.at_level(logging.INFO, logger="request"):
            client.post(reverse("accounts:login"), {"email": "x@y.test", "password": "secret"},
                        content_type="application/json")
    finally:
        logger.removeHandler(caplog.handler)
    line = json.loads([r for r in caplog.records if r.name == "request"][-1].getMessage())
    assert line["path"] == "/api/auth/login"
    assert line["status"] == 400
    assert line["body_keys"] == ["email", "password"]
    assert "secret" not in json.dumps(line)
