import json
import logging
import os
import time

from django.http.request import RawPostDataException
from django.utils.deprecation import MiddlewareMixin
from django.utils.timezone import now

log = logging.getLogger("request")
REDACT = os.getenv("REDACT_PII_IN_LOGS", "1") == "1"
LOG_REQUESTS = os.getenv("LOG_REQUESTS", "1") == "1"

REDACT_KEYS = {"password", "email", "phone", "ssn", "social_security_number", "token"}


def _scrub(d: dict):
    if not REDACT or not d:
        return d
    out = {}
    for k, v in d.items():
        if k.lower() in REDACT_KEYS:
            out[k] = "***redacted***"
        elif isinstance(v, dict):
            out[k] = _scrub(v)
        else:
            out[k] = v
    return out


def _body_keys(request):
    if request.content_type != "application/json":
        return sorted(request.POST.keys())
    try:
        data = json.loads(request.body or b"{}")
    except (RawPostDataException, ValueError):
        return []
    return sorted(data.keys()) if isinstance(data, dict) else []


class RequestLogMiddleware(MiddlewareMixin):
    def process_request(self, request):
        if not LOG_REQUESTS:
            return
        request._ts = time.time()

    def process_response(self, request, response):
        if not LOG_REQUESTS:
            return response
        dur = time.time() - getattr(request, "_ts", time.time())
        u = getattr(request, "user", None)
        org = getattr(request, "org", None)
        payload = {
            "ts": now().isoformat(),
            "method": request.method,
            "path": request.path,
            "status": response.status_code,
            "duration_ms": int(dur * 1000),
            "user": (u.pk if u and u.is_authenticated else None),
            "org": (org.id if org else None),
            "ip": request.META.get("REMOTE_ADDR"),
            "ua": request.META.get("HTTP_USER_AGENT", ""),
        }
        if request.GET:
            payload["query"] = _scrub(request.GET.dict())
        # only the keys of write bodies, never values
        if request.method in ("POST", "PUT", "PATCH", "DELETE"):
            payload["body_keys"] = _body_keys(request)
        log.info(json.dumps(payload, default=str))
        return response
