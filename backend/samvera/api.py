"""Small helpers shared by the JSON views: body parsing, errors, pagination."""

from __future__ import annotations

import json
import math
from functools import wraps

from django.forms.models import model_to_dict
from django.http import JsonResponse
from django.utils.dateparse import parse_date


class BadRequest(Exception):
    """Raised for malformed request input; views turn it into a 400."""


def json_error(message: str, status: int = 400, **extra) -> JsonResponse:
    payload = {"error": message}
    payload.update(extra)
    return JsonResponse(payload, status=status)


def form_error_response(form) -> JsonResponse:
    details = {field: [str(e) for e in errors] for field, errors in form.errors.items()}
    return json_error("Validation failed", status=400, details=details)


def json_body(request) -> dict:
    if not request.body:
        return {}
    try:
        data = json.loads(request.body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        raise BadRequest("Invalid JSON body")
    if not isinstance(data, dict):
        raise BadRequest("JSON body must be an object")
    return data


def handle_bad_request(view_func):
    """Map BadRequest raised anywhere in the view to a JSON 400."""
    @wraps(view_func)
    def _wrapped(request, *args, **kwargs):
        try:
            return view_func(request, *args, **kwargs)
        except BadRequest as e:
            return json_error(str(e), status=400)
    return _wrapped


def int_param(value, name: str, default=None, minimum=None, maximum=None):
    if value in (None, ""):
        return default
    try:
        n = int(value)
    except (TypeError, ValueError):
        raise BadRequest(f"{name} must be an integer")
    if minimum is not None and n < minimum:
        raise BadRequest(f"{name} must be at least {minimum}")
    if maximum is not None and n > maximum:
        raise BadRequest(f"{name} must be at most {maximum}")
    return n


def bool_param(value) -> bool:
    return str(value or "").strip().lower() in ("1", "true", "yes", "on")


def date_param(value, name: str):
    if value in (None, ""):
        return None
    try:
        d = parse_date(str(value))
    except ValueError:
        d = None
    if d is None:
        raise BadRequest(f"{name} must be a date (YYYY-MM-DD)")
    return d


def id_list(value, name: str = "ids") -> list[int]:
    """Parse "1,2,3" (or a JSON list) into ints; blanks are skipped."""
    if value in (None, ""):
        return []
    parts = value if isinstance(value, list) else str(value).split(",")
    out = []
    for p in parts:
        p = str(p).strip()
        if not p:
            continue
        try:
            out.append(int(p))
        except ValueError:
            raise BadRequest(f"{name} must contain integer ids")
    return out


def paginate(qs, request, default_size: int = 20, max_size: int = 100):
    """
    Slice a queryset by ?page and ?pageSize.
    Returns (rows, meta) where meta carries totalCount/totalPages/currentPage.
    """
    page = int_param(request.GET.get("page"), "page", default=1, minimum=1)
    size = int_param(request.GET.get("pageSize"), "pageSize", default=default_size, minimum=1, maximum=max_size)
    total = qs.count()
    offset = (page - 1) * size
    rows = list(qs[offset:offset + size])
    meta = {
        "totalCount": total,
        "totalPages": max(1, math.ceil(total / size)),
        "currentPage": page,
    }
    return rows, meta


def bind_form(form_class, payload: dict, instance=None, **kwargs):
    """
    Bind a ModelForm for create or partial update: on update, fields missing
    from the payload keep the instance's current values.
    """
    fields = form_class._meta.fields
    data = model_to_dict(instance, fields=fields) if instance is not None else {}
    data.update({k: v for k, v in payload.items() if k in fields})
    return form_class(data, instance=instance, **kwargs)
