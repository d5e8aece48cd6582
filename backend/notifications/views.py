from django import forms
from django.http import JsonResponse
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from accounts.decorators import require_login, require_roles
from accounts.models import Role
from samvera.api import bool_param, form_error_response, handle_bad_request, int_param, json_body, json_error
from . import services
from .models import DeviceToken, Notification

ALL_ROLES = (Role.PRINCIPAL, Role.TEACHER, Role.GUARDIAN)


def notification_json(n):
    return {
        "id": n.id,
        "org_id": n.organization_id,
        "type": n.type,
        "title": n.title,
        "body": n.body,
        "data": n.data,
        "is_read": n.is_read,
        "read_at": n.read_at,
        "priority": n.priority,
        "expires_at": n.expires_at,
        "created_at": n.created_at,
    }


class DeviceTokenForm(forms.Form):
    token = forms.CharField(max_length=512)
    provider = forms.ChoiceField(choices=DeviceToken.Provider.choices, required=False)


@require_GET
@require_roles(*ALL_ROLES)
@handle_bad_request
def notifications(request):
    limit = int_param(request.GET.get("limit"), "limit", default=50, minimum=1, maximum=100)
    qs = Notification.objects.current().filter(user=request.user, organization=request.org)
    if bool_param(request.GET.get("unreadOnly")):
        qs = qs.filter(is_read=False)
    rows = [notification_json(n) for n in qs.order_by("-created_at", "-id")[:limit]]
    return JsonResponse({
        "notifications": rows,
        "unread_count": services.unread_count(request.user, request.org),
    })


@require_GET
@require_roles(*ALL_ROLES)
def unread_count(request):
    return JsonResponse({"unread_count": services.unread_count(request.user, request.org)})


@require_POST
@require_roles(*ALL_ROLES)
def mark_read(request, notification_id):
    n = services.mark_read(request.user, request.org, notification_id)
    if not n:
        return json_error("Notification not found", status=404)
    return JsonResponse({"notification": notification_json(n)})


@require_POST
@require_roles(*ALL_ROLES)
def mark_all_read(request):
    return JsonResponse({"success": True, "updated": services.mark_all_read(request.user, request.org)})


@require_http_methods(["POST", "DELETE"])
@require_login
@handle_bad_request
def device_tokens(request):
    form = DeviceTokenForm(json_body(request))
    if not form.is_valid():
        return form_error_response(form)
    token = form.cleaned_data["token"].strip()
    provider = form.cleaned_data.get("provider")
    if request.method == "DELETE":
        n = services.remove_device_token(request.user, token, provider or None)
        return JsonResponse({"success": True, "removed": n})
    dt, created = services.register_device_token(request.user, token, provider or DeviceToken.Provider.FCM)
    return JsonResponse(
        {"device_token": {"id": dt.id, "provider": dt.provider, "created_at": dt.created_at}},
        status=201 if created else 200,
    )
