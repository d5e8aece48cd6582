from django.contrib.auth import authenticate, login, logout
from django.http import JsonResponse
from django.views.decorators.csrf import ensure_csrf_cookie
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from samvera.api import form_error_response, handle_bad_request, json_body, json_error
from .decorators import require_login
from .forms import LoginForm, PreferencesForm, SwitchOrgForm
from .serializers import membership_json, org_json, user_json


def _active_memberships(user):
    return (user.memberships.filter(is_active=True, organization__is_active=True)
            .select_related("organization").order_by("organization__name", "role"))


@require_GET
@ensure_csrf_cookie
def csrf(request):
    return JsonResponse({"ok": True})


@require_POST
@handle_bad_request
def login_view(request):
    form = LoginForm(json_body(request))
    if not form.is_valid():
        return form_error_response(form)
    user = authenticate(request, email=form.cleaned_data["email"], password=form.cleaned_data["password"])
    if user is None:
        return json_error("Invalid email or password.", status=400)
    login(request, user)
    mems = list(_active_memberships(user))
    # If the user belongs to exactly one org, pin it for continuity
    if len({m.organization_id for m in mems}) == 1:
        request.session["current_org_id"] = mems[0].organization_id
    return JsonResponse({
        "user": user_json(user),
        "memberships": [membership_json(m) for m in mems],
    })


@require_POST
def logout_view(request):
    logout(request)
    return JsonResponse({"success": True})


@require_GET
@require_login
def user_context(request):
    u = request.user
    mems = list(_active_memberships(u))
    org = request.org
    mem = request.membership
    return JsonResponse({
        "user": user_json(u),
        "roles": sorted({m.role for m in mems}),
        "memberships": [membership_json(m) for m in mems],
        "active_org": org_json(org) if org else None,
        "active_role": mem.role if mem else None,
        "is_admin": u.is_superuser,
    })


@require_POST
@require_login
@handle_bad_request
def switch_org(request):
    form = SwitchOrgForm(json_body(request))
    if not form.is_valid():
        return form_error_response(form)
    org_id = form.cleaned_data["org_id"]
    if not _active_memberships(request.user).filter(organization_id=org_id).exists():
        return json_error("Invalid organization for this user.", status=403)
    request.session["current_org_id"] = org_id
    return JsonResponse({"success": True, "org_id": org_id})


@require_http_methods(["GET", "PUT"])
@require_login
@handle_bad_request
def user_preferences(request):
    u = request.user
    if request.method == "PUT":
        form = PreferencesForm(json_body(request))
        if not form.is_valid():
            return form_error_response(form)
        fields = []
        for name in ("theme", "language"):
            value = form.cleaned_data.get(name)
            if value:
                setattr(u, name, value)
                fields.append(name)
        if fields:
            u.save(update_fields=fields)
    return JsonResponse({"theme": u.theme, "language": u.language})
