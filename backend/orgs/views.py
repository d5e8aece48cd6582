import logging

from django.db import transaction
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_http_methods

from accounts.decorators import require_roles
from accounts.models import Organization, OrgMembership, Role, User
from accounts.serializers import org_json, user_json
from audit.utils import audit_log
from samvera.api import (
    bind_form, form_error_response, handle_bad_request, id_list, int_param, json_body, json_error, paginate,
)
from .forms import OrganizationForm, PrincipalForm, PrincipalUpdateForm
from .services import ensure_principal, org_metrics

log = logging.getLogger(__name__)


@require_http_methods(["GET", "POST", "PUT", "DELETE"])
@require_roles(allow_superuser=True)
@handle_bad_request
def orgs(request):
    if request.method == "GET":
        qs = Organization.objects.order_by("-created_at", "-id")
        ids = id_list(request.GET.get("ids"))
        if ids:
            return JsonResponse({"orgs": [org_json(o) for o in qs.filter(id__in=ids)]})
        rows, meta = paginate(qs, request)
        return JsonResponse({"orgs": [org_json(o) for o in rows], **meta})

    if request.method == "DELETE":
        org_id = int_param(request.GET.get("id"), "id", minimum=1)
        if org_id is None:
            return json_error("id is required")
        org = get_object_or_404(Organization, id=org_id)
        with transaction.atomic():
            audit_log(request.user, None, "ORG_DELETED", org, {"name": org.name, "slug": org.slug}, request)
            org.delete()
        log.info("organization %s deleted by %s", org_id, request.user.pk)
        return JsonResponse({"success": True})

    payload = json_body(request)
    if request.method == "PUT":
        org_id = int_param(payload.get("id"), "id", minimum=1)
        if org_id is None:
            return json_error("id is required")
        org = get_object_or_404(Organization, id=org_id)
        form = bind_form(OrganizationForm, payload, instance=org)
    else:
        form = bind_form(OrganizationForm, payload)
    if not form.is_valid():
        return form_error_response(form)

    org = form.save(commit=False)
    if request.method == "POST":
        org.created_by = request.user
    org.updated_by = request.user
    org.save()
    action = "ORG_CREATED" if request.method == "POST" else "ORG_UPDATED"
    audit_log(request.user, org, action, org, {"fields": sorted(form.changed_data)}, request)
    return JsonResponse({"org": org_json(org)}, status=201 if request.method == "POST" else 200)


@require_GET
@require_roles(allow_superuser=True)
def org_detail(request, org_id):
    org = get_object_or_404(Organization, id=org_id)
    return JsonResponse({"org": org_json(org), "metrics": org_metrics(org)})


@require_http_methods(["GET", "PUT"])
@require_roles(Role.PRINCIPAL)
@handle_bad_request
def my_org(request):
    org = request.org
    if request.method == "PUT":
        form = bind_form(OrganizationForm, json_body(request), instance=org)
        if not form.is_valid():
            return form_error_response(form)
        org = form.save(commit=False)
        org.updated_by = request.user
        org.save()
        audit_log(request.user, org, "ORG_UPDATED", org, {"fields": sorted(form.changed_data)}, request)
    return JsonResponse({"org": org_json(org)})


def _principal_json(mem: OrgMembership):
    out = user_json(mem.user)
    out.update({
        "membership_id": mem.id,
        "org_id": mem.organization_id,
        "org_name": mem.organization.name,
        "is_active": mem.is_active,
    })
    return out


@require_http_methods(["GET", "POST"])
@require_roles(allow_superuser=True)
@handle_bad_request
def principals(request):
    if request.method == "GET":
        qs = (OrgMembership.objects.filter(role=Role.PRINCIPAL)
              .select_related("user", "organization").order_by("-created_at", "-id"))
        org_id = int_param(request.GET.get("orgId"), "orgId", minimum=1)
        if org_id:
            qs = qs.filter(organization_id=org_id)
        rows, meta = paginate(qs, request)
        return JsonResponse({"principals": [_principal_json(m) for m in rows], **meta})

    form = PrincipalForm(json_body(request))
    if not form.is_valid():
        return form_error_response(form)
    org = Organization.objects.get(id=form.cleaned_data["org_id"])
    mem, created = ensure_principal(org, form.cleaned_data)
    audit_log(request.user, org, "PRINCIPAL_ADDED", mem.user, {"membership": mem.id}, request)
    return JsonResponse({"principal": _principal_json(mem)}, status=201 if created else 200)


@require_http_methods(["GET", "PUT", "DELETE"])
@require_roles(allow_superuser=True)
@handle_bad_request
def principal_detail(request, user_id):
    mems = (OrgMembership.objects.filter(user_id=user_id, role=Role.PRINCIPAL)
            .select_related("user", "organization").order_by("organization__name"))
    if not mems.exists():
        return json_error("Principal not found", status=404)
    user = mems[0].user

    if request.method == "PUT":
        form = PrincipalUpdateForm(json_body(request))
        if not form.is_valid():
            return form_error_response(form)
        cd = form.cleaned_data
        email = (cd.get("email") or "").strip().lower()
        if email and email != user.email:
            if User.objects.filter(email__iexact=email).exclude(id=user.id).exists():
                return json_error("This email is already being used by another user")
            user.email = email
        for name in ("first_name", "last_name", "phone"):
            if name in form.data:
                setattr(user, name, cd.get(name) or "")
        user.save()
        if cd.get("is_active") is not None:
            mems.update(is_active=cd["is_active"])
        audit_log(request.user, mems[0].organization, "PRINCIPAL_UPDATED", user, {}, request)

    elif request.method == "DELETE":
        org_id = int_param(request.GET.get("orgId"), "orgId", minimum=1)
        target = mems.filter(organization_id=org_id) if org_id else mems
        n = target.update(is_active=False)
        audit_log(request.user, mems[0].organization, "PRINCIPAL_REMOVED", user, {"memberships": n}, request)
        return JsonResponse({"success": True})

    mems = list(mems)
    out = _principal_json(mems[0])
    out["memberships"] = [
        {"id": m.id, "org_id": m.organization_id, "org_name": m.organization.name, "is_active": m.is_active}
        for m in mems
    ]
    return JsonResponse({"principal": out})
