import logging

from django.contrib.auth import login
from django.db import transaction
from django.http import JsonResponse
from django.utils import timezone
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from accounts.decorators import require_roles
from accounts.models import OrgMembership, Role, User
from accounts.serializers import membership_json, user_json
from audit.utils import audit_log
from roster.models import Guardian
from samvera.api import form_error_response, handle_bad_request, json_body, json_error
from .forms import AcceptForm, InvitationForm
from .models import Invitation
from .ratelimit import RateLimitExceeded, check_global_per_min, check_per_address_daily
from .tasks import send_invitation_email

log = logging.getLogger(__name__)


def invitation_json(inv):
    return {
        "id": inv.id,
        "org_id": inv.organization_id,
        "org_name": inv.organization.name,
        "email": inv.email,
        "role": inv.role,
        "expires_at": inv.expires_at,
        "accepted_at": inv.accepted_at,
        "created_at": inv.created_at,
    }


def _check_usable(inv):
    if inv is None:
        return json_error("Invitation not found", status=404)
    if inv.is_accepted:
        return json_error("Invitation already accepted", status=400)
    if inv.is_expired:
        return json_error("Invitation expired", status=400)
    return None


@require_http_methods(["GET", "POST"])
@require_roles(Role.PRINCIPAL)
@handle_bad_request
def invitations(request):
    if request.method == "GET":
        qs = (Invitation.objects.filter(organization=request.org, accepted_at__isnull=True,
                                        expires_at__gt=timezone.now())
              .select_related("organization").order_by("-created_at"))
        return JsonResponse({"invitations": [invitation_json(i) for i in qs]})

    form = InvitationForm(json_body(request))
    if not form.is_valid():
        return form_error_response(form)
    email = form.cleaned_data["email"]
    try:
        check_global_per_min()
        check_per_address_daily(email)
    except RateLimitExceeded as e:
        log.info("invitation rate limited: %s", e)
        return json_error("Too many invitations, try again later.", status=429)

    with transaction.atomic():
        inv = Invitation.objects.create(
            organization=request.org, email=email, role=form.cleaned_data["role"], created_by=request.user,
        )
        transaction.on_commit(lambda: send_invitation_email.delay(inv.id))
    audit_log(request.user, request.org, "INVITATION_CREATED", inv, {"role": inv.role}, request)
    return JsonResponse({"invitation": invitation_json(inv)}, status=201)


@require_GET
def validate(request):
    token = (request.GET.get("token") or "").strip()
    inv = Invitation.objects.select_related("organization").filter(token=token).first() if token else None
    err = _check_usable(inv)
    if err:
        return err
    return JsonResponse({"valid": True, "invitation": invitation_json(inv)})


@require_POST
@handle_bad_request
def accept(request):
    form = AcceptForm(json_body(request))
    if not form.is_valid():
        return form_error_response(form)
    cd = form.cleaned_data

    with transaction.atomic():
        inv = (Invitation.objects.select_for_update().select_related("organization")
               .filter(token=cd["token"].strip()).first())
        err = _check_usable(inv)
        if err:
            return err

        user = User.objects.filter(email__iexact=inv.email).first()
        if user is None:
            user = User.objects.create_user(email=inv.email)
        for name in ("first_name", "last_name"):
            if cd.get(name):
                setattr(user, name, cd[name])
        user.set_password(cd["password"])
        user.save()

        mem, _ = OrgMembership.objects.get_or_create(user=user, organization=inv.organization, role=inv.role)
        if not mem.is_active:
            mem.is_active = True
            mem.save(update_fields=["is_active"])
        has_profile = Guardian.objects.filter(user=user, organization=inv.organization).exists()
        if inv.role == Role.GUARDIAN and not has_profile:
            Guardian.objects.create(
                organization=inv.organization, user=user, email=user.email,
                first_name=user.first_name, last_name=user.last_name, phone=user.phone,
            )

        inv.accepted_by = user
        inv.accepted_at = timezone.now()
        inv.save(update_fields=["accepted_by", "accepted_at"])

    audit_log(user, inv.organization, "INVITATION_ACCEPTED", inv, {"role": inv.role}, request)
    login(request, user, backend="django.contrib.auth.backends.ModelBackend")
    request.session["current_org_id"] = inv.organization_id
    return JsonResponse({"user": user_json(user), "membership": membership_json(mem)})
