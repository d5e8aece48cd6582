from django.http import JsonResponse
from django.utils import timezone
from django.views.decorators.http import require_http_methods

from accounts.decorators import require_roles
from accounts.models import Role, STAFF_ROLES
from audit.utils import audit_log
from roster.models import Classroom
from roster.services import taught_class_ids
from samvera.api import (
    bind_form, date_param, form_error_response, handle_bad_request, int_param, json_body, json_error,
)
from .forms import MenuForm
from .models import Menu
from . import services


def menu_json(m):
    return {
        "id": m.id,
        "org_id": m.organization_id,
        "class_id": m.classroom_id,
        "day": m.day,
        "breakfast": m.breakfast,
        "lunch": m.lunch,
        "snack": m.snack,
        "notes": m.notes,
        "is_public": m.is_public,
        "created_by": m.created_by_id,
        "created_at": m.created_at,
        "updated_at": m.updated_at,
    }


def _own_menu(request, menu_id):
    """Return (menu, error_response) for a write by its author or a principal."""
    m = Menu.objects.live().filter(organization=request.org, id=menu_id).first() if menu_id else None
    if not m:
        return None, json_error("Menu not found", status=404)
    if m.created_by_id != request.user.id and request.membership.role != Role.PRINCIPAL:
        return None, json_error("Only the author or a principal can change this menu.", status=403)
    return m, None


@require_http_methods(["GET", "POST", "PUT", "DELETE"])
@require_roles(Role.PRINCIPAL, Role.TEACHER, Role.GUARDIAN)
@handle_bad_request
def menus(request):
    org = request.org
    if request.method == "GET":
        qs = services.visible_menus(request.user, request.membership)
        class_id = int_param(request.GET.get("classId"), "classId", minimum=1)
        day = date_param(request.GET.get("day"), "day")
        if class_id:
            qs = qs.filter(classroom_id=class_id)
        if day:
            qs = qs.filter(day=day)
        rows = [menu_json(m) for m in qs.order_by("-day", "id")]
        return JsonResponse({"menus": rows, "total_menus": len(rows)})

    if request.membership.role not in STAFF_ROLES:
        return json_error("Insufficient role.", status=403)

    if request.method == "DELETE":
        m, err = _own_menu(request, int_param(request.GET.get("id"), "id", minimum=1))
        if err:
            return err
        m.deleted_at = timezone.now()
        m.save(update_fields=["deleted_at", "updated_at"])
        audit_log(request.user, org, "MENU_DELETED", m, {"day": str(m.day)}, request)
        return JsonResponse({"success": True})

    payload = json_body(request)
    if request.method == "PUT":
        m, err = _own_menu(request, int_param(payload.get("id"), "id", minimum=1))
        if err:
            return err
        form = bind_form(MenuForm, payload, instance=m)
        if not form.is_valid():
            return form_error_response(form)
        m = form.save()
        audit_log(request.user, org, "MENU_UPDATED", m, {"fields": sorted(form.changed_data)}, request)
        return JsonResponse({"menu": menu_json(m)})

    day = date_param(payload.get("day"), "day")
    if not day:
        return json_error("Validation failed", details={"day": ["This field is required."]})
    form = MenuForm(payload)
    if not form.is_valid():
        return form_error_response(form)
    classroom = None
    class_id = int_param(payload.get("class_id"), "class_id", minimum=1)
    if class_id:
        classroom = Classroom.objects.live().filter(organization=org, id=class_id).first()
        if not classroom:
            return json_error("Class not found", status=404)
        if request.membership.role == Role.TEACHER and class_id not in taught_class_ids(request.user, org):
            return json_error("You can only post menus for classes you teach.", status=403)
    if request.membership.role == Role.TEACHER and (
        Menu.objects.live().filter(organization=org, classroom=classroom, day=day)
        .exclude(created_by=request.user).exists()
    ):
        return json_error("Only the author or a principal can change this menu.", status=403)
    m, created = services.upsert_menu(org, classroom, day, request.user, form.cleaned_data, set(payload))
    audit_log(request.user, org, "MENU_CREATED" if created else "MENU_UPDATED", m, {"day": str(day)}, request)
    return JsonResponse({"menu": menu_json(m), "message": "Menu saved"}, status=201)
