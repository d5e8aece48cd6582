from django.db import transaction
from django.http import JsonResponse
from django.utils import timezone
from django.views.decorators.http import require_http_methods

from accounts.decorators import require_roles
from accounts.models import Role
from audit.utils import audit_log
from notifications.services import notify_audience
from roster.models import Classroom
from roster.services import taught_class_ids
from samvera.api import bind_form, form_error_response, handle_bad_request, int_param, json_body, json_error
from .forms import AnnouncementForm
from .services import visible_announcements
from .models import Announcement


def announcement_json(a):
    return {
        "id": a.id,
        "org_id": a.organization_id,
        "class_id": a.classroom_id,
        "class_name": a.classroom.name if a.classroom_id else None,
        "author_id": a.author_id,
        "author_name": (a.author.full_name or a.author.email) if a.author_id else None,
        "title": a.title,
        "body": a.body,
        "week_start": a.week_start,
        "is_public": a.is_public,
        "created_at": a.created_at,
        "updated_at": a.updated_at,
    }


@require_http_methods(["GET", "POST"])
@require_roles(Role.PRINCIPAL, Role.TEACHER, Role.GUARDIAN)
@handle_bad_request
def announcements(request):
    if request.method == "GET":
        limit = int_param(request.GET.get("limit"), "limit", default=10, minimum=1, maximum=50)
        qs = visible_announcements(request.user, request.membership).select_related("classroom", "author")
        class_id = int_param(request.GET.get("classId"), "classId", minimum=1)
        if class_id:
            qs = qs.filter(classroom_id=class_id)
        rows = [announcement_json(a) for a in qs.order_by("-created_at", "-id")[:limit]]
        return JsonResponse({"announcements": rows})

    if request.membership.role not in (Role.PRINCIPAL, Role.TEACHER):
        return json_error("Insufficient role.", status=403)
    payload = json_body(request)
    form = AnnouncementForm(payload)
    if not form.is_valid():
        return form_error_response(form)

    classroom = None
    class_id = int_param(payload.get("class_id"), "class_id", minimum=1)
    if class_id:
        classroom = Classroom.objects.live().filter(organization=request.org, id=class_id).first()
        if not classroom:
            return json_error("Class not found", status=404)
        if request.membership.role == Role.TEACHER and class_id not in taught_class_ids(request.user, request.org):
            return json_error("You can only post announcements to classes you teach.", status=403)

    with transaction.atomic():
        a = form.save(commit=False)
        a.organization = request.org
        a.classroom = classroom
        a.author = request.user
        a.save()
        notify_audience(
            request.org, classroom, request.user, "announcement",
            context={"title": a.title},
            data={"announcement_id": a.id, "class_id": a.classroom_id},
        )
    audit_log(request.user, request.org, "ANNOUNCEMENT_CREATED", a, {}, request)
    return JsonResponse({"announcement": announcement_json(a)}, status=201)


@require_http_methods(["GET", "PUT", "DELETE"])
@require_roles(Role.PRINCIPAL, Role.TEACHER, Role.GUARDIAN)
@handle_bad_request
def announcement_detail(request, announcement_id):
    a = (Announcement.objects.select_related("classroom", "author")
         .filter(id=announcement_id, deleted_at__isnull=True).first())
    if not a:
        return json_error("Announcement not found", status=404)
    if a.organization_id != request.org.id:
        return json_error("Forbidden", status=403)
    if not visible_announcements(request.user, request.membership).filter(id=a.id).exists():
        return json_error("Forbidden", status=403)

    if request.method == "GET":
        return JsonResponse({"announcement": announcement_json(a)})

    if a.author_id != request.user.id and request.membership.role != Role.PRINCIPAL:
        return json_error("Only the author or a principal can change this announcement.", status=403)

    if request.method == "DELETE":
        a.deleted_at = timezone.now()
        a.save(update_fields=["deleted_at", "updated_at"])
        audit_log(request.user, request.org, "ANNOUNCEMENT_DELETED", a, {}, request)
        return JsonResponse({"success": True})

    form = bind_form(AnnouncementForm, json_body(request), instance=a)
    if not form.is_valid():
        return form_error_response(form)
    a = form.save()
    audit_log(request.user, request.org, "ANNOUNCEMENT_UPDATED", a, {"fields": sorted(form.changed_data)}, request)
    return JsonResponse({"announcement": announcement_json(a)})
