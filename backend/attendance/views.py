from django.http import JsonResponse
from django.utils import timezone
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from accounts.decorators import require_roles
from accounts.models import Role, STAFF_ROLES
from audit.utils import audit_log
from roster.models import Classroom, Student
from roster.serializers import class_json, students_with_guardians
from roster.services import taught_class_ids
from samvera.api import (
    bind_form, date_param, form_error_response, handle_bad_request, int_param, json_body, json_error,
)
from .forms import AttendanceForm, AttendanceRecordForm
from .models import Attendance
from . import services


def attendance_json(a):
    return {
        "id": a.id,
        "org_id": a.organization_id,
        "class_id": a.classroom_id,
        "student_id": a.student_id,
        "student_name": a.student.full_name,
        "date": a.date,
        "status": a.status,
        "notes": a.notes,
        "recorded_by": a.recorded_by_id,
        "left_at": a.left_at,
        "created_at": a.created_at,
        "updated_at": a.updated_at,
    }


def _clean_record(raw):
    """Return (record, error_response); only keys the client sent are kept."""
    if not isinstance(raw, dict):
        return None, json_error("Each record must be an object")
    form = AttendanceRecordForm(raw)
    if not form.is_valid():
        return None, form_error_response(form)
    return {k: v for k, v in form.cleaned_data.items() if k in raw}, None


@require_http_methods(["GET", "POST", "PUT", "DELETE"])
@require_roles(Role.PRINCIPAL, Role.TEACHER, Role.GUARDIAN)
@handle_bad_request
def attendance(request):
    org = request.org
    if request.method == "GET":
        qs = services.visible_attendance(request.user, request.membership).select_related("student")
        class_id = int_param(request.GET.get("classId"), "classId", minimum=1)
        student_id = int_param(request.GET.get("studentId"), "studentId", minimum=1)
        day = date_param(request.GET.get("date"), "date")
        if class_id:
            qs = qs.filter(classroom_id=class_id)
        if student_id:
            qs = qs.filter(student_id=student_id)
        if day:
            qs = qs.filter(date=day)
        rows = [attendance_json(a) for a in qs.order_by("-date", "student__last_name", "student__first_name")]
        return JsonResponse({"attendance": rows, "total": len(rows)})

    if request.membership.role not in STAFF_ROLES:
        return json_error("Insufficient role.", status=403)

    if request.method == "DELETE":
        aid = int_param(request.GET.get("id"), "id", minimum=1)
        row = Attendance.objects.filter(organization=org, id=aid).first() if aid else None
        if not row:
            return json_error("Attendance not found", status=404)
        audit_log(request.user, org, "ATTENDANCE_DELETED", row, {"student_id": row.student_id, "date": str(row.date)},
                  request)
        row.delete()
        return JsonResponse({"success": True})

    payload = json_body(request)
    if request.method == "PUT":
        aid = int_param(payload.get("id"), "id", minimum=1)
        row = Attendance.objects.select_related("student").filter(organization=org, id=aid).first() if aid else None
        if not row:
            return json_error("Attendance not found", status=404)
        form = bind_form(AttendanceForm, payload, instance=row)
        if not form.is_valid():
            return form_error_response(form)
        row = form.save(commit=False)
        row.recorded_by = request.user
        row.save()
        audit_log(request.user, org, "ATTENDANCE_UPDATED", row, {"fields": sorted(form.changed_data)}, request)
        return JsonResponse({"attendance": attendance_json(row)})

    rec, err = _clean_record(payload)
    if err:
        return err
    try:
        row = services.record_attendance(org, request.user, [rec])[0]
    except services.UnknownStudents:
        return json_error("Student not found", status=404)
    except services.UnknownClass as e:
        return json_error(str(e), status=404)
    audit_log(request.user, org, "ATTENDANCE_RECORDED", row, {"student_id": row.student_id, "status": row.status},
              request)
    return JsonResponse({"attendance": attendance_json(row), "message": "Attendance saved"}, status=201)


@require_POST
@require_roles(Role.PRINCIPAL, Role.TEACHER)
@handle_bad_request
def attendance_batch(request):
    records = json_body(request).get("records")
    if not isinstance(records, list) or not records:
        return json_error("records must be a non-empty list")
    cleaned = []
    for raw in records:
        rec, err = _clean_record(raw)
        if err:
            return err
        if not rec.get("status"):
            return json_error("Validation failed", details={"status": ["This field is required."]})
        cleaned.append(rec)
    try:
        rows = services.record_attendance(request.org, request.user, cleaned)
    except services.UnknownStudents as e:
        return json_error(str(e), status=404, missingStudentIds=e.ids)
    except services.UnknownClass as e:
        return json_error(str(e), status=404)
    audit_log(request.user, request.org, "ATTENDANCE_BATCH_RECORDED", None,
              {"count": len(rows), "student_ids": [r.student_id for r in rows]}, request)
    return JsonResponse({
        "attendance": [attendance_json(r) for r in rows],
        "count": len(rows),
        "message": f"Saved {len(rows)} attendance record(s)",
    }, status=201)


@require_GET
@require_roles(Role.TEACHER)
def teacher_attendance_initial(request):
    """Everything the roll-call screen needs in one round trip."""
    org = request.org
    ids = taught_class_ids(request.user, org)
    classes = Classroom.objects.live().filter(organization=org, id__in=ids).order_by("name", "id")
    students = (Student.objects.live().filter(organization=org, classroom_id__in=ids)
                .select_related("classroom").order_by("last_name", "first_name"))
    today = timezone.localdate()
    rows = (Attendance.objects.filter(organization=org, classroom_id__in=ids, date=today)
            .select_related("student").order_by("student__last_name", "student__first_name"))
    return JsonResponse({
        "classes": [class_json(c) for c in classes],
        "students": students_with_guardians(students),
        "attendance": [attendance_json(a) for a in rows],
        "date": today,
    })
