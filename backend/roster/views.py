import logging

from django.db import transaction
from django.db.models import Count, Prefetch, Q
from django.http import JsonResponse
from django.utils import timezone
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from accounts.decorators import require_roles
from accounts.models import OrgMembership, Role, STAFF_ROLES, User
from accounts.serializers import user_json
from audit.utils import audit_log
from samvera.api import (
    BadRequest, bind_form, bool_param, form_error_response, handle_bad_request, id_list, int_param,
    json_body, json_error,
)
from .forms import ClassroomForm, GuardianForm, LinkForm, StudentForm, TeacherClassForm
from .models import Classroom, ClassMembership, Guardian, Student, StudentGuardian
from .serializers import class_json, guardian_json, link_json, student_json, students_with_guardians, teacher_ref
from . import services

log = logging.getLogger(__name__)

SEARCH_LIMIT = 5


def _classes_qs(org):
    return (
        Classroom.objects.live().filter(organization=org)
        .annotate(n_students=Count("students", filter=Q(students__deleted_at__isnull=True)))
        .prefetch_related(Prefetch("memberships", queryset=ClassMembership.objects.select_related("user")))
        .order_by("name", "id")
    )


def _class_out(c):
    return class_json(c, teachers=[teacher_ref(cm) for cm in c.memberships.all()], student_count=c.n_students)


def _get_class(org, class_id):
    return Classroom.objects.live().filter(organization=org, id=class_id).first()


# ---------------------------------------------------------------- classes

@require_http_methods(["GET", "POST"])
@require_roles(Role.PRINCIPAL, Role.TEACHER, Role.GUARDIAN)
@handle_bad_request
def classes(request):
    org = request.org
    if request.method == "GET":
        qs = _classes_qs(org)
        created_by = int_param(request.GET.get("createdBy"), "createdBy", minimum=1)
        if created_by:
            qs = qs.filter(created_by_id=created_by)
        if request.membership.role == Role.GUARDIAN:
            qs = qs.filter(id__in=services.guardian_class_ids(request.user, org))
        rows = [_class_out(c) for c in qs]
        return JsonResponse({"classes": rows, "total_classes": len(rows)})

    if request.membership.role != Role.PRINCIPAL:
        return json_error("Insufficient role.", status=403)
    form = bind_form(ClassroomForm, json_body(request), organization=org)
    if not form.is_valid():
        return form_error_response(form)
    c = form.save(commit=False)
    c.organization = org
    c.created_by = request.user
    c.save()
    audit_log(request.user, org, "CLASS_CREATED", c, {"name": c.name}, request)
    return JsonResponse({"class": class_json(c, teachers=[], student_count=0)}, status=201)


@require_http_methods(["GET", "PUT", "DELETE"])
@require_roles(Role.PRINCIPAL, Role.TEACHER)
@handle_bad_request
def class_detail(request, class_id):
    org = request.org
    c = _classes_qs(org).filter(id=class_id).first()
    if not c:
        return json_error("Class not found", status=404)

    if request.method == "GET":
        students = Student.objects.live().filter(classroom=c).order_by("last_name", "first_name")
        out = _class_out(c)
        out["students"] = [student_json(s) for s in students.select_related("classroom")]
        return JsonResponse({"class": out})

    if request.membership.role != Role.PRINCIPAL:
        return json_error("Insufficient role.", status=403)

    if request.method == "DELETE":
        services.soft_delete_classroom(c)
        audit_log(request.user, org, "CLASS_DELETED", c, {}, request)
        return JsonResponse({"success": True})

    form = bind_form(ClassroomForm, json_body(request), instance=c, organization=org)
    if not form.is_valid():
        return form_error_response(form)
    c = form.save()
    audit_log(request.user, org, "CLASS_UPDATED", c, {"fields": sorted(form.changed_data)}, request)
    return JsonResponse({"class": _class_out(_classes_qs(org).get(id=c.id))})


@require_POST
@require_roles(Role.PRINCIPAL)
@handle_bad_request
def assign_teacher_class(request):
    form = TeacherClassForm(json_body(request))
    if not form.is_valid():
        return form_error_response(form)
    c = _get_class(request.org, form.cleaned_data["classId"])
    if not c:
        return json_error("Class not found", status=404)
    user_id = form.cleaned_data["userId"]
    if not services.is_active_teacher(user_id, request.org):
        return json_error("User is not a teacher in this organization")
    cm = services.assign_teacher(c, user_id)
    audit_log(request.user, request.org, "TEACHER_ASSIGNED", c, {"user_id": user_id}, request)
    return JsonResponse({
        "success": True,
        "assignment": {"class_id": c.id, "user_id": user_id, "membership_role": cm.membership_role},
    })


@require_POST
@require_roles(Role.PRINCIPAL)
@handle_bad_request
def remove_teacher_class(request):
    form = TeacherClassForm(json_body(request))
    if not form.is_valid():
        return form_error_response(form)
    c = _get_class(request.org, form.cleaned_data["classId"])
    if not c:
        return json_error("Class not found", status=404)
    user_id = form.cleaned_data["userId"]
    n, _ = ClassMembership.objects.filter(classroom=c, user_id=user_id).delete()
    if not n:
        return json_error("Teacher is not assigned to this class", status=404)
    audit_log(request.user, request.org, "TEACHER_UNASSIGNED", c, {"user_id": user_id}, request)
    return JsonResponse({"success": True})


@require_POST
@require_roles(Role.PRINCIPAL, Role.TEACHER)
@handle_bad_request
def assign_students_class(request):
    payload = json_body(request)
    class_id = int_param(payload.get("classId"), "classId", minimum=1)
    student_ids = id_list(payload.get("studentIds"), "studentIds")
    if not class_id or not student_ids:
        return json_error("classId and studentIds are required")
    c = _get_class(request.org, class_id)
    if not c:
        return json_error("Class not found", status=404)
    n, missing = services.assign_students(c, student_ids)
    if missing:
        return json_error("Some students were not found in this organization", status=404, missingStudentIds=missing)
    audit_log(request.user, request.org, "STUDENTS_ASSIGNED", c, {"student_ids": student_ids}, request)
    return JsonResponse({"success": True, "assignedCount": n})


@require_GET
@require_roles(Role.TEACHER)
def teacher_classes(request):
    ids = services.taught_class_ids(request.user, request.org)
    rows = [_class_out(c) for c in _classes_qs(request.org).filter(id__in=ids)]
    return JsonResponse({"classes": rows, "total_classes": len(rows)})


@require_GET
@require_roles(Role.PRINCIPAL)
def teachers(request):
    mems = (OrgMembership.objects.filter(organization=request.org, role=Role.TEACHER, is_active=True)
            .select_related("user").order_by("user__last_name", "user__first_name"))
    taught = {}
    for cm in ClassMembership.objects.filter(
        classroom__organization=request.org, classroom__deleted_at__isnull=True
    ).select_related("classroom"):
        taught.setdefault(cm.user_id, []).append({"id": cm.classroom_id, "name": cm.classroom.name})
    rows = []
    for m in mems:
        row = user_json(m.user)
        row["membership_id"] = m.id
        row["classes"] = taught.get(m.user_id, [])
        rows.append(row)
    return JsonResponse({"teachers": rows, "total_teachers": len(rows)})


# ---------------------------------------------------------------- guardians

def _guardian_students(guardian):
    links = (guardian.student_links.filter(student__deleted_at__isnull=True)
             .select_related("student__classroom").order_by("student__first_name"))
    return [dict(student_json(link.student), relation=link.relation) for link in links]


@require_http_methods(["GET", "POST", "PUT", "DELETE"])
@require_roles(*STAFF_ROLES)
@handle_bad_request
def guardians(request):
    org = request.org
    if request.method == "GET":
        gid = int_param(request.GET.get("id"), "id", minimum=1)
        if gid:
            g = Guardian.objects.filter(organization=org, id=gid).first()
            if not g:
                return json_error("Guardian not found", status=404)
            children = _guardian_students(g)
            return JsonResponse({"guardian": guardian_json(g), "children": children, "total_children": len(children)})
        rows = [guardian_json(g) for g in Guardian.objects.filter(organization=org).order_by("last_name", "first_name")]
        return JsonResponse({"guardians": rows, "total_guardians": len(rows)})

    if request.method == "DELETE":
        gid = int_param(request.GET.get("id"), "id", minimum=1)
        g = Guardian.objects.filter(organization=org, id=gid).first() if gid else None
        if not g:
            return json_error("Guardian not found", status=404)
        audit_log(request.user, org, "GUARDIAN_DELETED", g, {}, request)
        g.delete()
        return JsonResponse({"success": True})

    payload = json_body(request)
    if request.method == "POST":
        form = GuardianForm(payload)
        if not form.is_valid():
            return form_error_response(form)
        student = None
        student_id = int_param(payload.get("student_id"), "student_id", minimum=1)
        if student_id:
            student = Student.objects.live().filter(organization=org, id=student_id).first()
            if not student:
                return json_error("Student not found", status=404)
        data = dict(form.cleaned_data, relation=(payload.get("relation") or "parent"))
        try:
            g = services.create_guardian(org, data, student=student)
        except services.EmailInUse as e:
            return json_error(str(e))
        audit_log(request.user, org, "GUARDIAN_CREATED", g, {"student_id": student_id}, request)
        return JsonResponse({"guardian": guardian_json(g)}, status=201)

    gid = int_param(payload.get("id"), "id", minimum=1)
    g = Guardian.objects.filter(organization=org, id=gid).first() if gid else None
    if not g:
        return json_error("Guardian not found", status=404)
    form = bind_form(GuardianForm, payload, instance=g)
    if not form.is_valid():
        return form_error_response(form)
    email = form.cleaned_data["email"]
    if User.objects.filter(email__iexact=email).exclude(id=g.user_id).exists():
        return json_error("This email is already being used by another user")
    with transaction.atomic():
        g = form.save()
        if "is_active" in payload:
            g.is_active = bool_param(payload["is_active"])
            g.save(update_fields=["is_active", "updated_at"])
        if g.user_id:
            User.objects.filter(id=g.user_id).update(
                email=g.email, first_name=g.first_name, last_name=g.last_name, phone=g.phone,
            )
    audit_log(request.user, org, "GUARDIAN_UPDATED", g, {"fields": sorted(form.changed_data)}, request)
    return JsonResponse({"guardian": guardian_json(g)})


# ---------------------------------------------------------------- students

def _resolve_class(org, payload):
    if "class_id" not in payload:
        return False, None
    class_id = int_param(payload.get("class_id"), "class_id", minimum=1)
    if class_id is None:
        return True, None
    c = _get_class(org, class_id)
    if not c:
        raise BadRequest("Class not found in this organization")
    return True, c


@require_http_methods(["GET", "POST", "PUT", "DELETE"])
@require_roles(Role.PRINCIPAL, Role.TEACHER, Role.GUARDIAN)
@handle_bad_request
def students(request):
    org = request.org
    is_guardian = request.membership.role == Role.GUARDIAN

    if request.method == "GET":
        qs = Student.objects.live().filter(organization=org).select_related("classroom")
        if is_guardian:
            qs = qs.filter(id__in=services.guardian_student_ids(request.user, org))
        sid = int_param(request.GET.get("id"), "id", minimum=1)
        if sid:
            rows = students_with_guardians(qs.filter(id=sid))
            if not rows:
                return json_error("Student not found", status=404)
            return JsonResponse({"student": rows[0]})
        class_id = int_param(request.GET.get("classId"), "classId", minimum=1)
        if class_id:
            qs = qs.filter(classroom_id=class_id)
        rows = students_with_guardians(qs.order_by("last_name", "first_name"))
        return JsonResponse({"students": rows, "total_students": len(rows)})

    if is_guardian:
        return json_error("Insufficient role.", status=403)

    if request.method == "DELETE":
        sid = int_param(request.GET.get("id"), "id", minimum=1)
        s = Student.objects.live().filter(organization=org, id=sid).first() if sid else None
        if not s:
            return json_error("Student not found", status=404)
        s.deleted_at = timezone.now()
        s.save(update_fields=["deleted_at", "updated_at"])
        audit_log(request.user, org, "STUDENT_DELETED", s, {}, request)
        return JsonResponse({"success": True})

    payload = json_body(request)
    instance = None
    if request.method == "PUT":
        sid = int_param(payload.get("id"), "id", minimum=1)
        instance = Student.objects.live().filter(organization=org, id=sid).first() if sid else None
        if not instance:
            return json_error("Student not found", status=404)
    form = bind_form(StudentForm, payload, instance=instance)
    if not form.is_valid():
        return form_error_response(form)
    class_given, classroom = _resolve_class(org, payload)
    guardian_ids = id_list(payload.get("guardian_ids"), "guardian_ids") if "guardian_ids" in payload else None

    with transaction.atomic():
        s = form.save(commit=False)
        s.organization = org
        if class_given:
            s.classroom = classroom
        s.save()
        if guardian_ids is not None:
            services.set_student_guardians(s, guardian_ids)

    created = request.method == "POST"
    audit_log(request.user, org, "STUDENT_CREATED" if created else "STUDENT_UPDATED", s,
              {"fields": sorted(form.changed_data)}, request)
    s = Student.objects.select_related("classroom").get(id=s.id)
    return JsonResponse({"student": students_with_guardians([s])[0]}, status=201 if created else 200)


# ---------------------------------------------------------------- links

@require_http_methods(["GET", "POST", "DELETE"])
@require_roles(*STAFF_ROLES)
@handle_bad_request
def guardian_students(request):
    org = request.org
    links = StudentGuardian.objects.filter(
        guardian__organization=org, student__organization=org, student__deleted_at__isnull=True,
    ).select_related("guardian", "student")

    if request.method == "GET":
        gid = int_param(request.GET.get("guardianId"), "guardianId", minimum=1)
        sid = int_param(request.GET.get("studentId"), "studentId", minimum=1)
        if gid:
            links = links.filter(guardian_id=gid)
        if sid:
            links = links.filter(student_id=sid)
        rows = [link_json(link) for link in links.order_by("id")]
        return JsonResponse({"links": rows, "total_links": len(rows)})

    if request.method == "DELETE":
        gid = int_param(request.GET.get("guardian_id"), "guardian_id", minimum=1)
        sid = int_param(request.GET.get("student_id"), "student_id", minimum=1)
        if not gid or not sid:
            return json_error("guardian_id and student_id are required")
        n, _ = links.filter(guardian_id=gid, student_id=sid).delete()
        if not n:
            return json_error("Link not found", status=404)
        audit_log(request.user, org, "GUARDIAN_UNLINKED", None, {"guardian_id": gid, "student_id": sid}, request)
        return JsonResponse({"success": True})

    form = LinkForm(json_body(request))
    if not form.is_valid():
        return form_error_response(form)
    cd = form.cleaned_data
    g = Guardian.objects.filter(organization=org, id=cd["guardian_id"]).first()
    s = Student.objects.live().filter(organization=org, id=cd["student_id"]).first()
    if not g or not s:
        return json_error("Guardian or student not found", status=404)
    link, created = StudentGuardian.objects.get_or_create(
        student=s, guardian=g, defaults={"relation": cd.get("relation") or "parent"},
    )
    if not created and cd.get("relation") and link.relation != cd["relation"]:
        link.relation = cd["relation"]
        link.save(update_fields=["relation", "updated_at"])
    audit_log(request.user, org, "GUARDIAN_LINKED", link, {"guardian_id": g.id, "student_id": s.id}, request)
    return JsonResponse({"link": link_json(link)}, status=201 if created else 200)


# ---------------------------------------------------------------- search

def _q(request):
    return (request.GET.get("q") or "").strip()


@require_GET
@require_roles(*STAFF_ROLES)
def search_students(request):
    q = _q(request)
    qs = Student.objects.live().filter(organization=request.org).select_related("classroom")
    if q:
        qs = qs.filter(Q(first_name__icontains=q) | Q(last_name__icontains=q)).order_by("first_name", "last_name")
    else:
        qs = qs.order_by("-created_at", "-id")
    return JsonResponse({"results": [student_json(s) for s in qs[:SEARCH_LIMIT]]})


@require_GET
@require_roles(*STAFF_ROLES)
def search_guardians(request):
    q = _q(request)
    qs = Guardian.objects.filter(organization=request.org)
    if q:
        qs = qs.filter(
            Q(first_name__icontains=q) | Q(last_name__icontains=q) | Q(email__icontains=q)
        ).order_by("first_name", "last_name")
    else:
        qs = qs.order_by("-created_at", "-id")
    return JsonResponse({"results": [guardian_json(g) for g in qs[:SEARCH_LIMIT]]})


@require_GET
@require_roles(*STAFF_ROLES)
def search_classes(request):
    q = _q(request)
    qs = Classroom.objects.live().filter(organization=request.org)
    if q:
        qs = qs.filter(Q(name__icontains=q) | Q(code__icontains=q)).order_by("name")
    else:
        qs = qs.order_by("-created_at", "-id")
    return JsonResponse({"results": [class_json(c) for c in qs[:SEARCH_LIMIT]]})


@require_GET
@require_roles(*STAFF_ROLES)
def search_teachers(request):
    q = _q(request)
    qs = OrgMembership.objects.filter(organization=request.org, role=Role.TEACHER, is_active=True).select_related("user")
    if q:
        qs = qs.filter(
            Q(user__first_name__icontains=q) | Q(user__last_name__icontains=q) | Q(user__email__icontains=q)
        ).order_by("user__first_name", "user__last_name")
    else:
        qs = qs.order_by("-created_at", "-id")
    return JsonResponse({"results": [user_json(m.user) for m in qs[:SEARCH_LIMIT]]})
