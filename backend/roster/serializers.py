from .models import StudentGuardian


def class_json(c, teachers=None, student_count=None):
    out = {
        "id": c.id,
        "org_id": c.organization_id,
        "name": c.name,
        "code": c.code,
        "created_by": c.created_by_id,
        "created_at": c.created_at,
        "updated_at": c.updated_at,
    }
    if teachers is not None:
        out["assigned_teachers"] = teachers
    if student_count is not None:
        out["student_count"] = student_count
    return out


def teacher_ref(cm):
    u = cm.user
    return {
        "id": u.id,
        "email": u.email,
        "first_name": u.first_name,
        "last_name": u.last_name,
        "membership_role": cm.membership_role,
    }


def guardian_json(g):
    return {
        "id": g.id,
        "org_id": g.organization_id,
        "user_id": g.user_id,
        "first_name": g.first_name,
        "last_name": g.last_name,
        "full_name": g.full_name,
        "email": g.email,
        "phone": g.phone,
        "ssn": g.ssn,
        "address": g.address,
        "is_active": g.is_active,
        "created_at": g.created_at,
    }


def student_json(s, guardians=None):
    out = {
        "id": s.id,
        "org_id": s.organization_id,
        "class_id": s.classroom_id,
        "class_name": s.classroom.name if s.classroom_id else None,
        "first_name": s.first_name,
        "last_name": s.last_name,
        "full_name": s.full_name,
        "dob": s.dob,
        "gender": s.gender,
        "start_date": s.start_date,
        "barngildi": s.barngildi,
        "student_language": s.student_language,
        "medical_notes": s.medical_notes,
        "allergies": s.allergies,
        "emergency_contact": s.emergency_contact,
        "address": s.address,
        "social_security_number": s.social_security_number,
        "created_at": s.created_at,
        "updated_at": s.updated_at,
    }
    if guardians is not None:
        out["guardians"] = guardians
    return out


def students_with_guardians(students):
    """student_json rows, each carrying its guardians (one query for all links)."""
    students = list(students)
    gmap = {}
    links = StudentGuardian.objects.filter(student_id__in=[s.id for s in students]).select_related("guardian")
    for link in links:
        gmap.setdefault(link.student_id, []).append(dict(guardian_json(link.guardian), relation=link.relation))
    return [student_json(s, guardians=gmap.get(s.id, [])) for s in students]


def link_json(link):
    return {
        "id": link.id,
        "guardian_id": link.guardian_id,
        "student_id": link.student_id,
        "relation": link.relation,
        "guardian": {"id": link.guardian_id, "full_name": link.guardian.full_name, "email": link.guardian.email},
        "student": {"id": link.student_id, "full_name": link.student.full_name},
    }
