"""Plain dict renderers for the accounts models (JsonResponse handles dates/decimals)."""


def user_json(u):
    return {
        "id": u.id,
        "email": u.email,
        "first_name": u.first_name,
        "last_name": u.last_name,
        "full_name": u.full_name,
        "phone": u.phone,
        "language": u.language,
        "theme": u.theme,
        "is_active": u.is_active,
        "last_login": u.last_login,
        "date_joined": u.date_joined,
    }


def org_json(org):
    return {
        "id": org.id,
        "name": org.name,
        "slug": org.slug,
        "email": org.email,
        "phone": org.phone,
        "website": org.website,
        "address": org.address,
        "city": org.city,
        "state": org.state,
        "postal_code": org.postal_code,
        "timezone": org.timezone,
        "total_area": org.total_area,
        "play_area": org.play_area,
        "square_meters_per_student": org.square_meters_per_student,
        "maximum_allowed_students": org.maximum_allowed_students,
        "is_active": org.is_active,
        "created_by": org.created_by_id,
        "updated_by": org.updated_by_id,
        "created_at": org.created_at,
        "updated_at": org.updated_at,
    }


def membership_json(m):
    return {
        "id": m.id,
        "org_id": m.organization_id,
        "org_name": m.organization.name,
        "role": m.role,
        "is_active": m.is_active,
    }
