from functools import wraps

from samvera.api import json_error


def require_roles(*roles, allow_superuser=False):
    """
    Usage:
    @require_roles(Role.PRINCIPAL, Role.TEACHER, allow_superuser=True)
    def view(request): ...

    @require_roles(allow_superuser=True)   # Admin only
    """
    def decorator(view_func):
        @wraps(view_func)
        def _wrapped(request, *args, **kwargs):
            u = request.user
            if not u.is_authenticated:
                return json_error("Auth required.", status=401)
            if allow_superuser and u.is_superuser:
                return view_func(request, *args, **kwargs)
            if not roles:
                return json_error("Admin access required.", status=403)
            mem = getattr(request, "membership", None)
            if not mem:
                return json_error("Organization not found for user", status=400)
            if mem.role in roles:
                return view_func(request, *args, **kwargs)
            return json_error("Insufficient role.", status=403)
        return _wrapped
    return decorator


def require_login(view_func):
    @wraps(view_func)
    def _wrapped(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return json_error("Auth required.", status=401)
        return view_func(request, *args, **kwargs)
    return _wrapped
