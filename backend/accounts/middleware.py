from samvera.api import json_error
from .models import OrgMembership


class CurrentOrganizationMiddleware:
    """
    Sets request.org and request.membership for authenticated users.

    Selection order:
      1) X-Organization-Id header (numeric id), must be one of the user's orgs
      2) ?org=<id> query param (for quick testing), same rule
      3) Session-pinned org (login / switch-org / invitation accept)
      4) If the user has exactly one active membership, use it
      5) Otherwise, no org attached (views can enforce via @require_roles)

    An explicit org the user does not belong to is a 403, even when a session
    org is pinned.

    A user with several roles in one org gets the highest one
    (principal > teacher > guardian) unless X-Active-Role picks another.
    """
    ROLE_RANK = {"PRINCIPAL": 0, "TEACHER": 1, "GUARDIAN": 2}

    def __init__(self, get_response):
        self.get_response = get_response

    def _pick(self, memberships, wanted_role=None):
        memberships = list(memberships)
        if not memberships:
            return None
        if wanted_role:
            for m in memberships:
                if m.role == wanted_role:
                    return m
        return sorted(memberships, key=lambda m: self.ROLE_RANK.get(m.role, 99))[0]

    def _for_org(self, qs, org_id, wanted_role):
        try:
            return self._pick(qs.filter(organization_id=int(org_id)), wanted_role)
        except (TypeError, ValueError):
            return None

    def __call__(self, request):
        request.org = None
        request.membership = None

        u = getattr(request, "user", None)
        if u and u.is_authenticated:
            qs = OrgMembership.objects.select_related("organization").filter(
                user=u, is_active=True, organization__is_active=True
            )
            wanted_role = (request.headers.get("X-Active-Role") or "").upper() or None

            mem = None
            org_id = request.headers.get("X-Organization-Id") or request.GET.get("org")
            if org_id:
                mem = self._for_org(qs, org_id, wanted_role)
                if not mem:
                    return json_error("Invalid organization for this user.", status=403)
            else:
                sess_org_id = request.session.get("current_org_id")
                if sess_org_id:
                    mem = self._for_org(qs, sess_org_id, wanted_role)
                    if not mem:
                        # Remove invalid session org
                        request.session.pop("current_org_id", None)
                if not mem and len({m.organization_id for m in qs}) == 1:
                    mem = self._pick(qs, wanted_role)

            if mem:
                request.org = mem.organization
                request.membership = mem
        return self.get_response(request)
