from django.http import JsonResponse
from django.views.decorators.http import require_GET

from accounts.decorators import require_roles
from accounts.models import Organization, Role
from accounts.serializers import org_json
from . import services


@require_GET
@require_roles(allow_superuser=True)
def admin_dashboard(request):
    newest = Organization.objects.order_by("-created_at", "-id")[:5]
    return JsonResponse({**services.admin_totals(), "recent_orgs": [org_json(o) for o in newest]})


@require_GET
@require_roles(Role.PRINCIPAL)
def principal_dashboard_metrics(request):
    return JsonResponse(services.principal_metrics(request.org))


@require_GET
@require_roles(Role.TEACHER)
def teacher_dashboard_metrics(request):
    return JsonResponse(services.teacher_metrics(request.user, request.membership))


@require_GET
@require_roles(Role.GUARDIAN)
def guardian_dashboard_metrics(request):
    return JsonResponse(services.guardian_metrics(request.user, request.membership))
