import logging

from django.db import transaction
from django.db.models import Count
from django.http import JsonResponse
from django.utils import timezone
from django.views.decorators.http import require_http_methods

from accounts.decorators import require_roles
from accounts.models import Role
from audit.utils import audit_log
from roster.models import Classroom
from roster.services import taught_class_ids
from samvera.api import (
    bind_form, bool_param, form_error_response, handle_bad_request, int_param, json_body, json_error,
)
from . import services
from .forms import StoryForm
from .models import Story
from .playback import timeline
from .serializers import item_json, story_json

log = logging.getLogger(__name__)

ALL_ROLES = (Role.PRINCIPAL, Role.TEACHER, Role.GUARDIAN)


def _item_error(e: services.ItemError):
    return json_error(str(e), status=400, **({"details": e.details} if e.details else {}))


def _load(request, story_id):
    """Return (story, error_response)."""
    story = (Story.objects.select_related("classroom", "author")
             .filter(id=story_id, deleted_at__isnull=True).first())
    if not story:
        return None, json_error("Story not found", status=404)
    if story.organization_id != request.org.id:
        return None, json_error("Forbidden", status=403)
    if story.expires_at <= timezone.now() and story.author_id != request.user.id:
        return None, json_error("Story not found", status=404)
    if not services.can_view(story, request.user, request.membership):
        return None, json_error("Forbidden", status=403)
    return story, None


@require_http_methods(["GET", "POST"])
@require_roles(*ALL_ROLES)
@handle_bad_request
def stories(request):
    if request.method == "GET":
        qs = services.visible_stories(
            request.user, request.membership, include_deleted=bool_param(request.GET.get("includeDeleted"))
        )
        class_id = int_param(request.GET.get("classId"), "classId", minimum=1)
        if class_id:
            qs = qs.filter(classroom_id=class_id)
        if bool_param(request.GET.get("onlyPublic")):
            qs = qs.filter(is_public=True)
        qs = qs.select_related("classroom", "author").annotate(item_count=Count("items"))
        rows = []
        for s in qs.order_by("-created_at", "-id"):
            row = story_json(s)
            row["item_count"] = s.item_count
            rows.append(row)
        return JsonResponse({"stories": rows, "total_stories": len(rows)})

    if request.membership.role not in (Role.PRINCIPAL, Role.TEACHER):
        return json_error("Insufficient role.", status=403)
    payload = json_body(request)
    form = StoryForm(payload)
    if not form.is_valid():
        return form_error_response(form)

    classroom = None
    class_id = int_param(payload.get("class_id"), "class_id", minimum=1)
    if class_id:
        classroom = Classroom.objects.live().filter(organization=request.org, id=class_id).first()
        if not classroom:
            return json_error("Class not found", status=404)
        if request.membership.role == Role.TEACHER and class_id not in taught_class_ids(request.user, request.org):
            return json_error("You can only post stories to classes you teach.", status=403)

    try:
        items = services.clean_items(payload.get("items"))
        story, created = services.create_story(request.membership, request.user, classroom, form, items)
    except services.ItemError as e:
        return _item_error(e)
    audit_log(request.user, request.org, "STORY_CREATED", story, {"items": len(created)}, request)
    return JsonResponse({"story": story_json(story), "items": [item_json(i) for i in created]}, status=201)


@require_http_methods(["GET", "PUT", "DELETE"])
@require_roles(*ALL_ROLES)
@handle_bad_request
def story_detail(request, story_id):
    story, err = _load(request, story_id)
    if err:
        return err

    if request.method == "GET":
        items = list(story.items.order_by("order_index"))
        return JsonResponse({
            "story": story_json(story),
            "items": [item_json(i) for i in items],
            "timeline": timeline(items),
        })

    if story.author_id != request.user.id:
        return json_error("Only the author can change this story.", status=403)

    if request.method == "DELETE":
        story.deleted_at = timezone.now()
        story.save(update_fields=["deleted_at", "updated_at"])
        audit_log(request.user, request.org, "STORY_DELETED", story, {}, request)
        return JsonResponse({"success": True})

    payload = json_body(request)
    form = bind_form(StoryForm, payload, instance=story)
    if not form.is_valid():
        return form_error_response(form)
    story = form.save()
    audit_log(request.user, request.org, "STORY_UPDATED", story, {"fields": sorted(form.changed_data)}, request)
    return JsonResponse({"story": story_json(story)})


@require_http_methods(["GET", "POST", "DELETE"])
@require_roles(*ALL_ROLES)
@handle_bad_request
def story_items(request, story_id):
    story, err = _load(request, story_id)
    if err:
        return err

    if request.method == "GET":
        items = list(story.items.order_by("order_index"))
        return JsonResponse({"items": [item_json(i) for i in items], "timeline": timeline(items)})

    if story.author_id != request.user.id:
        return json_error("Only the author can change this story.", status=403)

    if request.method == "DELETE":
        n, _ = story.items.all().delete()
        audit_log(request.user, request.org, "STORY_ITEMS_CLEARED", story, {"deleted": n}, request)
        return JsonResponse({"success": True, "deleted": n})

    payload = json_body(request)
    try:
        with transaction.atomic():
            items = services.clean_items(payload.get("items"), start_index=services.next_order_index(story))
            if not items:
                return json_error("At least one item with a url or caption is required")
            created = services.add_items(story, items)
    except services.ItemError as e:
        return _item_error(e)
    audit_log(request.user, request.org, "STORY_ITEMS_ADDED", story, {"items": len(created)}, request)
    return JsonResponse({"items": [item_json(i) for i in created]}, status=201)
