"""Story audience, creation and item normalization."""

from __future__ import annotations

import logging

from django.db import transaction
from django.db.models import Max, Q

from accounts.models import OrgMembership, Role, User
from notifications.services import notify_audience
from roster.models import Classroom
from roster.services import audience_class_ids
from .forms import StoryItemForm
from .models import Story, StoryItem
from .playback import DEFAULT_DURATION_MS

log = logging.getLogger(__name__)


class ItemError(Exception):
    def __init__(self, message, details=None):
        super().__init__(message)
        self.details = details or {}


def visible_stories(user: User, membership: OrgMembership, include_deleted=False):
    """
    Unexpired stories the member may see. The audience comes from the
    member's role and roster, never from the request.
    """
    qs = Story.objects.unexpired().filter(organization=membership.organization)
    if membership.role == Role.PRINCIPAL:
        qs = qs.filter(author=user)
    else:
        class_ids = audience_class_ids(user, membership)
        qs = qs.filter(Q(classroom__isnull=True) | Q(classroom_id__in=class_ids))

    if include_deleted and membership.role in (Role.PRINCIPAL, Role.TEACHER):
        # authors may see their own deleted stories
        qs = qs.filter(Q(deleted_at__isnull=True) | Q(author=user))
    else:
        qs = qs.live()
    return qs


def can_view(story: Story, user: User, membership: OrgMembership) -> bool:
    if membership.role == Role.PRINCIPAL or story.author_id == user.id:
        return True
    if story.classroom_id is None:
        return True
    return story.classroom_id in audience_class_ids(user, membership)


def clean_items(raw_items, start_index=0) -> list[dict]:
    """
    Validate and normalize raw item payloads. Items with neither url nor
    caption are dropped; a missing order_index is the item's position and a
    missing duration is the viewer default.
    """
    if raw_items in (None, ""):
        return []
    if not isinstance(raw_items, list):
        raise ItemError("items must be a list")
    out = []
    for pos, raw in enumerate(raw_items):
        if not isinstance(raw, dict):
            raise ItemError("Each item must be an object")
        form = StoryItemForm(raw)
        if not form.is_valid():
            details = {f"items[{pos}].{k}": [str(e) for e in v] for k, v in form.errors.items()}
            raise ItemError("Validation failed", details)
        cd = form.cleaned_data
        if not cd["url"] and not cd["caption"]:
            log.info("dropping empty story item at position %s", pos)
            continue
        out.append({
            "url": cd["url"],
            "caption": cd["caption"],
            "mime_type": cd["mime_type"],
            "order_index": cd["order_index"] if cd["order_index"] is not None else start_index + pos,
            "duration_ms": cd["duration_ms"] if cd["duration_ms"] is not None else DEFAULT_DURATION_MS,
        })
    seen = [i["order_index"] for i in out]
    if len(seen) != len(set(seen)):
        raise ItemError("Duplicate order_index in items")
    return out


def add_items(story: Story, items: list[dict]) -> list[StoryItem]:
    taken = set(story.items.filter(order_index__in=[i["order_index"] for i in items])
                .values_list("order_index", flat=True))
    if taken:
        raise ItemError("order_index already used in this story", {"order_index": sorted(taken)})
    return [StoryItem.objects.create(story=story, **i) for i in items]


def next_order_index(story: Story) -> int:
    top = story.items.aggregate(m=Max("order_index"))["m"]
    return 0 if top is None else top + 1


@transaction.atomic
def create_story(membership: OrgMembership, author: User, classroom: Classroom | None,
                 form, items: list[dict]) -> tuple[Story, list[StoryItem]]:
    story = form.save(commit=False)
    story.organization = membership.organization
    story.classroom = classroom
    story.author = author
    story.save()
    created = add_items(story, items)
    notify_audience(
        membership.organization, classroom, author, "story",
        context={"title": story.title or ""},
        data={"story_id": story.id, "class_id": story.classroom_id},
    )
    return story, created
