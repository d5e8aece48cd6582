from django.db.models import Q

from roster.services import audience_class_ids
from .models import Announcement


def visible_announcements(user, membership):
    """Org-wide announcements plus those of the classes in the member's audience."""
    qs = Announcement.objects.filter(organization=membership.organization, deleted_at__isnull=True)
    class_ids = audience_class_ids(user, membership)
    if class_ids is not None:
        qs = qs.filter(Q(classroom__isnull=True) | Q(classroom_id__in=class_ids))
    return qs
