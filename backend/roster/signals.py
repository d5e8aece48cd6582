"""Roster signals.

A guardian's login stays tied to its Guardian row: removing or deactivating
the row deactivates the GUARDIAN membership in that organization.
"""

from __future__ import annotations

from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from accounts.models import OrgMembership, Role
from .models import Guardian


def _set_guardian_membership(guardian: Guardian, active: bool):
    if not guardian.user_id:
        return
    OrgMembership.objects.filter(
        user_id=guardian.user_id, organization_id=guardian.organization_id, role=Role.GUARDIAN
    ).update(is_active=active)


@receiver(post_save, sender=Guardian)
def sync_guardian_membership(sender, instance: Guardian, created: bool, **kwargs):
    if kwargs.get("raw") or created:
        return
    _set_guardian_membership(instance, instance.is_active)


@receiver(post_delete, sender=Guardian)
def deactivate_guardian_membership(sender, instance: Guardian, **kwargs):
    _set_guardian_membership(instance, False)
