"""
directory.py
------------
Lookups the scheduling core needs from the surrounding system:

- Service lookup:  id -> duration_minutes, base_price (scoped to organization)
- Member lookup:   id -> organization, branch, role
- Member removal:  explicit cascade (StaffProfile first, then the Member)
  inside one atomic unit.

Anything outside the caller's organization is reported as NotFound, never as
Forbidden, so ids from other tenants are indistinguishable from missing ones.
"""

import logging

from django.db import transaction

from ..exceptions import NotFound
from ..models import Member, Service, StaffProfile

logger = logging.getLogger(__name__)


def get_service(service_id, organization_id) -> Service:
    service = Service.objects.filter(pk=service_id, organization_id=organization_id).first()
    if service is None:
        raise NotFound("Service not found.")
    return service


def get_member(member_id, organization_id, role=None) -> Member:
    qs = Member.objects.filter(pk=member_id, organization_id=organization_id)
    if role is not None:
        qs = qs.filter(role=role)
    member = qs.first()
    if member is None:
        label = "Artist" if role == Member.ARTIST else "Member"
        raise NotFound(f"{label} not found.")
    return member


def get_artist(artist_id, organization_id) -> Member:
    return get_member(artist_id, organization_id, role=Member.ARTIST)


def artists_for_branch(organization_id, branch_id, artist_id=None):
    qs = Member.objects.filter(
        organization_id=organization_id,
        branch_id=branch_id,
        role=Member.ARTIST,
    )
    if artist_id:
        qs = qs.filter(pk=artist_id)
    return qs.order_by("id")


def mark_clocked_in(member: Member) -> StaffProfile:
    """Set the profile flag, creating a minimal profile when none exists."""
    profile, created = StaffProfile.objects.get_or_create(member=member, defaults={"is_clocked_in": True})
    if not created and not profile.is_clocked_in:
        profile.is_clocked_in = True
        profile.save(update_fields=["is_clocked_in"])
    return profile


def mark_clocked_out(member_id) -> None:
    """Clear the profile flag if the member has a profile."""
    StaffProfile.objects.filter(member_id=member_id).update(is_clocked_in=False)


@transaction.atomic
def delete_member(member_id, organization_id) -> None:
    """
    Delete a member and the rows it exclusively owns.

    The profile is removed explicitly before the member so the cascade does
    not rely on the storage layer's ON DELETE behaviour.
    """
    member = get_member(member_id, organization_id)
    StaffProfile.objects.filter(member=member).delete()
    member.delete()
    logger.info("Deleted member %s (org %s) and its staff profile", member_id, organization_id)
