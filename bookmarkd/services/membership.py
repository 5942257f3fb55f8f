"""Per-viewer role resolution for clubs.

Roles are derived from the club snapshot on every read and never stored. The
owner is implicitly a member and a moderator, so for any snapshot
``is_owner ⇒ is_moderator ⇒ is_member`` holds.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from bookmarkd.auth.context import Viewer
from bookmarkd.auth.guard import require_viewer
from bookmarkd.exceptions import Forbidden
from bookmarkd.models.club import Club, ClubPrivacy


@dataclass(frozen=True)
class ClubRoles:
    is_owner: bool = False
    is_moderator: bool = False
    is_member: bool = False

    @property
    def can_moderate(self) -> bool:
        return self.is_owner or self.is_moderator


def member_count(club: Club) -> int:
    members = club.member_ids
    members.discard(club.owner_id)
    return len(members) + (1 if club.owner_id is not None else 0)


def resolve_roles(club: Club, viewer_id: Optional[int]) -> ClubRoles:
    if viewer_id is None:
        return ClubRoles()
    is_owner = club.owner_id == viewer_id
    is_moderator = is_owner or viewer_id in club.moderator_ids
    return ClubRoles(
        is_owner=is_owner,
        is_moderator=is_moderator,
        is_member=is_moderator or viewer_id in club.member_ids,
    )


def can_join(club: Club, viewer_id: Optional[int]) -> bool:
    if viewer_id is None:
        return False
    roles = resolve_roles(club, viewer_id)
    if roles.is_owner or roles.is_member:
        return False
    return club.privacy != ClubPrivacy.INVITE_ONLY


def is_full(club: Club) -> bool:
    return club.member_limit is not None and member_count(club) >= club.member_limit


def require_member(club: Club, viewer: Optional[Viewer]) -> ClubRoles:
    viewer = require_viewer(viewer)
    roles = resolve_roles(club, viewer.id)
    if not roles.is_member:
        raise Forbidden("You must be a member of this club.")
    return roles


def require_moderator(club: Club, viewer: Optional[Viewer]) -> ClubRoles:
    """Owner or moderator."""
    viewer = require_viewer(viewer)
    roles = resolve_roles(club, viewer.id)
    if not roles.can_moderate:
        raise Forbidden("Only the club owner or a moderator can do this.")
    return roles


def require_owner(club: Club, viewer: Optional[Viewer]) -> ClubRoles:
    viewer = require_viewer(viewer)
    roles = resolve_roles(club, viewer.id)
    if not roles.is_owner:
        raise Forbidden("Only the club owner can do this.")
    return roles
