"""Club creation, settings, membership and moderator management."""

from __future__ import annotations

from typing import Optional, Sequence

import structlog

from bookmarkd.auth.context import Viewer
from bookmarkd.auth.guard import require_viewer, require_viewer_is
from bookmarkd.database import utcnow
from bookmarkd.exceptions import Forbidden, InvalidState, NotFound
from bookmarkd.models.club import Club
from bookmarkd.models.user import User
from bookmarkd.repositories.clubs import ClubRepository, InvitationRepository, JoinRequestRepository
from bookmarkd.repositories.discussions import ThreadRepository
from bookmarkd.repositories.notifications import NotificationRepository
from bookmarkd.repositories.users import UserRepository
from bookmarkd.schemas.base import validate_input
from bookmarkd.schemas.club import ClubCreate, ClubUpdate
from bookmarkd.services.base import Service
from bookmarkd.services.membership import (
    can_join,
    is_full,
    require_moderator,
    require_owner,
    resolve_roles,
)

logger = structlog.get_logger()


class ClubService(Service):
    def __init__(self, session):
        super().__init__(session)
        self.clubs = ClubRepository(session)
        self.users = UserRepository(session)

    async def get(self, club_id: int, *, for_update: bool = False) -> Club:
        if for_update:
            club = await self.clubs.get_for_update(club_id)
        else:
            club = await self.clubs.get(club_id)
        if club is None:
            raise NotFound.entity("Club", club_id)
        return club

    async def list_clubs(self) -> Sequence[Club]:
        return await self.clubs.list_newest()

    async def get_user(self, user_id: int) -> User:
        user = await self.users.get(user_id)
        if user is None:
            raise NotFound.entity("User", user_id)
        return user

    async def create_club(
        self,
        viewer: Optional[Viewer],
        owner_id: int,
        name: str,
        description: Optional[str] = None,
        privacy: Optional[str] = None,
        member_limit: Optional[int] = None,
    ) -> Club:
        require_viewer_is(viewer, owner_id)
        fields = {"name": name, "description": description or "", "member_limit": member_limit}
        if privacy is not None:
            fields["privacy"] = privacy
        data = validate_input(ClubCreate, **fields)
        await self.get_user(owner_id)

        club = await self.clubs.add(
            Club(
                name=data.name,
                description=data.description,
                owner_id=owner_id,
                privacy=data.privacy,
                member_limit=data.member_limit,
                reading_checkpoints=[],
                members=[],
                moderators=[],
                created_at=utcnow(),
            )
        )
        await self.commit()
        logger.info("club_created", club_id=club.id, owner_id=owner_id, privacy=club.privacy.value)
        return club

    async def update_club(
        self,
        viewer: Optional[Viewer],
        club_id: int,
        *,
        name: Optional[str] = None,
        description: Optional[str] = None,
        privacy: Optional[str] = None,
        member_limit: Optional[int] = None,
    ) -> Club:
        data = validate_input(
            ClubUpdate,
            name=name,
            description=description,
            privacy=privacy,
            member_limit=member_limit,
        )
        club = await self.get(club_id)
        require_moderator(club, viewer)

        changes = data.model_dump(exclude_none=True)
        for field, value in changes.items():
            setattr(club, field, value)
        await self.commit()
        logger.info("club_updated", club_id=club_id, fields=sorted(changes))
        return club

    async def delete_club(self, viewer: Optional[Viewer], club_id: int) -> Club:
        """Owner only. Drops memberships and everything scoped to the club."""
        club = await self.get(club_id)
        require_owner(club, viewer)

        club.members.clear()
        club.moderators.clear()
        await NotificationRepository(self.session).remove_for_club(club.id)
        await ThreadRepository(self.session).remove_for_club(club.id)
        await InvitationRepository(self.session).remove_for_club(club.id)
        await JoinRequestRepository(self.session).remove_for_club(club.id)
        await self.clubs.delete(club)
        await self.commit()
        logger.info("club_deleted", club_id=club_id)
        return club

    # ── Membership ──

    async def admit(self, club: Club, user: User) -> bool:
        """Add ``user`` to the member set. Returns False when already a member."""
        if resolve_roles(club, user.id).is_member:
            return False
        if is_full(club):
            raise InvalidState("This club has reached its member limit.")
        club.members.append(user)
        await self.session.flush()
        return True

    async def add_member(self, viewer: Optional[Viewer], club_id: int, user_id: int) -> Club:
        """Self-join when allowed, or an owner/moderator adding someone directly."""
        viewer = require_viewer(viewer)
        club = await self.get(club_id, for_update=True)
        user = await self.get_user(user_id)

        if viewer.id == user_id:
            if resolve_roles(club, user_id).is_member:
                return club
            if not can_join(club, user_id):
                raise Forbidden("This club is invite-only.")
        else:
            require_moderator(club, viewer)

        if await self.admit(club, user):
            await self.commit()
            logger.info("club_member_added", club_id=club_id, user_id=user_id, by=viewer.id)
        return club

    async def remove_member(self, viewer: Optional[Viewer], club_id: int, user_id: int) -> Club:
        viewer = require_viewer(viewer)
        club = await self.get(club_id, for_update=True)

        if user_id == club.owner_id:
            raise InvalidState("The club owner cannot be removed.")

        if viewer.id != user_id:
            actor = require_moderator(club, viewer)
            if not actor.is_owner and user_id in club.moderator_ids:
                raise Forbidden("Only the club owner can remove a moderator.")

        changed = False
        for collection in (club.moderators, club.members):
            for user in [u for u in collection if u.id == user_id]:
                collection.remove(user)
                changed = True

        if changed:
            await self.commit()
            logger.info("club_member_removed", club_id=club_id, user_id=user_id, by=viewer.id)
        return club

    # ── Moderators ──

    async def add_moderator(self, viewer: Optional[Viewer], club_id: int, user_id: int) -> Club:
        club = await self.get(club_id, for_update=True)
        require_owner(club, viewer)

        if user_id == club.owner_id:
            raise InvalidState("The club owner already has moderator powers.")
        if user_id not in club.member_ids:
            raise InvalidState("Only club members can become moderators.")
        if user_id in club.moderator_ids:
            return club

        club.moderators.append(await self.get_user(user_id))
        await self.commit()
        logger.info("club_moderator_added", club_id=club_id, user_id=user_id)
        return club

    async def remove_moderator(self, viewer: Optional[Viewer], club_id: int, user_id: int) -> Club:
        club = await self.get(club_id, for_update=True)
        require_owner(club, viewer)

        removed = [u for u in club.moderators if u.id == user_id]
        for user in removed:
            club.moderators.remove(user)
        if removed:
            await self.commit()
            logger.info("club_moderator_removed", club_id=club_id, user_id=user_id)
        return club
