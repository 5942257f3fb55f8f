"""Club, invitation and join-request persistence."""

from __future__ import annotations

from typing import Optional, Sequence

from sqlalchemy import delete, or_, select

from bookmarkd.models.club import Club, club_members
from bookmarkd.models.club_access import (
    ClubInvitation,
    ClubJoinRequest,
    InvitationStatus,
    JoinRequestStatus,
)
from bookmarkd.repositories.base import Repository


class ClubRepository(Repository[Club]):
    model = Club

    async def list_newest(self) -> Sequence[Club]:
        result = await self.session.execute(
            select(Club).order_by(Club.created_at.desc(), Club.id.desc())
        )
        return result.scalars().all()

    async def list_for_user(self, user_id: int) -> Sequence[Club]:
        """Clubs the user owns or has joined."""
        joined = select(club_members.c.club_id).where(club_members.c.user_id == user_id)
        result = await self.session.execute(
            select(Club)
            .where(or_(Club.owner_id == user_id, Club.id.in_(joined)))
            .order_by(Club.created_at.desc(), Club.id.desc())
        )
        return result.scalars().all()


class InvitationRepository(Repository[ClubInvitation]):
    model = ClubInvitation

    async def find_pending(self, club_id: int, invitee_id: int) -> Optional[ClubInvitation]:
        result = await self.session.execute(
            select(ClubInvitation).where(
                ClubInvitation.club_id == club_id,
                ClubInvitation.invitee_id == invitee_id,
                ClubInvitation.status == InvitationStatus.PENDING,
            )
        )
        return result.scalars().first()

    async def pending_for_invitee(self, invitee_id: int) -> Sequence[ClubInvitation]:
        result = await self.session.execute(
            select(ClubInvitation)
            .where(
                ClubInvitation.invitee_id == invitee_id,
                ClubInvitation.status == InvitationStatus.PENDING,
            )
            .order_by(ClubInvitation.created_at.desc(), ClubInvitation.id.desc())
        )
        return result.scalars().all()

    async def remove_for_club(self, club_id: int) -> None:
        await self.session.execute(delete(ClubInvitation).where(ClubInvitation.club_id == club_id))


class JoinRequestRepository(Repository[ClubJoinRequest]):
    model = ClubJoinRequest

    async def find_pending(self, club_id: int, user_id: int) -> Optional[ClubJoinRequest]:
        result = await self.session.execute(
            select(ClubJoinRequest).where(
                ClubJoinRequest.club_id == club_id,
                ClubJoinRequest.user_id == user_id,
                ClubJoinRequest.status == JoinRequestStatus.PENDING,
            )
        )
        return result.scalars().first()

    async def pending_for_club(self, club_id: int) -> Sequence[ClubJoinRequest]:
        result = await self.session.execute(
            select(ClubJoinRequest)
            .where(
                ClubJoinRequest.club_id == club_id,
                ClubJoinRequest.status == JoinRequestStatus.PENDING,
            )
            .order_by(ClubJoinRequest.created_at.desc(), ClubJoinRequest.id.desc())
        )
        return result.scalars().all()

    async def list_for_user(self, user_id: int) -> Sequence[ClubJoinRequest]:
        result = await self.session.execute(
            select(ClubJoinRequest)
            .where(ClubJoinRequest.user_id == user_id)
            .order_by(ClubJoinRequest.created_at.desc(), ClubJoinRequest.id.desc())
        )
        return result.scalars().all()

    async def remove_for_club(self, club_id: int) -> None:
        await self.session.execute(delete(ClubJoinRequest).where(ClubJoinRequest.club_id == club_id))
