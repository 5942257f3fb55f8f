"""Invitation and join-request workflows for clubs.

Invitations work for any club; join requests are only accepted by non-public
clubs, since public clubs can be joined directly. Both end in a terminal
status and, when accepted/approved, admit the user through ``ClubService``.
"""

from __future__ import annotations

from typing import Optional, Sequence

import structlog

from bookmarkd.auth.context import Viewer
from bookmarkd.auth.guard import require_viewer, require_viewer_is
from bookmarkd.database import utcnow
from bookmarkd.exceptions import Forbidden, InvalidState, NotFound
from bookmarkd.models.club import ClubPrivacy
from bookmarkd.models.club_access import (
    ClubInvitation,
    ClubJoinRequest,
    InvitationStatus,
    JoinRequestStatus,
)
from bookmarkd.repositories.clubs import InvitationRepository, JoinRequestRepository
from bookmarkd.schemas.base import validate_input
from bookmarkd.schemas.club import JoinRequestCreate
from bookmarkd.services.base import Service
from bookmarkd.services.clubs import ClubService
from bookmarkd.services.membership import require_moderator, resolve_roles

logger = structlog.get_logger()


def _ensure_pending(status: InvitationStatus | JoinRequestStatus) -> None:
    if status.value != "pending":
        raise InvalidState(f"This has already been {status.value}.")


class ClubAccessService(Service):
    def __init__(self, session):
        super().__init__(session)
        self.invitations = InvitationRepository(session)
        self.requests = JoinRequestRepository(session)
        self.club_service = ClubService(session)

    # ── Invitations ──

    async def _invitation(self, invitation_id: int) -> ClubInvitation:
        invitation = await self.invitations.get_for_update(invitation_id)
        if invitation is None:
            raise NotFound.entity("Invitation", invitation_id)
        return invitation

    async def invite(self, viewer: Optional[Viewer], club_id: int, invitee_id: int) -> ClubInvitation:
        club = await self.club_service.get(club_id)
        require_moderator(club, viewer)
        await self.club_service.get_user(invitee_id)

        if resolve_roles(club, invitee_id).is_member:
            raise InvalidState("This user is already a member of the club.")

        existing = await self.invitations.find_pending(club_id, invitee_id)
        if existing is not None:
            return existing

        invitation = await self.invitations.add(
            ClubInvitation(
                club_id=club_id,
                inviter_id=viewer.id,
                invitee_id=invitee_id,
                status=InvitationStatus.PENDING,
                created_at=utcnow(),
            )
        )
        await self.commit()
        logger.info("club_invitation_created", club_id=club_id, invitee_id=invitee_id, by=viewer.id)
        return invitation

    async def accept_invitation(self, viewer: Optional[Viewer], invitation_id: int) -> ClubInvitation:
        viewer = require_viewer(viewer)
        invitation = await self._invitation(invitation_id)
        if invitation.invitee_id != viewer.id:
            raise Forbidden("Only the invited user can accept this invitation.")
        _ensure_pending(invitation.status)

        club = await self.club_service.get(invitation.club_id, for_update=True)
        await self.club_service.admit(club, await self.club_service.get_user(viewer.id))

        invitation.status = InvitationStatus.ACCEPTED
        invitation.responded_at = utcnow()
        await self.commit()
        logger.info("club_invitation_accepted", invitation_id=invitation_id, club_id=club.id)
        return invitation

    async def decline_invitation(self, viewer: Optional[Viewer], invitation_id: int) -> ClubInvitation:
        viewer = require_viewer(viewer)
        invitation = await self._invitation(invitation_id)
        if invitation.invitee_id != viewer.id:
            raise Forbidden("Only the invited user can decline this invitation.")
        _ensure_pending(invitation.status)

        invitation.status = InvitationStatus.DECLINED
        invitation.responded_at = utcnow()
        await self.commit()
        return invitation

    async def cancel_invitation(self, viewer: Optional[Viewer], invitation_id: int) -> ClubInvitation:
        viewer = require_viewer(viewer)
        invitation = await self._invitation(invitation_id)
        if invitation.inviter_id != viewer.id:
            club = await self.club_service.get(invitation.club_id)
            require_moderator(club, viewer)
        _ensure_pending(invitation.status)

        invitation.status = InvitationStatus.CANCELLED
        invitation.responded_at = utcnow()
        await self.commit()
        return invitation

    async def invitations_for(self, viewer: Optional[Viewer], user_id: int) -> Sequence[ClubInvitation]:
        require_viewer_is(viewer, user_id)
        return await self.invitations.pending_for_invitee(user_id)

    # ── Join requests ──

    async def _join_request(self, request_id: int) -> ClubJoinRequest:
        join_request = await self.requests.get_for_update(request_id)
        if join_request is None:
            raise NotFound.entity("Join request", request_id)
        return join_request

    async def request_join(
        self,
        viewer: Optional[Viewer],
        club_id: int,
        user_id: int,
        message: Optional[str] = None,
    ) -> ClubJoinRequest:
        require_viewer_is(viewer, user_id)
        data = validate_input(JoinRequestCreate, message=message)
        club = await self.club_service.get(club_id)

        if club.privacy == ClubPrivacy.PUBLIC:
            raise InvalidState("Public clubs can be joined directly.")
        if resolve_roles(club, user_id).is_member:
            raise InvalidState("You are already a member of this club.")

        existing = await self.requests.find_pending(club_id, user_id)
        if existing is not None:
            return existing

        join_request = await self.requests.add(
            ClubJoinRequest(
                club_id=club_id,
                user_id=user_id,
                status=JoinRequestStatus.PENDING,
                message=data.message,
                created_at=utcnow(),
            )
        )
        await self.commit()
        logger.info("club_join_requested", club_id=club_id, user_id=user_id)
        return join_request

    async def _review(
        self,
        viewer: Optional[Viewer],
        request_id: int,
        reviewer_id: int,
        status: JoinRequestStatus,
    ) -> ClubJoinRequest:
        require_viewer_is(viewer, reviewer_id)
        join_request = await self._join_request(request_id)
        club = await self.club_service.get(join_request.club_id, for_update=True)
        require_moderator(club, viewer)
        _ensure_pending(join_request.status)

        if status == JoinRequestStatus.APPROVED:
            await self.club_service.admit(club, await self.club_service.get_user(join_request.user_id))

        join_request.status = status
        join_request.reviewed_by_id = reviewer_id
        join_request.reviewed_at = utcnow()
        await self.commit()
        logger.info(
            "club_join_request_reviewed",
            request_id=request_id,
            club_id=club.id,
            status=status.value,
            by=reviewer_id,
        )
        return join_request

    async def approve_request(
        self, viewer: Optional[Viewer], request_id: int, reviewer_id: int
    ) -> ClubJoinRequest:
        return await self._review(viewer, request_id, reviewer_id, JoinRequestStatus.APPROVED)

    async def reject_request(
        self, viewer: Optional[Viewer], request_id: int, reviewer_id: int
    ) -> ClubJoinRequest:
        return await self._review(viewer, request_id, reviewer_id, JoinRequestStatus.REJECTED)

    async def cancel_request(self, viewer: Optional[Viewer], request_id: int) -> ClubJoinRequest:
        viewer = require_viewer(viewer)
        join_request = await self._join_request(request_id)
        if join_request.user_id != viewer.id:
            raise Forbidden("Only the requester can cancel this request.")
        _ensure_pending(join_request.status)

        join_request.status = JoinRequestStatus.CANCELLED
        join_request.reviewed_at = utcnow()
        await self.commit()
        return join_request

    async def pending_requests(self, viewer: Optional[Viewer], club_id: int) -> Sequence[ClubJoinRequest]:
        club = await self.club_service.get(club_id)
        require_moderator(club, viewer)
        return await self.requests.pending_for_club(club_id)

    async def requests_for(self, viewer: Optional[Viewer], user_id: int) -> Sequence[ClubJoinRequest]:
        require_viewer_is(viewer, user_id)
        return await self.requests.list_for_user(user_id)
