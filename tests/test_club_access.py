"""Club invitations and join requests."""

from __future__ import annotations

import pytest
import pytest_asyncio

from bookmarkd.exceptions import Forbidden, InvalidState, NotFound
from bookmarkd.models.club_access import InvitationStatus, JoinRequestStatus
from bookmarkd.services.club_access import ClubAccessService
from bookmarkd.services.clubs import ClubService


@pytest_asyncio.fixture
async def closed(session, alice, viewer):
    return await ClubService(session).create_club(
        viewer(alice), alice.id, "Closed", privacy="invite-only"
    )


@pytest_asyncio.fixture
async def private(session, alice, viewer):
    return await ClubService(session).create_club(viewer(alice), alice.id, "Quiet", privacy="private")


class TestInvitations:
    @pytest.mark.asyncio
    async def test_accept_admits_invitee(self, session, alice, bob, viewer, closed):
        access = ClubAccessService(session)
        invitation = await access.invite(viewer(alice), closed.id, bob.id)
        assert [i.id for i in await access.invitations_for(viewer(bob), bob.id)] == [invitation.id]

        accepted = await access.accept_invitation(viewer(bob), invitation.id)
        assert accepted.status == InvitationStatus.ACCEPTED
        club = await ClubService(session).get(closed.id)
        assert bob.id in club.member_ids
        assert await access.invitations_for(viewer(bob), bob.id) == []

    @pytest.mark.asyncio
    async def test_repeat_invite_returns_pending(self, session, alice, bob, viewer, closed):
        access = ClubAccessService(session)
        first = await access.invite(viewer(alice), closed.id, bob.id)
        second = await access.invite(viewer(alice), closed.id, bob.id)
        assert first.id == second.id

    @pytest.mark.asyncio
    async def test_only_moderators_invite(self, session, bob, carol, viewer, closed):
        with pytest.raises(Forbidden):
            await ClubAccessService(session).invite(viewer(bob), closed.id, carol.id)

    @pytest.mark.asyncio
    async def test_cannot_invite_member(self, session, alice, viewer, closed):
        with pytest.raises(InvalidState):
            await ClubAccessService(session).invite(viewer(alice), closed.id, alice.id)

    @pytest.mark.asyncio
    async def test_only_invitee_responds(self, session, alice, bob, carol, viewer, closed):
        access = ClubAccessService(session)
        invitation = await access.invite(viewer(alice), closed.id, bob.id)
        with pytest.raises(Forbidden):
            await access.accept_invitation(viewer(carol), invitation.id)
        with pytest.raises(Forbidden):
            await access.decline_invitation(viewer(carol), invitation.id)

    @pytest.mark.asyncio
    async def test_declined_is_terminal(self, session, alice, bob, viewer, closed):
        access = ClubAccessService(session)
        invitation = await access.invite(viewer(alice), closed.id, bob.id)
        declined = await access.decline_invitation(viewer(bob), invitation.id)
        assert declined.status == InvitationStatus.DECLINED
        with pytest.raises(InvalidState):
            await access.accept_invitation(viewer(bob), invitation.id)

    @pytest.mark.asyncio
    async def test_inviter_cancels(self, session, alice, bob, viewer, closed):
        access = ClubAccessService(session)
        invitation = await access.invite(viewer(alice), closed.id, bob.id)
        cancelled = await access.cancel_invitation(viewer(alice), invitation.id)
        assert cancelled.status == InvitationStatus.CANCELLED

    @pytest.mark.asyncio
    async def test_accept_respects_member_limit(self, session, alice, bob, viewer):
        club = await ClubService(session).create_club(
            viewer(alice), alice.id, "Solo", privacy="invite-only", member_limit=1
        )
        access = ClubAccessService(session)
        invitation = await access.invite(viewer(alice), club.id, bob.id)
        with pytest.raises(InvalidState):
            await access.accept_invitation(viewer(bob), invitation.id)

    @pytest.mark.asyncio
    async def test_unknown_invitation(self, session, bob, viewer):
        with pytest.raises(NotFound):
            await ClubAccessService(session).accept_invitation(viewer(bob), 999)


class TestJoinRequests:
    @pytest.mark.asyncio
    async def test_approve_admits_requester(self, session, alice, bob, viewer, private):
        access = ClubAccessService(session)
        request = await access.request_join(viewer(bob), private.id, bob.id, "Let me in")
        assert request.message == "Let me in"
        pending = await access.pending_requests(viewer(alice), private.id)
        assert [r.id for r in pending] == [request.id]

        approved = await access.approve_request(viewer(alice), request.id, alice.id)
        assert approved.status == JoinRequestStatus.APPROVED
        assert approved.reviewed_by_id == alice.id
        club = await ClubService(session).get(private.id)
        assert bob.id in club.member_ids
        assert await access.pending_requests(viewer(alice), private.id) == []

    @pytest.mark.asyncio
    async def test_public_clubs_refuse_requests(self, session, alice, bob, viewer):
        club = await ClubService(session).create_club(viewer(alice), alice.id, "Open")
        with pytest.raises(InvalidState):
            await ClubAccessService(session).request_join(viewer(bob), club.id, bob.id)

    @pytest.mark.asyncio
    async def test_repeat_request_returns_pending(self, session, bob, viewer, private):
        access = ClubAccessService(session)
        first = await access.request_join(viewer(bob), private.id, bob.id)
        second = await access.request_join(viewer(bob), private.id, bob.id)
        assert first.id == second.id

    @pytest.mark.asyncio
    async def test_reject(self, session, alice, bob, viewer, private):
        access = ClubAccessService(session)
        request = await access.request_join(viewer(bob), private.id, bob.id)
        rejected = await access.reject_request(viewer(alice), request.id, alice.id)
        assert rejected.status == JoinRequestStatus.REJECTED
        club = await ClubService(session).get(private.id)
        assert bob.id not in club.member_ids
        with pytest.raises(InvalidState):
            await access.approve_request(viewer(alice), request.id, alice.id)

    @pytest.mark.asyncio
    async def test_requester_cannot_approve_self(self, session, bob, viewer, private):
        access = ClubAccessService(session)
        request = await access.request_join(viewer(bob), private.id, bob.id)
        with pytest.raises(Forbidden):
            await access.approve_request(viewer(bob), request.id, bob.id)

    @pytest.mark.asyncio
    async def test_reviewer_must_be_viewer(self, session, alice, bob, viewer, private):
        access = ClubAccessService(session)
        request = await access.request_join(viewer(bob), private.id, bob.id)
        with pytest.raises(Forbidden):
            await access.approve_request(viewer(bob), request.id, alice.id)

    @pytest.mark.asyncio
    async def test_requester_cancels(self, session, alice, bob, viewer, private):
        access = ClubAccessService(session)
        request = await access.request_join(viewer(bob), private.id, bob.id)
        with pytest.raises(Forbidden):
            await access.cancel_request(viewer(alice), request.id)
        cancelled = await access.cancel_request(viewer(bob), request.id)
        assert cancelled.status == JoinRequestStatus.CANCELLED
        assert [r.status for r in await access.requests_for(viewer(bob), bob.id)] == [
            JoinRequestStatus.CANCELLED
        ]

    @pytest.mark.asyncio
    async def test_members_cannot_view_queue(self, session, bob, viewer, private):
        with pytest.raises(Forbidden):
            await ClubAccessService(session).pending_requests(viewer(bob), private.id)
