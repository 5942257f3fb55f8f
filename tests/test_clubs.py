"""Club creation, settings, membership and moderator management."""

from __future__ import annotations

import pytest
import pytest_asyncio

from bookmarkd.exceptions import Forbidden, InvalidInput, InvalidState, NotFound, Unauthenticated
from bookmarkd.models.club import ClubPrivacy
from bookmarkd.services.clubs import ClubService
from bookmarkd.services.membership import member_count, resolve_roles
from bookmarkd.services.users import UserService


@pytest_asyncio.fixture
async def club(session, alice, viewer):
    return await ClubService(session).create_club(viewer(alice), alice.id, "Sci-Fi", "Space operas")


class TestCreateClub:
    @pytest.mark.asyncio
    async def test_creator_becomes_owner(self, session, alice, viewer, club):
        assert club.owner_id == alice.id
        assert club.privacy == ClubPrivacy.PUBLIC
        assert member_count(club) == 1
        assert resolve_roles(club, alice.id).is_owner

    @pytest.mark.asyncio
    async def test_owner_must_be_viewer(self, session, alice, bob, viewer):
        with pytest.raises(Forbidden):
            await ClubService(session).create_club(viewer(bob), alice.id, "Mine")
        with pytest.raises(Unauthenticated):
            await ClubService(session).create_club(None, alice.id, "Mine")

    @pytest.mark.asyncio
    async def test_rejects_unknown_privacy(self, session, alice, viewer):
        with pytest.raises(InvalidInput):
            await ClubService(session).create_club(viewer(alice), alice.id, "X", privacy="secret")

    @pytest.mark.asyncio
    async def test_listed_among_owner_clubs(self, session, alice, club):
        clubs = await UserService(session).clubs_for(alice.id)
        assert [c.id for c in clubs] == [club.id]


class TestMembership:
    @pytest.mark.asyncio
    async def test_join_scenario(self, session, alice, bob, viewer, club):
        updated = await ClubService(session).add_member(viewer(bob), club.id, bob.id)

        assert member_count(updated) == 2
        roles = resolve_roles(updated, bob.id)
        assert roles.is_member
        assert not roles.is_owner

    @pytest.mark.asyncio
    async def test_joining_twice_is_noop(self, session, bob, viewer, club):
        service = ClubService(session)
        await service.add_member(viewer(bob), club.id, bob.id)
        updated = await service.add_member(viewer(bob), club.id, bob.id)
        assert member_count(updated) == 2

    @pytest.mark.asyncio
    async def test_private_club_allows_direct_join(self, session, alice, bob, viewer):
        service = ClubService(session)
        club = await service.create_club(viewer(alice), alice.id, "Quiet", privacy="private")
        updated = await service.add_member(viewer(bob), club.id, bob.id)
        assert bob.id in updated.member_ids

    @pytest.mark.asyncio
    async def test_invite_only_blocks_self_join(self, session, alice, bob, viewer):
        service = ClubService(session)
        club = await service.create_club(viewer(alice), alice.id, "Closed", privacy="invite-only")
        with pytest.raises(Forbidden):
            await service.add_member(viewer(bob), club.id, bob.id)

    @pytest.mark.asyncio
    async def test_owner_can_add_anyone(self, session, alice, bob, viewer):
        service = ClubService(session)
        club = await service.create_club(viewer(alice), alice.id, "Closed", privacy="invite-only")
        updated = await service.add_member(viewer(alice), club.id, bob.id)
        assert bob.id in updated.member_ids

    @pytest.mark.asyncio
    async def test_member_cannot_add_others(self, session, bob, carol, viewer, club):
        service = ClubService(session)
        await service.add_member(viewer(bob), club.id, bob.id)
        with pytest.raises(Forbidden):
            await service.add_member(viewer(bob), club.id, carol.id)

    @pytest.mark.asyncio
    async def test_member_limit_enforced(self, session, alice, bob, carol, viewer):
        service = ClubService(session)
        club = await service.create_club(viewer(alice), alice.id, "Tiny", member_limit=2)
        await service.add_member(viewer(bob), club.id, bob.id)
        with pytest.raises(InvalidState):
            await service.add_member(viewer(carol), club.id, carol.id)

    @pytest.mark.asyncio
    async def test_member_can_leave(self, session, bob, viewer, club):
        service = ClubService(session)
        await service.add_member(viewer(bob), club.id, bob.id)
        updated = await service.remove_member(viewer(bob), club.id, bob.id)
        assert bob.id not in updated.member_ids
        assert member_count(updated) == 1

    @pytest.mark.asyncio
    async def test_owner_cannot_be_removed(self, session, alice, viewer, club):
        with pytest.raises(InvalidState):
            await ClubService(session).remove_member(viewer(alice), club.id, alice.id)

    @pytest.mark.asyncio
    async def test_unknown_club(self, session, bob, viewer):
        with pytest.raises(NotFound):
            await ClubService(session).add_member(viewer(bob), 999, bob.id)


class TestModerators:
    @pytest_asyncio.fixture
    async def staffed(self, session, alice, bob, carol, viewer, club):
        service = ClubService(session)
        await service.add_member(viewer(bob), club.id, bob.id)
        await service.add_member(viewer(carol), club.id, carol.id)
        return await service.add_moderator(viewer(alice), club.id, bob.id)

    @pytest.mark.asyncio
    async def test_promoted_member_moderates(self, staffed, bob, carol):
        assert resolve_roles(staffed, bob.id).is_moderator
        assert not resolve_roles(staffed, carol.id).is_moderator

    @pytest.mark.asyncio
    async def test_only_owner_promotes(self, session, bob, carol, viewer, staffed):
        with pytest.raises(Forbidden):
            await ClubService(session).add_moderator(viewer(bob), staffed.id, carol.id)

    @pytest.mark.asyncio
    async def test_non_member_cannot_be_promoted(self, session, alice, viewer, make_user, club):
        dave = await make_user("dave")
        with pytest.raises(InvalidState):
            await ClubService(session).add_moderator(viewer(alice), club.id, dave.id)

    @pytest.mark.asyncio
    async def test_moderator_updates_settings(self, session, bob, viewer, staffed):
        updated = await ClubService(session).update_club(
            viewer(bob), staffed.id, name="Hard Sci-Fi", member_limit=20
        )
        assert updated.name == "Hard Sci-Fi"
        assert updated.member_limit == 20

    @pytest.mark.asyncio
    async def test_plain_member_cannot_update(self, session, carol, viewer, staffed):
        with pytest.raises(Forbidden):
            await ClubService(session).update_club(viewer(carol), staffed.id, name="Mine now")

    @pytest.mark.asyncio
    async def test_moderator_removes_member(self, session, bob, carol, viewer, staffed):
        updated = await ClubService(session).remove_member(viewer(bob), staffed.id, carol.id)
        assert carol.id not in updated.member_ids

    @pytest.mark.asyncio
    async def test_moderator_cannot_remove_moderator(self, session, alice, bob, carol, viewer, staffed):
        service = ClubService(session)
        await service.add_moderator(viewer(alice), staffed.id, carol.id)
        with pytest.raises(Forbidden):
            await service.remove_member(viewer(bob), staffed.id, carol.id)

    @pytest.mark.asyncio
    async def test_removing_member_drops_moderator_role(self, session, alice, bob, viewer, staffed):
        updated = await ClubService(session).remove_member(viewer(alice), staffed.id, bob.id)
        assert bob.id not in updated.member_ids
        assert bob.id not in updated.moderator_ids

    @pytest.mark.asyncio
    async def test_demote(self, session, alice, bob, viewer, staffed):
        updated = await ClubService(session).remove_moderator(viewer(alice), staffed.id, bob.id)
        roles = resolve_roles(updated, bob.id)
        assert roles.is_member and not roles.is_moderator


class TestDeleteClub:
    @pytest.mark.asyncio
    async def test_only_owner_deletes(self, session, alice, bob, viewer, club):
        service = ClubService(session)
        await service.add_member(viewer(bob), club.id, bob.id)
        with pytest.raises(Forbidden):
            await service.delete_club(viewer(bob), club.id)

        await service.delete_club(viewer(alice), club.id)
        with pytest.raises(NotFound):
            await service.get(club.id)
        assert await UserService(session).clubs_for(bob.id) == []
