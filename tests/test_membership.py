"""Role resolution over in-memory club snapshots."""

from __future__ import annotations

import itertools

import pytest

from bookmarkd.auth.context import Viewer
from bookmarkd.exceptions import Forbidden, Unauthenticated
from bookmarkd.models.club import Club, ClubPrivacy
from bookmarkd.models.user import User
from bookmarkd.services.membership import (
    can_join,
    is_full,
    member_count,
    require_member,
    require_moderator,
    require_owner,
    resolve_roles,
)

OWNER, MOD, MEMBER, STRANGER = 1, 2, 3, 4


def _user(user_id: int) -> User:
    return User(id=user_id, username=f"u{user_id}", email=f"u{user_id}@readers.org", books=[])


def _club(privacy=ClubPrivacy.PUBLIC, member_limit=None, members=(MOD, MEMBER), moderators=(MOD,)) -> Club:
    return Club(
        id=10,
        name="Sci-Fi",
        owner_id=OWNER,
        privacy=privacy,
        member_limit=member_limit,
        members=[_user(i) for i in members],
        moderators=[_user(i) for i in moderators],
        reading_checkpoints=[],
    )


def _viewer(user_id: int) -> Viewer:
    return Viewer(id=user_id, username=f"u{user_id}", email=f"u{user_id}@readers.org")


class TestResolveRoles:
    def test_owner_has_every_role(self):
        roles = resolve_roles(_club(), OWNER)
        assert roles.is_owner and roles.is_moderator and roles.is_member

    def test_moderator(self):
        roles = resolve_roles(_club(), MOD)
        assert not roles.is_owner and roles.is_moderator and roles.is_member

    def test_plain_member(self):
        roles = resolve_roles(_club(), MEMBER)
        assert roles.is_member and not roles.is_moderator and not roles.is_owner

    def test_stranger_and_anonymous(self):
        assert resolve_roles(_club(), STRANGER) == resolve_roles(_club(), None)
        assert not resolve_roles(_club(), None).is_member

    def test_role_implication_chain_holds_for_every_snapshot(self):
        people = [MOD, MEMBER, STRANGER]
        for members_size in range(len(people) + 1):
            for members in itertools.combinations(people, members_size):
                for mods_size in range(len(people) + 1):
                    for moderators in itertools.combinations(people, mods_size):
                        club = _club(members=members, moderators=moderators)
                        for viewer_id in (OWNER, MOD, MEMBER, STRANGER, None):
                            roles = resolve_roles(club, viewer_id)
                            assert not roles.is_owner or roles.is_moderator
                            assert not roles.is_moderator or roles.is_member

    def test_moderator_missing_from_members_is_member(self):
        roles = resolve_roles(_club(members=(MEMBER,), moderators=(MOD,)), MOD)
        assert roles.is_moderator
        assert roles.is_member
        assert roles.can_moderate


class TestCounts:
    def test_owner_counts_once(self):
        assert member_count(_club(members=())) == 1
        assert member_count(_club(members=(MOD, MEMBER))) == 3

    def test_owner_listed_as_member_is_not_double_counted(self):
        assert member_count(_club(members=(OWNER, MEMBER), moderators=())) == 2

    def test_is_full(self):
        assert not is_full(_club(member_limit=None))
        assert is_full(_club(member_limit=3))
        assert not is_full(_club(member_limit=4))


class TestCanJoin:
    def test_stranger_can_join_public_and_private(self):
        assert can_join(_club(privacy=ClubPrivacy.PUBLIC), STRANGER)
        assert can_join(_club(privacy=ClubPrivacy.PRIVATE), STRANGER)

    def test_invite_only_blocks_join(self):
        assert not can_join(_club(privacy=ClubPrivacy.INVITE_ONLY), STRANGER)

    def test_members_owner_and_anonymous_cannot_join(self):
        club = _club()
        assert not can_join(club, OWNER)
        assert not can_join(club, MEMBER)
        assert not can_join(club, None)


class TestRoleChecks:
    def test_require_member(self):
        assert require_member(_club(), _viewer(MEMBER)).is_member
        with pytest.raises(Forbidden):
            require_member(_club(), _viewer(STRANGER))
        with pytest.raises(Unauthenticated):
            require_member(_club(), None)

    def test_require_moderator(self):
        assert require_moderator(_club(), _viewer(OWNER)).is_owner
        assert require_moderator(_club(), _viewer(MOD)).is_moderator
        with pytest.raises(Forbidden):
            require_moderator(_club(), _viewer(MEMBER))

    def test_require_owner(self):
        require_owner(_club(), _viewer(OWNER))
        with pytest.raises(Forbidden):
            require_owner(_club(), _viewer(MOD))
