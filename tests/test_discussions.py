"""Discussion threads, replies and moderation."""

from __future__ import annotations

import datetime as dt

import pytest
import pytest_asyncio

from bookmarkd.exceptions import Forbidden, InvalidInput, InvalidState, NotFound
from bookmarkd.models.discussion import ThreadType
from bookmarkd.models.notification import NotificationType
from bookmarkd.services.club_lifecycle import ClubLifecycleService
from bookmarkd.services.clubs import ClubService
from bookmarkd.services.discussions import DiscussionService
from bookmarkd.services.notifications import NotificationService


def _naive(value):
    return value.replace(tzinfo=None)


LONG_AGO = dt.datetime(2020, 1, 1, tzinfo=dt.timezone.utc)


async def _backdate(session, thread):
    thread.updated_at = LONG_AGO
    await session.commit()


@pytest_asyncio.fixture
async def club(session, alice, bob, viewer):
    service = ClubService(session)
    club = await service.create_club(viewer(alice), alice.id, "Sci-Fi")
    await service.add_member(viewer(bob), club.id, bob.id)
    return await ClubLifecycleService(session).assign_book(viewer(alice), club.id, "abc123")


@pytest_asyncio.fixture
async def thread(session, alice, viewer, club):
    return await DiscussionService(session).create_thread(
        viewer(alice), club.id, "Chapter 1", "Thoughts on the opening?", thread_type="general"
    )


class TestCreateThread:
    @pytest.mark.asyncio
    async def test_thread_bound_to_current_book(self, session, club, thread):
        assert thread.book_google_id == "abc123"
        assert thread.book_id == club.current_book_id
        assert thread.thread_type == ThreadType.GENERAL
        assert thread.reply_count == 0
        assert thread.replies == []
        assert not thread.is_pinned and not thread.is_locked

        listed = await DiscussionService(session).list_threads(club.id)
        assert [(t.title, t.reply_count) for t in listed] == [("Chapter 1", 0)]

    @pytest.mark.asyncio
    async def test_requires_current_book(self, session, alice, viewer):
        club = await ClubService(session).create_club(viewer(alice), alice.id, "Idle")
        with pytest.raises(InvalidState):
            await DiscussionService(session).create_thread(viewer(alice), club.id, "Hi", "Anyone?")

    @pytest.mark.asyncio
    async def test_rejects_other_book(self, session, alice, viewer, club):
        with pytest.raises(InvalidState):
            await DiscussionService(session).create_thread(
                viewer(alice), club.id, "Hi", "Anyone?", book_google_id="other"
            )

    @pytest.mark.asyncio
    async def test_non_member_forbidden(self, session, carol, viewer, club):
        with pytest.raises(Forbidden):
            await DiscussionService(session).create_thread(viewer(carol), club.id, "Hi", "Anyone?")

    @pytest.mark.asyncio
    async def test_rejects_unknown_type(self, session, alice, viewer, club):
        with pytest.raises(InvalidInput):
            await DiscussionService(session).create_thread(
                viewer(alice), club.id, "Hi", "Anyone?", thread_type="rant"
            )

    @pytest.mark.asyncio
    async def test_members_notified(self, session, bob, viewer, thread):
        inbox = await NotificationService(session).list_for_user(viewer(bob), bob.id)
        kinds = [n.type for n in inbox]
        assert NotificationType.THREAD_CREATED in kinds
        created = next(n for n in inbox if n.type == NotificationType.THREAD_CREATED)
        assert created.discussion_thread_id == thread.id


class TestListing:
    @pytest.mark.asyncio
    async def test_pinned_threads_first(self, session, alice, viewer, club, thread):
        discussions = DiscussionService(session)
        newer = await discussions.create_thread(viewer(alice), club.id, "Chapter 2", "More")
        await discussions.pin(viewer(alice), thread.id)

        listed = await discussions.list_threads(club.id)
        assert [t.id for t in listed] == [thread.id, newer.id]

    @pytest.mark.asyncio
    async def test_defaults_to_current_book(self, session, alice, viewer, club, thread):
        await ClubLifecycleService(session).assign_book(viewer(alice), club.id, "xyz789")
        discussions = DiscussionService(session)
        newer = await discussions.create_thread(viewer(alice), club.id, "Opening", "Go")

        assert [t.id for t in await discussions.list_threads(club.id)] == [newer.id]
        older = await discussions.list_threads(club.id, book_google_id="abc123")
        assert [t.id for t in older] == [thread.id]

    @pytest.mark.asyncio
    async def test_unknown_thread(self, session):
        with pytest.raises(NotFound):
            await DiscussionService(session).get(404)


class TestReplies:
    @pytest.mark.asyncio
    async def test_reply_updates_count_and_notifies_author(self, session, alice, bob, viewer, thread):
        updated = await DiscussionService(session).add_reply(viewer(bob), thread.id, bob.id, "Loved it")

        assert updated.reply_count == 1
        assert len(updated.replies) == 1
        assert updated.replies[0]["user_id"] == bob.id
        assert updated.replies[0]["text"] == "Loved it"

        inbox = await NotificationService(session).list_for_user(viewer(alice), alice.id)
        assert [n.type for n in inbox] == [NotificationType.THREAD_REPLY]

    @pytest.mark.asyncio
    async def test_locked_thread_rejects_replies(self, session, alice, bob, viewer, thread):
        discussions = DiscussionService(session)
        await discussions.add_reply(viewer(bob), thread.id, bob.id, "First")
        await discussions.lock(viewer(alice), thread.id)

        with pytest.raises(InvalidState):
            await discussions.add_reply(viewer(bob), thread.id, bob.id, "Second")
        refreshed = await discussions.get(thread.id, for_update=True)
        assert refreshed.reply_count == 1

    @pytest.mark.asyncio
    async def test_cannot_reply_as_someone_else(self, session, alice, bob, viewer, thread):
        with pytest.raises(Forbidden):
            await DiscussionService(session).add_reply(viewer(bob), thread.id, alice.id, "Hi")

    @pytest.mark.asyncio
    async def test_non_member_cannot_reply(self, session, carol, viewer, thread):
        with pytest.raises(Forbidden):
            await DiscussionService(session).add_reply(viewer(carol), thread.id, carol.id, "Hi")

    @pytest.mark.asyncio
    async def test_blank_reply_rejected(self, session, bob, viewer, thread):
        with pytest.raises(InvalidInput):
            await DiscussionService(session).add_reply(viewer(bob), thread.id, bob.id, "   ")

    @pytest.mark.asyncio
    async def test_delete_reply(self, session, bob, viewer, thread):
        discussions = DiscussionService(session)
        await discussions.add_reply(viewer(bob), thread.id, bob.id, "One")
        updated = await discussions.add_reply(viewer(bob), thread.id, bob.id, "Two")
        first_id = updated.replies[0]["id"]

        updated = await discussions.delete_reply(viewer(bob), thread.id, first_id)
        assert updated.reply_count == 1
        assert [r["text"] for r in updated.replies] == ["Two"]

    @pytest.mark.asyncio
    async def test_delete_missing_reply(self, session, alice, viewer, thread):
        with pytest.raises(NotFound):
            await DiscussionService(session).delete_reply(viewer(alice), thread.id, "nope")

    @pytest.mark.asyncio
    async def test_thread_author_deletes_any_reply(self, session, alice, bob, viewer, thread):
        discussions = DiscussionService(session)
        updated = await discussions.add_reply(viewer(bob), thread.id, bob.id, "Spoilers!")
        updated = await discussions.delete_reply(viewer(alice), thread.id, updated.replies[0]["id"])
        assert updated.reply_count == 0

    @pytest.mark.asyncio
    async def test_other_member_cannot_delete_reply(self, session, alice, bob, carol, viewer, club, thread):
        await ClubService(session).add_member(viewer(carol), club.id, carol.id)
        discussions = DiscussionService(session)
        updated = await discussions.add_reply(viewer(bob), thread.id, bob.id, "Mine")
        with pytest.raises(Forbidden):
            await discussions.delete_reply(viewer(carol), thread.id, updated.replies[0]["id"])


class TestModeration:
    @pytest.mark.asyncio
    async def test_pin_is_idempotent(self, session, alice, viewer, thread):
        discussions = DiscussionService(session)
        pinned = await discussions.pin(viewer(alice), thread.id)
        assert pinned.is_pinned
        stamp = _naive(pinned.updated_at)

        again = await discussions.pin(viewer(alice), thread.id)
        assert again.is_pinned
        assert _naive(again.updated_at) == stamp

    @pytest.mark.asyncio
    async def test_unlock_reopens_replies(self, session, alice, bob, viewer, thread):
        discussions = DiscussionService(session)
        await discussions.lock(viewer(alice), thread.id)
        unlocked = await discussions.unlock(viewer(alice), thread.id)
        assert not unlocked.is_locked
        updated = await discussions.add_reply(viewer(bob), thread.id, bob.id, "Back again")
        assert updated.reply_count == 1

    @pytest.mark.asyncio
    async def test_members_cannot_moderate(self, session, bob, viewer, thread):
        with pytest.raises(Forbidden):
            await DiscussionService(session).pin(viewer(bob), thread.id)

    @pytest.mark.asyncio
    async def test_author_deletes_thread(self, session, alice, viewer, thread):
        discussions = DiscussionService(session)
        await discussions.delete_thread(viewer(alice), thread.id)
        with pytest.raises(NotFound):
            await discussions.get(thread.id)

    @pytest.mark.asyncio
    async def test_plain_member_cannot_delete_thread(self, session, bob, viewer, thread):
        with pytest.raises(Forbidden):
            await DiscussionService(session).delete_thread(viewer(bob), thread.id)

    @pytest.mark.asyncio
    async def test_deleting_thread_clears_its_notifications(self, session, alice, bob, viewer, thread):
        await DiscussionService(session).delete_thread(viewer(alice), thread.id)
        inbox = await NotificationService(session).list_for_user(viewer(bob), bob.id)
        assert all(n.discussion_thread_id != thread.id for n in inbox)


class TestUpdatedAt:
    @pytest.mark.asyncio
    async def test_reply_add_advances(self, session, bob, viewer, thread):
        await _backdate(session, thread)
        updated = await DiscussionService(session).add_reply(viewer(bob), thread.id, bob.id, "Hi")
        assert _naive(updated.updated_at) > _naive(LONG_AGO)

    @pytest.mark.asyncio
    async def test_reply_delete_advances(self, session, bob, viewer, thread):
        discussions = DiscussionService(session)
        updated = await discussions.add_reply(viewer(bob), thread.id, bob.id, "Hi")
        reply_id = updated.replies[0]["id"]
        await _backdate(session, updated)

        updated = await discussions.delete_reply(viewer(bob), thread.id, reply_id)
        assert _naive(updated.updated_at) > _naive(LONG_AGO)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "first, second",
        [(None, "pin"), ("pin", "unpin"), (None, "lock"), ("lock", "unlock")],
    )
    async def test_moderation_change_advances(self, session, alice, viewer, thread, first, second):
        discussions = DiscussionService(session)
        if first is not None:
            await getattr(discussions, first)(viewer(alice), thread.id)
        await _backdate(session, thread)

        updated = await getattr(discussions, second)(viewer(alice), thread.id)
        assert _naive(updated.updated_at) > _naive(LONG_AGO)

    @pytest.mark.asyncio
    async def test_repeated_lock_keeps_timestamp(self, session, alice, viewer, thread):
        discussions = DiscussionService(session)
        await discussions.lock(viewer(alice), thread.id)
        await _backdate(session, thread)

        updated = await discussions.lock(viewer(alice), thread.id)
        assert updated.is_locked
        assert _naive(updated.updated_at) == _naive(LONG_AGO)
