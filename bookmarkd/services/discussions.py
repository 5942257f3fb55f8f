"""Club discussion threads: creation, replies and moderation.

A thread is bound to the club's current book when created and keeps that
binding after later rotations. ``reply_count`` is only ever changed together
with ``replies`` by the reply mutators below. ``updated_at`` moves on every
state change of a thread; idempotent re-applications leave it untouched.
"""

from __future__ import annotations

import uuid
from typing import Optional, Sequence

import structlog

from bookmarkd.auth.context import Viewer
from bookmarkd.auth.guard import require_viewer, require_viewer_is
from bookmarkd.database import utcnow
from bookmarkd.exceptions import Forbidden, InvalidState, NotFound
from bookmarkd.models.club import Club
from bookmarkd.models.discussion import DiscussionThread
from bookmarkd.models.notification import NotificationType
from bookmarkd.repositories.discussions import ThreadRepository
from bookmarkd.repositories.notifications import NotificationRepository
from bookmarkd.schemas.base import validate_input
from bookmarkd.schemas.club import ReplyCreate, ThreadCreate
from bookmarkd.services.base import Service
from bookmarkd.services.clubs import ClubService
from bookmarkd.services.membership import require_member, require_moderator, resolve_roles
from bookmarkd.services.notifications import NotificationService

logger = structlog.get_logger()


class DiscussionService(Service):
    def __init__(self, session):
        super().__init__(session)
        self.threads = ThreadRepository(session)
        self.club_service = ClubService(session)
        self.notifications = NotificationService(session)

    async def get(self, thread_id: int, *, for_update: bool = False) -> DiscussionThread:
        if for_update:
            thread = await self.threads.get_for_update(thread_id)
        else:
            thread = await self.threads.get(thread_id)
        if thread is None:
            raise NotFound.entity("Discussion thread", thread_id)
        return thread

    async def list_threads(
        self, club_id: int, book_google_id: Optional[str] = None
    ) -> Sequence[DiscussionThread]:
        """Threads for the requested book, else the current book, else the whole club."""
        club = await self.club_service.get(club_id)
        return await self.threads_for_club(club, book_google_id)

    async def threads_for_club(
        self, club: Club, book_google_id: Optional[str] = None
    ) -> Sequence[DiscussionThread]:
        if book_google_id:
            return await self.threads.list_for_club(club.id, book_google_id=book_google_id)
        if club.current_book_id is not None:
            return await self.threads.list_for_club(club.id, book_id=club.current_book_id)
        return await self.threads.list_for_club(club.id)

    async def create_thread(
        self,
        viewer: Optional[Viewer],
        club_id: int,
        title: str,
        content: str,
        thread_type: Optional[str] = None,
        chapter_range: Optional[str] = None,
        book_google_id: Optional[str] = None,
    ) -> DiscussionThread:
        fields = {"title": title, "content": content, "chapter_range": chapter_range}
        if thread_type is not None:
            fields["thread_type"] = thread_type
        data = validate_input(ThreadCreate, **fields)

        club = await self.club_service.get(club_id)
        require_member(club, viewer)
        if club.current_book_id is None:
            raise InvalidState("This club has no current book to discuss.")
        if book_google_id and book_google_id != club.current_book_google_id:
            raise InvalidState("Threads can only be started on the club's current book.")

        now = utcnow()
        thread = await self.threads.add(
            DiscussionThread(
                club_id=club.id,
                book_id=club.current_book_id,
                book_google_id=club.current_book_google_id,
                author_id=viewer.id,
                title=data.title,
                content=data.content,
                thread_type=data.thread_type,
                chapter_range=data.chapter_range,
                is_pinned=False,
                is_locked=False,
                replies=[],
                reply_count=0,
                created_at=now,
                updated_at=now,
            )
        )
        await self.notifications.notify_club(
            club,
            actor_id=viewer.id,
            type=NotificationType.THREAD_CREATED,
            book_id=club.current_book_id,
            thread_id=thread.id,
        )
        await self.commit()
        logger.info("thread_created", thread_id=thread.id, club_id=club.id, author_id=viewer.id)
        return thread

    async def delete_thread(self, viewer: Optional[Viewer], thread_id: int) -> DiscussionThread:
        viewer = require_viewer(viewer)
        thread = await self.get(thread_id)
        if thread.author_id != viewer.id:
            club = await self.club_service.get(thread.club_id)
            if not resolve_roles(club, viewer.id).can_moderate:
                raise Forbidden("Only the author or a club moderator can delete this thread.")

        await NotificationRepository(self.session).remove_for_thread(thread.id)
        await self.threads.delete(thread)
        await self.commit()
        logger.info("thread_deleted", thread_id=thread_id, by=viewer.id)
        return thread

    # ── Replies ──

    async def add_reply(
        self, viewer: Optional[Viewer], thread_id: int, user_id: int, text: str
    ) -> DiscussionThread:
        require_viewer_is(viewer, user_id)
        data = validate_input(ReplyCreate, text=(text or "").strip())
        thread = await self.get(thread_id, for_update=True)
        club = await self.club_service.get(thread.club_id)
        require_member(club, viewer)
        if thread.is_locked:
            raise InvalidState("This thread is locked.")

        now = utcnow()
        thread.replies.append(
            {
                "id": uuid.uuid4().hex,
                "user_id": viewer.id,
                "text": data.text,
                "created_at": now.isoformat(),
            }
        )
        thread.reply_count = len(thread.replies)
        thread.updated_at = now

        await self.notifications.notify(
            recipient_id=thread.author_id,
            actor_id=viewer.id,
            type=NotificationType.THREAD_REPLY,
            club_id=club.id,
            book_id=thread.book_id,
            thread_id=thread.id,
        )
        await self.commit()
        logger.info("thread_reply_added", thread_id=thread_id, user_id=viewer.id)
        return thread

    async def delete_reply(
        self, viewer: Optional[Viewer], thread_id: int, reply_id: str
    ) -> DiscussionThread:
        """Reply author, thread author, club owner or moderator."""
        viewer = require_viewer(viewer)
        thread = await self.get(thread_id, for_update=True)

        index = next(
            (i for i, reply in enumerate(thread.replies) if reply.get("id") == reply_id), None
        )
        if index is None:
            raise NotFound("Reply not found", {"id": reply_id})

        reply = thread.replies[index]
        if viewer.id not in (reply.get("user_id"), thread.author_id):
            club = await self.club_service.get(thread.club_id)
            if not resolve_roles(club, viewer.id).can_moderate:
                raise Forbidden("You cannot delete this reply.")

        del thread.replies[index]
        thread.reply_count = max(0, min(thread.reply_count - 1, len(thread.replies)))
        thread.updated_at = utcnow()
        await self.commit()
        logger.info("thread_reply_deleted", thread_id=thread_id, reply_id=reply_id, by=viewer.id)
        return thread

    # ── Moderation ──

    async def _moderate(
        self, viewer: Optional[Viewer], thread_id: int, field: str, value: bool
    ) -> DiscussionThread:
        thread = await self.get(thread_id, for_update=True)
        club = await self.club_service.get(thread.club_id)
        require_moderator(club, viewer)

        if getattr(thread, field) == value:
            return thread
        setattr(thread, field, value)
        thread.updated_at = utcnow()
        await self.commit()
        logger.info(
            "thread_moderated", thread_id=thread_id, field=field, value=value, by=viewer.id
        )
        return thread

    async def pin(self, viewer: Optional[Viewer], thread_id: int) -> DiscussionThread:
        return await self._moderate(viewer, thread_id, "is_pinned", True)

    async def unpin(self, viewer: Optional[Viewer], thread_id: int) -> DiscussionThread:
        return await self._moderate(viewer, thread_id, "is_pinned", False)

    async def lock(self, viewer: Optional[Viewer], thread_id: int) -> DiscussionThread:
        return await self._moderate(viewer, thread_id, "is_locked", True)

    async def unlock(self, viewer: Optional[Viewer], thread_id: int) -> DiscussionThread:
        return await self._moderate(viewer, thread_id, "is_locked", False)
