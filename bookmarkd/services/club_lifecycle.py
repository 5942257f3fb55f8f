"""Current/next book rotation and reading checkpoints for a club.

A club is either Unassigned (no current book) or Active. Assigning a book is
valid from both states and always starts a fresh schedule: checkpoints and any
queued next book are discarded. Rotation promotes the queued next book, or
returns the club to Unassigned when nothing is queued.
"""

from __future__ import annotations

import datetime as dt
from typing import Any, Optional

import structlog

from bookmarkd.auth.context import Viewer
from bookmarkd.database import utcnow
from bookmarkd.exceptions import Forbidden, InvalidState, NotFound
from bookmarkd.models.club import Club
from bookmarkd.models.notification import NotificationType
from bookmarkd.schemas.base import validate_input
from bookmarkd.schemas.club import CheckpointCreate, CheckpointUpdate
from bookmarkd.services.base import Service
from bookmarkd.services.books import BookService
from bookmarkd.services.clubs import ClubService
from bookmarkd.services.membership import require_member, require_moderator
from bookmarkd.services.notifications import NotificationService

logger = structlog.get_logger()


def _checkpoint_record(
    title: str, date: dt.date, chapters: Optional[str], completed: bool = False
) -> dict[str, Any]:
    return {
        "title": title,
        "date": date.isoformat(),
        "chapters": chapters,
        "completed": completed,
    }


class ClubLifecycleService(Service):
    def __init__(self, session):
        super().__init__(session)
        self.club_service = ClubService(session)
        self.books = BookService(session)
        self.notifications = NotificationService(session)

    async def assign_book(
        self,
        viewer: Optional[Viewer],
        club_id: int,
        book_google_id: str,
        start_date: Optional[dt.datetime] = None,
    ) -> Club:
        club = await self.club_service.get(club_id, for_update=True)
        require_moderator(club, viewer)
        book = await self.books.find_or_create(book_google_id)

        club.current_book_id = book.id
        club.current_book_google_id = book.google_id
        club.current_book_start_date = start_date or utcnow()
        club.next_book_id = None
        club.next_book_google_id = None
        club.reading_checkpoints.clear()

        await self.notifications.notify_club(
            club, actor_id=viewer.id, type=NotificationType.BOOK_ASSIGNED, book_id=book.id
        )
        await self.commit()
        logger.info("book_assigned", club_id=club_id, google_id=book.google_id, by=viewer.id)
        return club

    async def set_next_book(
        self, viewer: Optional[Viewer], club_id: int, book_google_id: str
    ) -> Club:
        club = await self.club_service.get(club_id, for_update=True)
        require_moderator(club, viewer)
        book = await self.books.find_or_create(book_google_id)

        club.next_book_id = book.id
        club.next_book_google_id = book.google_id
        await self.commit()
        logger.info("next_book_set", club_id=club_id, google_id=book.google_id)
        return club

    async def rotate_book(self, viewer: Optional[Viewer], club_id: int) -> Club:
        club = await self.club_service.get(club_id, for_update=True)
        require_moderator(club, viewer)
        if club.current_book_id is None:
            raise InvalidState("This club has no current book to rotate.")

        previous = club.current_book_google_id
        if club.next_book_id is not None:
            club.current_book_id = club.next_book_id
            club.current_book_google_id = club.next_book_google_id
            club.current_book_start_date = utcnow()
        else:
            club.current_book_id = None
            club.current_book_google_id = None
            club.current_book_start_date = None
        club.next_book_id = None
        club.next_book_google_id = None
        club.reading_checkpoints.clear()

        await self.notifications.notify_club(
            club,
            actor_id=viewer.id,
            type=NotificationType.BOOK_ROTATED,
            book_id=club.current_book_id,
        )
        await self.commit()
        logger.info(
            "book_rotated",
            club_id=club_id,
            previous=previous,
            current=club.current_book_google_id,
        )
        return club

    async def add_checkpoint(
        self,
        viewer: Optional[Viewer],
        club_id: int,
        title: str,
        date: dt.date,
        chapters: Optional[str] = None,
    ) -> Club:
        data = validate_input(CheckpointCreate, title=title, date=date, chapters=chapters)
        club = await self.club_service.get(club_id, for_update=True)
        require_moderator(club, viewer)

        club.reading_checkpoints.append(_checkpoint_record(data.title, data.date, data.chapters))
        await self.notifications.notify_club(
            club,
            actor_id=viewer.id,
            type=NotificationType.CHECKPOINT_ADDED,
            book_id=club.current_book_id,
        )
        await self.commit()
        logger.info("checkpoint_added", club_id=club_id, index=len(club.reading_checkpoints) - 1)
        return club

    async def update_checkpoint(
        self,
        viewer: Optional[Viewer],
        club_id: int,
        index: int,
        *,
        title: Optional[str] = None,
        date: Optional[dt.date] = None,
        chapters: Optional[str] = None,
        completed: Optional[bool] = None,
    ) -> Club:
        """Owners and moderators may edit anything; plain members may only toggle ``completed``."""
        data = validate_input(
            CheckpointUpdate, title=title, date=date, chapters=chapters, completed=completed
        )
        changes = data.model_dump(exclude_none=True)

        club = await self.club_service.get(club_id, for_update=True)
        roles = require_member(club, viewer)
        if not roles.can_moderate and set(changes) - {"completed"}:
            raise Forbidden("Members can only mark checkpoints as completed.")

        if not 0 <= index < len(club.reading_checkpoints):
            raise NotFound("Checkpoint not found", {"index": index})

        if "date" in changes:
            changes["date"] = changes["date"].isoformat()
        club.reading_checkpoints[index] = {**club.reading_checkpoints[index], **changes}
        await self.commit()
        logger.info("checkpoint_updated", club_id=club_id, index=index, fields=sorted(changes))
        return club
