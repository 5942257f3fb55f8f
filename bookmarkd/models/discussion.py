"""Discussion thread ORM model with embedded replies."""

from __future__ import annotations

import enum
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, Boolean, DateTime, Enum, ForeignKey, Index, Integer, String, Text
from sqlalchemy.ext.mutable import MutableList
from sqlalchemy.orm import Mapped, mapped_column

from bookmarkd.database import Base, utcnow


class ThreadType(str, enum.Enum):
    GENERAL = "general"
    CHAPTER = "chapter"
    SPOILER_FREE = "spoiler-free"
    SPOILER = "spoiler"
    QA = "qa"
    BOOK_SELECTION = "book-selection"


class DiscussionThread(Base):
    __tablename__ = "discussion_threads"
    __table_args__ = (Index("ix_threads_club_book_created", "club_id", "book_id", "created_at"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    club_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("clubs.id", ondelete="CASCADE"), nullable=False
    )
    book_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("books.id", ondelete="CASCADE"), nullable=False
    )
    book_google_id: Mapped[str] = mapped_column(String(64), nullable=False)
    author_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    thread_type: Mapped[ThreadType] = mapped_column(
        Enum(ThreadType, values_callable=lambda e: [x.value for x in e]),
        default=ThreadType.GENERAL,
        nullable=False,
    )
    chapter_range: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    is_pinned: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_locked: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    # ThreadReply entries: {"id", "user_id", "text", "created_at"}
    replies: Mapped[list[dict[str, Any]]] = mapped_column(
        MutableList.as_mutable(JSON), default=list, nullable=False
    )
    # Must equal len(replies); only touched by the reply mutators.
    reply_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    def __repr__(self) -> str:
        return f"<DiscussionThread id={self.id} club={self.club_id} title={self.title!r}>"
