"""Club ORM model with member/moderator sets and embedded reading checkpoints."""

from __future__ import annotations

import enum
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
)
from sqlalchemy.ext.mutable import MutableList
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bookmarkd.database import Base, utcnow
from bookmarkd.models.user import User


class ClubPrivacy(str, enum.Enum):
    PUBLIC = "public"
    PRIVATE = "private"
    INVITE_ONLY = "invite-only"


club_members = Table(
    "club_members",
    Base.metadata,
    Column("club_id", ForeignKey("clubs.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)

club_moderators = Table(
    "club_moderators",
    Base.metadata,
    Column("club_id", ForeignKey("clubs.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class Club(Base):
    __tablename__ = "clubs"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    owner_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    privacy: Mapped[ClubPrivacy] = mapped_column(
        Enum(ClubPrivacy, values_callable=lambda e: [x.value for x in e]),
        default=ClubPrivacy.PUBLIC,
        nullable=False,
    )
    member_limit: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    current_book_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("books.id", ondelete="SET NULL"), nullable=True
    )
    current_book_google_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    current_book_start_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    next_book_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("books.id", ondelete="SET NULL"), nullable=True
    )
    next_book_google_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    # ReadingCheckpoint entries: {"title", "date", "chapters", "completed"}
    reading_checkpoints: Mapped[list[dict[str, Any]]] = mapped_column(
        MutableList.as_mutable(JSON), default=list, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    members: Mapped[list[User]] = relationship(secondary=club_members, lazy="selectin")
    moderators: Mapped[list[User]] = relationship(secondary=club_moderators, lazy="selectin")

    @property
    def member_ids(self) -> set[int]:
        return {member.id for member in self.members}

    @property
    def moderator_ids(self) -> set[int]:
        return {moderator.id for moderator in self.moderators}

    def __repr__(self) -> str:
        return f"<Club id={self.id} name={self.name!r} owner={self.owner_id}>"
