"""User ORM model with its embedded reading collection."""

from __future__ import annotations

import enum
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, DateTime, String, Text
from sqlalchemy.ext.mutable import MutableList
from sqlalchemy.orm import Mapped, mapped_column

from bookmarkd.database import Base, utcnow


class ReadingStatus(str, enum.Enum):
    TO_READ = "To-Read"
    CURRENTLY_READING = "Currently Reading"
    FINISHED = "Finished"


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    fav_book: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    fav_author: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    # BookStatus entries: {"book_id", "google_id", "status", "favorite"}, one per book
    books: Mapped[list[dict[str, Any]]] = mapped_column(
        MutableList.as_mutable(JSON), default=list, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    def book_entry_index(self, book_id: int) -> Optional[int]:
        for index, entry in enumerate(self.books):
            if entry.get("book_id") == book_id:
                return index
        return None

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r}>"
