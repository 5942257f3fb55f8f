"""Book persistence."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import select

from bookmarkd.models.book import Book
from bookmarkd.repositories.base import Repository


class BookRepository(Repository[Book]):
    model = Book

    async def get_by_google_id(self, google_id: str) -> Optional[Book]:
        result = await self.session.execute(select(Book).where(Book.google_id == google_id))
        return result.scalar_one_or_none()
