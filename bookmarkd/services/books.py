"""Book lookup and idempotent find-or-create by external id."""

from __future__ import annotations

from typing import Optional, Sequence

import structlog
from sqlalchemy.exc import IntegrityError

from bookmarkd.database import utcnow
from bookmarkd.exceptions import InvalidInput, NotFound
from bookmarkd.models.book import Book
from bookmarkd.repositories.books import BookRepository
from bookmarkd.services.base import Service

logger = structlog.get_logger()


class BookService(Service):
    def __init__(self, session):
        super().__init__(session)
        self.books = BookRepository(session)

    async def find_or_create(self, google_id: str) -> Book:
        """At most one Book exists per external id, even under concurrent calls."""
        google_id = (google_id or "").strip()
        if not google_id:
            raise InvalidInput("A book id is required.")

        book = await self.books.get_by_google_id(google_id)
        if book is not None:
            return book

        try:
            async with self.session.begin_nested():
                book = await self.books.add(Book(google_id=google_id, created_at=utcnow()))
        except IntegrityError:
            # Another request created it between our read and insert.
            book = await self.books.get_by_google_id(google_id)
            if book is None:
                raise
            return book

        logger.info("book_created", book_id=book.id, google_id=google_id)
        return book

    async def add_book(self, google_id: str) -> Book:
        book = await self.find_or_create(google_id)
        await self.commit()
        return book

    async def get(self, book_id: int) -> Book:
        book = await self.books.get(book_id)
        if book is None:
            raise NotFound.entity("Book", book_id)
        return book

    async def find(self, book_id: Optional[int]) -> Optional[Book]:
        if book_id is None:
            return None
        return await self.books.get(book_id)

    async def get_by_google_id(self, google_id: str) -> Optional[Book]:
        return await self.books.get_by_google_id(google_id)

    async def list_books(self) -> Sequence[Book]:
        return await self.books.list_all(Book.id)
