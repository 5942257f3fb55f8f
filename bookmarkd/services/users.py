"""Accounts, profiles and the per-user reading collection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

import structlog
from sqlalchemy.exc import IntegrityError

from bookmarkd.auth.context import Viewer, sign_token
from bookmarkd.auth.guard import require_viewer_is
from bookmarkd.auth.password import hash_password, verify_password
from bookmarkd.database import utcnow
from bookmarkd.exceptions import Conflict, NotFound, Unauthenticated
from bookmarkd.models.club import Club
from bookmarkd.models.user import User
from bookmarkd.repositories.clubs import ClubRepository
from bookmarkd.repositories.users import UserRepository
from bookmarkd.schemas.base import validate_input
from bookmarkd.schemas.user import BookStatusInput, ProfileUpdate, UserLogin, UserRegister
from bookmarkd.services.base import Service
from bookmarkd.services.books import BookService

logger = structlog.get_logger()


@dataclass
class AuthResult:
    token: str
    user: User


class UserService(Service):
    def __init__(self, session):
        super().__init__(session)
        self.users = UserRepository(session)
        self.clubs = ClubRepository(session)

    async def get(self, user_id: int) -> User:
        user = await self.users.get(user_id)
        if user is None:
            raise NotFound.entity("User", user_id)
        return user

    async def find(self, user_id: Optional[int]) -> Optional[User]:
        if user_id is None:
            return None
        return await self.users.get(user_id)

    async def list_users(self) -> Sequence[User]:
        return await self.users.list_all(User.id)

    async def get_many(self, user_ids: Sequence[int]) -> Sequence[User]:
        return await self.users.get_many(user_ids)

    async def clubs_for(self, user_id: int) -> Sequence[Club]:
        return await self.clubs.list_for_user(user_id)

    # ── Authentication ──

    async def sign_up(self, username: str, email: str, password: str) -> AuthResult:
        data = validate_input(UserRegister, username=username, email=email, password=password)
        email = data.email.lower()

        if await self.users.get_by_email(email):
            raise Conflict.field("email", "Email already registered")
        if await self.users.get_by_username(data.username):
            raise Conflict.field("username", "Username already taken")

        now = utcnow()
        user = User(
            username=data.username,
            email=email,
            hashed_password=hash_password(data.password),
            books=[],
            created_at=now,
            updated_at=now,
        )
        try:
            await self.users.add(user)
            await self.commit()
        except IntegrityError as exc:
            await self.session.rollback()
            message = str(exc.orig).lower()
            if "username" in message:
                raise Conflict.field("username", "Username already taken") from exc
            raise Conflict.field("email", "Email already registered") from exc

        logger.info("user_registered", user_id=user.id, username=user.username)
        return AuthResult(token=sign_token(user), user=user)

    async def login(self, email: str, password: str) -> AuthResult:
        data = validate_input(UserLogin, email=email, password=password)
        user = await self.users.get_by_email(data.email.lower())
        if user is None or not verify_password(data.password, user.hashed_password):
            raise Unauthenticated()

        logger.info("user_login", user_id=user.id)
        return AuthResult(token=sign_token(user), user=user)

    # ── Profile ──

    async def update_profile(
        self,
        viewer: Optional[Viewer],
        user_id: int,
        *,
        bio: Optional[str] = None,
        location: Optional[str] = None,
        fav_book: Optional[str] = None,
        fav_author: Optional[str] = None,
        password: Optional[str] = None,
    ) -> User:
        require_viewer_is(viewer, user_id)
        data = validate_input(
            ProfileUpdate,
            bio=bio,
            location=location,
            fav_book=fav_book,
            fav_author=fav_author,
            password=password,
        )
        user = await self.get(user_id)

        changes = data.model_dump(exclude_none=True)
        new_password = changes.pop("password", None)
        for field, value in changes.items():
            setattr(user, field, value)
        if new_password is not None:
            user.hashed_password = hash_password(new_password)

        user.updated_at = utcnow()
        await self.commit()
        logger.info(
            "profile_updated",
            user_id=user_id,
            fields=sorted(changes),
            password_changed=new_password is not None,
        )
        return user

    # ── Reading collection ──

    async def add_book_status(
        self,
        viewer: Optional[Viewer],
        user_id: int,
        book_id: int,
        status: str,
        favorite: bool,
    ) -> User:
        """Add a book to the collection; re-adding an existing book is a no-op."""
        require_viewer_is(viewer, user_id)
        data = validate_input(BookStatusInput, status=status, favorite=favorite)
        book = await BookService(self.session).get(book_id)
        user = await self.users.get_for_update(user_id)
        if user is None:
            raise NotFound.entity("User", user_id)

        if user.book_entry_index(book.id) is not None:
            return user

        user.books.append(
            {
                "book_id": book.id,
                "google_id": book.google_id,
                "status": data.status.value,
                "favorite": data.favorite,
            }
        )
        await self.commit()
        logger.info("book_status_added", user_id=user_id, book_id=book.id, status=data.status.value)
        return user

    async def _edit_entry(self, viewer: Optional[Viewer], user_id: int, book_id: int, **changes) -> User:
        require_viewer_is(viewer, user_id)
        user = await self.users.get_for_update(user_id)
        if user is None:
            raise NotFound.entity("User", user_id)

        index = user.book_entry_index(book_id)
        if index is None:
            raise NotFound("Book is not in this user's collection", {"book_id": str(book_id)})

        user.books[index] = {**user.books[index], **changes}
        await self.commit()
        return user

    async def edit_book_status(
        self, viewer: Optional[Viewer], user_id: int, book_id: int, status: str
    ) -> User:
        data = validate_input(BookStatusInput, status=status)
        return await self._edit_entry(viewer, user_id, book_id, status=data.status.value)

    async def edit_book_favorite(
        self, viewer: Optional[Viewer], user_id: int, book_id: int, favorite: bool
    ) -> User:
        return await self._edit_entry(viewer, user_id, book_id, favorite=bool(favorite))

    async def remove_book(self, viewer: Optional[Viewer], user_id: int, book_id: int) -> User:
        require_viewer_is(viewer, user_id)
        user = await self.users.get_for_update(user_id)
        if user is None:
            raise NotFound.entity("User", user_id)

        index = user.book_entry_index(book_id)
        if index is not None:
            del user.books[index]
            await self.commit()
        return user
