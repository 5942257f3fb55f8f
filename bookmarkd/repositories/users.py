"""User and Follow persistence."""

from __future__ import annotations

from typing import Optional, Sequence

from sqlalchemy import delete, func, select

from bookmarkd.models.follow import Follow
from bookmarkd.models.user import User
from bookmarkd.repositories.base import Repository


class UserRepository(Repository[User]):
    model = User

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def get_by_username(self, username: str) -> Optional[User]:
        result = await self.session.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def get_many(self, user_ids: Sequence[int]) -> Sequence[User]:
        if not user_ids:
            return []
        result = await self.session.execute(
            select(User).where(User.id.in_(user_ids)).order_by(User.id)
        )
        return result.scalars().all()


class FollowRepository(Repository[Follow]):
    model = Follow

    async def find(self, follower_id: int, following_id: int) -> Optional[Follow]:
        result = await self.session.execute(
            select(Follow).where(
                Follow.follower_id == follower_id,
                Follow.following_id == following_id,
            )
        )
        return result.scalar_one_or_none()

    async def remove(self, follower_id: int, following_id: int) -> int:
        result = await self.session.execute(
            delete(Follow).where(
                Follow.follower_id == follower_id,
                Follow.following_id == following_id,
            )
        )
        await self.session.flush()
        return result.rowcount or 0

    async def following_ids(self, follower_id: int) -> list[int]:
        result = await self.session.execute(
            select(Follow.following_id).where(Follow.follower_id == follower_id)
        )
        return list(result.scalars().all())

    async def follower_ids(self, following_id: int) -> list[int]:
        result = await self.session.execute(
            select(Follow.follower_id).where(Follow.following_id == following_id)
        )
        return list(result.scalars().all())

    async def count_followers(self, user_id: int) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(Follow).where(Follow.following_id == user_id)
        )
        return result.scalar() or 0

    async def count_following(self, user_id: int) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(Follow).where(Follow.follower_id == user_id)
        )
        return result.scalar() or 0
