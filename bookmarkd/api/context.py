"""Per-request GraphQL context: the database session and the optional viewer."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional, TypeVar

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession
from strawberry.fastapi import BaseContext

from bookmarkd.auth.context import Viewer
from bookmarkd.auth.dependencies import get_viewer
from bookmarkd.database import get_db
from bookmarkd.exceptions import NotFound
from bookmarkd.services.base import Service

ServiceT = TypeVar("ServiceT", bound=Service)


class GraphQLContext(BaseContext):
    def __init__(self, session: AsyncSession, viewer: Optional[Viewer]):
        super().__init__()
        self.session = session
        self.viewer = viewer
        # Sibling resolvers run concurrently but share one session.
        self._lock = asyncio.Lock()

    @asynccontextmanager
    async def using(self, service_cls: type[ServiceT]) -> AsyncIterator[ServiceT]:
        async with self._lock:
            yield service_cls(self.session)


async def get_context(
    session: AsyncSession = Depends(get_db),
    viewer: Optional[Viewer] = Depends(get_viewer),
) -> GraphQLContext:
    return GraphQLContext(session=session, viewer=viewer)


def to_int(value, entity: str) -> int:
    """Parse a GraphQL ID; ids that cannot exist are reported as missing."""
    try:
        return int(str(value))
    except (TypeError, ValueError):
        raise NotFound.entity(entity, value) from None
