"""Common plumbing for domain services."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession


class Service:
    """A domain service bound to one request-scoped session.

    Public mutators commit their own unit of work; helpers called by other
    services only flush so the caller decides when the work is durable.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def commit(self) -> None:
        await self.session.commit()
