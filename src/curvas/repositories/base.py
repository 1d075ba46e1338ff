from __future__ import annotations

from typing import Generic, Optional, Type, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from curvas.models.base import Base

T = TypeVar("T", bound=Base)


class BaseRepository(Generic[T]):
    """Base repository with common CRUD helpers.

    No commits are performed here - commit responsibility is left to the
    service layer.
    """

    model: Type[T]

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def add(self, entity: T) -> T:
        """Add an entity to the session (not committed)."""
        self.session.add(entity)
        return entity

    async def get_by_id(self, id_value: str | int, *, refresh: bool = False) -> Optional[T]:
        """Get an entity by primary key; ``refresh`` bypasses the identity map."""
        if refresh:
            return await self.session.get(self.model, id_value, populate_existing=True)
        return await self.session.get(self.model, id_value)
