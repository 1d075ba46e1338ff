from __future__ import annotations

from sqlalchemy import insert, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from curvas.models.sequence import Sequence


class SequenceRepository:
    """Atomic increment-and-get counters (never read-max-plus-one)."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def _increment(self, name: str):
        table = Sequence.__table__
        stmt = (
            update(table)
            .where(table.c.name == name)
            .values(value=table.c.value + 1)
            .returning(table.c.value)
        )
        return (await self.session.execute(stmt)).scalar()

    async def next_value(self, name: str, start: int) -> int:
        """Return the next value of ``name``; the first value handed out is ``start``."""
        value = await self._increment(name)
        if value is not None:
            return value
        try:
            async with self.session.begin_nested():
                await self.session.execute(
                    insert(Sequence.__table__).values(name=name, value=start)
                )
            return start
        except IntegrityError:
            # Another writer created the row first.
            value = await self._increment(name)
            if value is None:
                raise
            return value
