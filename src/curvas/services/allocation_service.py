"""
Curva allocation: reserve N random slots for one match.

Slots come from the first open curva with availability; when every curva is
exhausted a new one is opened. Each batch is computed in memory and written
with a conditional update on the curva's version, so a concurrent writer
makes the batch retry instead of silently overwriting its sales.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from curvas.core.config import Settings, get_settings
from curvas.core.dependencies import get_rng
from curvas.core.errors import (
    InternalError,
    InvalidInputError,
    InvalidStateError,
    NotFoundError,
    translate_errors,
)
from curvas.domain.curva_pool import draw_slots
from curvas.models.curva import CURVA_OPEN, CURVA_SOLD_OUT, Curva
from curvas.ops.ops_events import log_allocation, log_allocation_conflict
from curvas.repositories.curva_repo import CurvaRepository

from .match_service import append_curva, load_match

logger = logging.getLogger(__name__)


@dataclass
class Allocation:
    """Slots reserved for one purchase.

    ``curva_id`` is the first curva touched; the ticket stores only that one.
    """

    match_id: str
    slots: List[str] = field(default_factory=list)
    curvas_touched: List[str] = field(default_factory=list)
    conflicts: int = 0

    @property
    def curva_id(self) -> str:
        return self.curvas_touched[0]


async def _first_allocatable(repo: CurvaRepository, match_id: str) -> Optional[Curva]:
    for curva in await repo.list_by_match(match_id):
        if curva.status != CURVA_OPEN:
            continue
        if curva.available_results:
            return curva
    return None


@translate_errors("Error allocating results")
async def allocate(
    session: AsyncSession,
    match_id: str,
    quantity: int,
    preferred_curva_id: Optional[str] = None,
    rng: Optional[random.Random] = None,
    settings: Optional[Settings] = None,
) -> Allocation:
    """Reserve exactly ``quantity`` slots for the match (never short-allocates)."""
    if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity < 1:
        raise InvalidInputError("quantity must be a positive integer")
    settings = settings or get_settings()
    rng = rng or get_rng()

    match = await load_match(session, match_id)
    if match.is_finished:
        raise InvalidStateError("The match has finished; no more results can be sold")

    repo = CurvaRepository(session)
    preferred: Optional[Curva] = None
    if preferred_curva_id:
        preferred = await repo.get_for_match(match_id, preferred_curva_id)
        if preferred is None:
            raise NotFoundError(f"Curva not found: {preferred_curva_id}")

    allocation = Allocation(match_id=match_id)
    while len(allocation.slots) < quantity:
        curva: Optional[Curva] = None
        if preferred is not None:
            # Preferred curva only competes for the first batch.
            if preferred.is_allocatable:
                curva = preferred
            preferred = None
        if curva is None:
            curva = await _first_allocatable(repo, match_id)
        if curva is None:
            curva = await append_curva(session, match_id, rng, reason="exhausted")
            if curva is None:
                allocation.conflicts += 1
                _check_conflicts(allocation, settings, match_id, "new-curva")
                continue

        available = curva.available_results
        sold = curva.sold_results
        drawn, remaining = draw_slots(available, quantity - len(allocation.slots), rng)
        status = CURVA_SOLD_OUT if not remaining else curva.status

        written = await repo.write_partition(
            curva.id, curva.version, remaining, sold + drawn, status
        )
        if not written:
            allocation.conflicts += 1
            log_allocation_conflict(match_id, curva.id, allocation.conflicts)
            _check_conflicts(allocation, settings, match_id, curva.id)
            continue

        allocation.slots.extend(drawn)
        if curva.id not in allocation.curvas_touched:
            allocation.curvas_touched.append(curva.id)
        if status == CURVA_SOLD_OUT:
            logger.info("Curva %s of match %s sold out", curva.id, match_id)

    log_allocation(match_id, quantity, allocation.curvas_touched, allocation.conflicts)
    return allocation


def _check_conflicts(allocation: Allocation, settings: Settings, match_id: str, curva_id: str) -> None:
    if allocation.conflicts > settings.allocation_max_retries:
        raise InternalError(
            f"Could not reserve results for match {match_id}: curva {curva_id} kept changing"
        )
