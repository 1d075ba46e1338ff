"""Match and curva administration: create, score, status, open/close curvas."""

from __future__ import annotations

import logging
import random
from datetime import datetime
from typing import List, Optional, Tuple
from uuid import uuid4

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from curvas.core.clock import utcnow
from curvas.core.dependencies import get_rng
from curvas.core.errors import (
    InvalidInputError,
    InvalidStateError,
    NotFoundError,
    translate_errors,
)
from curvas.domain.curva_pool import new_curva
from curvas.models.curva import Curva
from curvas.models.match import (
    MATCH_FINISHED,
    MATCH_IN_PROGRESS,
    MATCH_PENDING,
    MATCH_STATUSES,
    Match,
)
from curvas.ops.ops_events import log_curva_closed, log_curva_opened
from curvas.repositories.curva_repo import CurvaRepository
from curvas.repositories.match_repo import MatchRepository

logger = logging.getLogger(__name__)

# Forward-only moves reachable through update_status; "finished" belongs to end_match.
_ALLOWED_TRANSITIONS = {
    MATCH_PENDING: (MATCH_IN_PROGRESS,),
    MATCH_IN_PROGRESS: (),
    MATCH_FINISHED: (),
}


async def load_match(session: AsyncSession, match_id: str) -> Match:
    match = await MatchRepository(session).get_by_id(match_id, refresh=True)
    if match is None:
        raise NotFoundError(f"Match not found: {match_id}")
    return match


async def append_curva(
    session: AsyncSession,
    match_id: str,
    rng: random.Random,
    reason: str,
) -> Optional[Curva]:
    """
    Generate a fresh curva and append it after the match's last one.

    Returns None when another writer took the same position first; the caller
    re-reads the curva set.
    """
    repo = CurvaRepository(session)
    position = await repo.next_position(match_id)
    curva = new_curva(match_id, position, rng)
    try:
        async with session.begin_nested():
            await repo.add(curva)
    except IntegrityError:
        logger.warning("Curva position %s of match %s already taken", position, match_id)
        return None
    log_curva_opened(match_id, curva.id, position, reason)
    return curva


@translate_errors("Error creating match")
async def create_match(
    session: AsyncSession,
    home_team: str,
    away_team: str,
    tournament: str,
    start_date: datetime,
    end_time: datetime,
    ticket_price: float,
    reward_amount: float,
    rng: Optional[random.Random] = None,
) -> Match:
    """Create a pending match with score 0-0 and its first open curva."""
    home_team = (home_team or "").strip()
    away_team = (away_team or "").strip()
    if not home_team or not away_team:
        raise InvalidInputError("Both teams are required")
    if home_team == away_team:
        raise InvalidInputError("A match needs two different teams")
    if start_date.tzinfo is None or end_time.tzinfo is None:
        raise InvalidInputError("start_date and end_time must include a timezone")
    if end_time <= start_date:
        raise InvalidInputError("end_time must be after start_date")
    if ticket_price <= 0:
        raise InvalidInputError("ticket_price must be positive")
    if reward_amount < 0:
        raise InvalidInputError("reward_amount must not be negative")

    repo = MatchRepository(session)
    if await repo.find_active_for_teams(home_team, away_team) is not None:
        raise InvalidStateError("There is already an active match for these teams")

    match = Match(
        id=str(uuid4()),
        home_team=home_team,
        away_team=away_team,
        tournament=tournament,
        start_date=start_date,
        end_time=end_time,
        created_date=utcnow(),
        ticket_price=ticket_price,
        reward_amount=reward_amount,
        score_home=0,
        score_away=0,
        status=MATCH_PENDING,
    )
    await repo.add(match)
    await session.flush()

    curva = await append_curva(session, match.id, rng or get_rng(), reason="match_created")
    if curva is None:
        raise InvalidStateError("Could not open the first curva")
    await session.commit()
    logger.info("Match %s created: %s vs %s (%s)", match.id, home_team, away_team, tournament)
    return match


@translate_errors("Error getting match")
async def get_match(session: AsyncSession, match_id: str) -> Match:
    return await load_match(session, match_id)


@translate_errors("Error listing matches")
async def list_matches(session: AsyncSession, limit: int = 100, offset: int = 0) -> List[Match]:
    return await MatchRepository(session).list_recent(limit=limit, offset=offset)


@translate_errors("Error updating score")
async def update_score(session: AsyncSession, match_id: str, score: Tuple[int, int]) -> Match:
    if len(score) != 2 or any((not isinstance(g, int)) or isinstance(g, bool) or g < 0 for g in score):
        raise InvalidInputError("score must be two non-negative integers")
    match = await load_match(session, match_id)
    if match.is_finished:
        raise InvalidStateError("Cannot change the score of a finished match")
    await MatchRepository(session).set_score(match_id, score[0], score[1])
    await session.commit()
    return await load_match(session, match_id)


@translate_errors("Error updating match status")
async def update_status(session: AsyncSession, match_id: str, status: str) -> Match:
    if status not in MATCH_STATUSES:
        raise InvalidInputError(f"status must be one of: {', '.join(MATCH_STATUSES)}")
    match = await load_match(session, match_id)
    if status == match.status:
        return match
    if status == MATCH_FINISHED:
        raise InvalidStateError("A match can only be finished by ending it")
    if status not in _ALLOWED_TRANSITIONS[match.status]:
        raise InvalidStateError(f"Cannot move match from {match.status} to {status}")
    rows = await MatchRepository(session).transition_status(match_id, (match.status,), status)
    if rows != 1:
        raise InvalidStateError("Match status changed concurrently")
    await session.commit()
    return await load_match(session, match_id)


@translate_errors("Error getting curva")
async def get_curva(session: AsyncSession, match_id: str, curva_id: str) -> Curva:
    await load_match(session, match_id)
    curva = await CurvaRepository(session).get_for_match(match_id, curva_id)
    if curva is None:
        raise NotFoundError(f"Curva not found: {curva_id}")
    return curva


@translate_errors("Error listing curvas")
async def list_curvas(session: AsyncSession, match_id: str) -> List[Curva]:
    await load_match(session, match_id)
    return await CurvaRepository(session).list_by_match(match_id)


@translate_errors("Error opening curva")
async def open_new_curva(
    session: AsyncSession, match_id: str, rng: Optional[random.Random] = None
) -> Curva:
    match = await load_match(session, match_id)
    if match.is_finished:
        raise InvalidStateError("Cannot open a curva on a finished match")
    curva = await append_curva(session, match_id, rng or get_rng(), reason="admin")
    if curva is None:
        raise InvalidStateError("Another curva was opened concurrently, try again")
    await session.commit()
    return curva


@translate_errors("Error closing curva")
async def close_curva(session: AsyncSession, match_id: str, curva_id: str) -> Curva:
    await get_curva(session, match_id, curva_id)
    if not await CurvaRepository(session).close(curva_id):
        raise InvalidStateError(f"Curva {curva_id} is already closed")
    await session.commit()
    log_curva_closed(match_id, curva_id, 1)
    return await get_curva(session, match_id, curva_id)
