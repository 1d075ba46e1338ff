"""
Match settlement: close every curva, classify open tickets against the final
score, record house-wins events and staff commissions, finish the match.

Runs once per match. The house-wins audit and the commissions are
best-effort (each in its own SAVEPOINT); any other failure rolls the whole
settlement back and the match stays unfinished.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from curvas.core.clock import utcnow
from curvas.core.config import Settings, get_settings
from curvas.core.errors import InvalidStateError, translate_errors
from curvas.domain.settlement import HouseWinsVerdict, TicketView, classify
from curvas.models.house_wins_history import HouseWinsHistory
from curvas.models.match import ACTIVE_MATCH_STATUSES, MATCH_FINISHED, Match
from curvas.models.ticket import TICKET_LOST, TICKET_WON, Ticket
from curvas.ops.ops_events import (
    log_curva_closed,
    log_house_wins,
    log_settlement_end,
    log_settlement_start,
    log_side_effect_failure,
)
from curvas.repositories.curva_repo import CurvaRepository
from curvas.repositories.house_wins_repo import HouseWinsRepository
from curvas.repositories.match_repo import MatchRepository
from curvas.repositories.ticket_repo import TicketRepository

from .match_service import load_match
from .notifications import Notifier, TicketNotice, dispatch_notification, get_default_notifier
from .staff_commission_service import calculate_commissions_for_match
from .ticket_service import apply_status

logger = logging.getLogger(__name__)


@dataclass
class SettlementReport:
    match_id: str
    score: Tuple[int, int]
    winning_slot: str
    curvas_closed: int = 0
    winners: List[str] = field(default_factory=list)
    losers: List[str] = field(default_factory=list)
    house_wins: List[str] = field(default_factory=list)
    commissions: int = 0


def _view(ticket: Ticket) -> TicketView:
    return TicketView(
        ticket_id=ticket.id,
        results_purchased=ticket.results_purchased,
        payed_amount=ticket.payed_amount,
        close=ticket.close,
    )


async def _record_house_wins(session: AsyncSession, match: Match, verdict: HouseWinsVerdict) -> bool:
    entry = HouseWinsHistory(
        match_id=match.id,
        reason=verdict.reason,
        score_json=json.dumps(list(verdict.score)) if verdict.score is not None else None,
        total_tickets=verdict.total_tickets,
        house_winnings=verdict.house_winnings,
        tournament=match.tournament,
        teams_json=json.dumps(list(match.teams)),
        created_at=utcnow(),
    )
    try:
        async with session.begin_nested():
            await HouseWinsRepository(session).add(entry)
    except Exception as exc:
        logger.exception("House wins (%s) not recorded for match %s", verdict.reason, match.id)
        log_side_effect_failure("house_wins_history", str(exc), match_id=match.id, reason=verdict.reason)
        return False
    log_house_wins(match.id, verdict.reason, verdict.total_tickets, verdict.house_winnings)
    return True


async def _record_commissions(
    session: AsyncSession, match_id: str, finished_at, settings: Settings
) -> int:
    try:
        async with session.begin_nested():
            rows = await calculate_commissions_for_match(session, match_id, finished_at, settings)
    except Exception as exc:
        logger.exception("Staff commissions not recorded for match %s", match_id)
        log_side_effect_failure("staff_commissions", str(exc), match_id=match_id)
        return 0
    return len(rows)


@translate_errors("Error ending match")
async def end_match(
    session: AsyncSession,
    match_id: str,
    settings: Optional[Settings] = None,
    notifier: Optional[Notifier] = None,
) -> SettlementReport:
    """Settle the match exactly once; a second call fails with InvalidStateError."""
    settings = settings or get_settings()
    match = await load_match(session, match_id)
    if match.status == MATCH_FINISHED:
        raise InvalidStateError(f"Match {match_id} has already finished")

    started = log_settlement_start(match_id, match.score)
    report = SettlementReport(match_id=match_id, score=match.score, winning_slot="")
    changed: List[Ticket] = []
    try:
        report.curvas_closed = await CurvaRepository(session).close_all_for_match(match_id)
        log_curva_closed(match_id, None, report.curvas_closed)

        tickets = await TicketRepository(session).list_by_match(match_id)
        classification = classify(match.score, [_view(t) for t in tickets])
        report.winning_slot = classification.winning_slot

        by_id = {t.id: t for t in tickets}
        for ticket_id in classification.winners:
            ticket = by_id[ticket_id]
            if apply_status(ticket, TICKET_WON, reward_amount=match.reward_amount):
                changed.append(ticket)
        for ticket_id in classification.losers:
            ticket = by_id[ticket_id]
            if apply_status(ticket, TICKET_LOST):
                changed.append(ticket)
        report.winners = list(classification.winners)
        report.losers = list(classification.losers)
        await session.flush()

        for verdict in classification.house_wins:
            if await _record_house_wins(session, match, verdict):
                report.house_wins.append(verdict.reason)
            else:
                logger.warning("Continuing settlement of %s without %s record", match_id, verdict.reason)

        finished_at = utcnow()
        report.commissions = await _record_commissions(session, match_id, finished_at, settings)

        rows = await MatchRepository(session).transition_status(
            match_id, ACTIVE_MATCH_STATUSES, MATCH_FINISHED, finished_at=finished_at
        )
        if rows != 1:
            raise InvalidStateError(f"Match {match_id} has already finished")
        await session.commit()
    except Exception as exc:
        await session.rollback()
        log_settlement_end(
            match_id,
            len(report.winners),
            len(report.losers),
            report.house_wins,
            time.perf_counter() - started,
            error=str(exc),
        )
        raise

    await session.refresh(match)
    log_settlement_end(
        match_id,
        len(report.winners),
        len(report.losers),
        report.house_wins,
        time.perf_counter() - started,
    )

    notifier = notifier or get_default_notifier()
    for ticket in changed:
        dispatch_notification(
            notifier.ticket_status_changed(TicketNotice.from_ticket(ticket)),
            "ticket_status_changed",
            ticket_id=ticket.id,
        )
    return report


@translate_errors("Error listing house wins")
async def list_house_wins(session: AsyncSession, match_id: Optional[str] = None) -> List[HouseWinsHistory]:
    repo = HouseWinsRepository(session)
    if match_id:
        return await repo.list_by_match(match_id)
    return await repo.list_recent()
