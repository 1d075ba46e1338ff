"""Commissions for staff who sold tickets in person, computed when a match ends."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from curvas.core.clock import utcnow
from curvas.core.config import Settings, get_settings
from curvas.core.errors import NotFoundError, translate_errors
from curvas.models.staff_commission_history import StaffCommissionHistory
from curvas.models.ticket import Ticket
from curvas.repositories.staff_commission_repo import StaffCommissionRepository
from curvas.repositories.ticket_repo import TicketRepository
from curvas.repositories.user_repo import UserRepository

logger = logging.getLogger(__name__)


def _group_by_seller(tickets: List[Ticket]) -> Dict[str, List[Ticket]]:
    grouped: Dict[str, List[Ticket]] = {}
    for ticket in tickets:
        if ticket.sold_by:
            grouped.setdefault(ticket.sold_by, []).append(ticket)
    return grouped


@translate_errors("Error calculating staff commissions")
async def calculate_commissions_for_match(
    session: AsyncSession,
    match_id: str,
    game_finished_at: datetime,
    settings: Optional[Settings] = None,
) -> List[StaffCommissionHistory]:
    """
    Upsert one commission row per staff member with physical sales in the match.

    commission = amount_sold * pct / 100; costs = tickets * transaction_cost;
    net = commission - costs. Unknown staff ids are skipped.
    """
    settings = settings or get_settings()
    physical = await TicketRepository(session).list_physical_sales(match_id)
    if not physical:
        return []

    users = UserRepository(session)
    repo = StaffCommissionRepository(session)
    rows: List[StaffCommissionHistory] = []
    for staff_id, tickets in sorted(_group_by_seller(physical).items()):
        staff = await users.get_by_id(staff_id)
        if staff is None:
            logger.warning("Staff %s not found, skipping commission for match %s", staff_id, match_id)
            continue

        total_tickets = len(tickets)
        total_amount = float(sum(t.payed_amount or 0 for t in tickets))
        commission = total_amount * settings.staff_commission_percentage / 100
        costs = total_tickets * settings.transaction_cost
        gateway_amount = total_amount * settings.gateway_commission_percentage / 100

        row = await repo.get_for_staff_and_match(staff_id, match_id)
        if row is None:
            row = StaffCommissionHistory(
                staff_id=staff_id,
                staff_name=staff.name,
                staff_email=staff.email,
                match_id=match_id,
                created_at=utcnow(),
            )
            await repo.add(row)
        row.total_tickets_sold = total_tickets
        row.total_amount_sold = total_amount
        row.commission_percentage = settings.staff_commission_percentage
        row.commission_amount = commission
        row.transaction_cost = settings.transaction_cost
        row.total_transaction_costs = costs
        row.net_commission = commission - costs
        row.gateway_commission_percentage = settings.gateway_commission_percentage
        row.gateway_commission_amount = gateway_amount
        row.game_finished_at = game_finished_at
        rows.append(row)

    await session.flush()
    logger.info("Commissions saved for %d staff on match %s", len(rows), match_id)
    return rows


@translate_errors("Error listing staff commissions")
async def list_commissions_for_match(
    session: AsyncSession, match_id: str
) -> List[StaffCommissionHistory]:
    return await StaffCommissionRepository(session).list_by_match(match_id)


@translate_errors("Error listing staff commissions")
async def list_commissions_for_staff(
    session: AsyncSession, staff_id: str
) -> List[StaffCommissionHistory]:
    """Every match a staff member earned commission on, newest first."""
    if await UserRepository(session).get_by_id(staff_id) is None:
        raise NotFoundError(f"User not found: {staff_id}")
    return await StaffCommissionRepository(session).list_by_staff(staff_id)


@translate_errors("Error listing staff commissions")
async def list_commissions(
    session: AsyncSession,
    match_id: Optional[str] = None,
    limit: int = 100,
    offset: int = 0,
) -> List[StaffCommissionHistory]:
    return await StaffCommissionRepository(session).list_recent(
        match_id=match_id, limit=limit, offset=offset
    )
