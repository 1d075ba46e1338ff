"""
Ticket ledger: purchase, reads, status changes and payment verdicts.

Settlement writes ticket status through ``apply_status`` so the re-settlement
guard lives in one place.
"""

from __future__ import annotations

import logging
import random
from typing import List, Optional
from uuid import uuid4

from sqlalchemy.ext.asyncio import AsyncSession

from curvas.core.clock import utcnow
from curvas.core.config import Settings, get_settings
from curvas.core.errors import (
    InvalidInputError,
    InvalidStateError,
    NotFoundError,
    translate_errors,
)
from curvas.models.sequence import TICKET_NUMBER_SEQUENCE
from curvas.models.ticket import (
    PAYMENT_DECLINED,
    PAYMENT_STATUSES,
    TICKET_LOST,
    TICKET_PENDING,
    TICKET_WON,
    Ticket,
)
from curvas.repositories.sequence_repo import SequenceRepository
from curvas.repositories.ticket_repo import TicketRepository

from .allocation_service import allocate
from .match_service import load_match
from .notifications import Notifier, TicketNotice, dispatch_notification, get_default_notifier
from .user_service import get_seller, resolve_buyer

logger = logging.getLogger(__name__)

_SETTLED_STATUSES = (TICKET_WON, TICKET_LOST)


def apply_status(
    ticket: Ticket,
    status: str,
    force: bool = False,
    reward_amount: Optional[float] = None,
) -> bool:
    """
    Set a settled status on the ticket and close it. Returns False when nothing changed.

    Already closed with the same status: no-op. Closed with a different
    status: refused unless forced (admin correction).
    """
    if status not in _SETTLED_STATUSES:
        raise InvalidInputError("Tickets can only be settled as won or lost")
    if ticket.close:
        if ticket.status == status:
            return False
        if not force:
            raise InvalidStateError(
                f"Ticket {ticket.ticket_number} is already settled as {ticket.status}"
            )
    ticket.status = status
    ticket.close = True
    ticket.closed_at = utcnow()
    ticket.reward_amount = reward_amount if status == TICKET_WON else None
    return True


async def _load_ticket(session: AsyncSession, ticket_id: str) -> Ticket:
    ticket = await TicketRepository(session).get_by_id(ticket_id, refresh=True)
    if ticket is None:
        raise NotFoundError(f"Ticket not found: {ticket_id}")
    return ticket


@translate_errors("Error creating ticket")
async def purchase_ticket(
    session: AsyncSession,
    match_id: str,
    quantity: int,
    customer_id: Optional[str] = None,
    buyer_name: Optional[str] = None,
    buyer_email: Optional[str] = None,
    curva_id: Optional[str] = None,
    sold_by: Optional[str] = None,
    payment_reference: Optional[str] = None,
    payment_status: Optional[str] = None,
    rng: Optional[random.Random] = None,
    settings: Optional[Settings] = None,
    notifier: Optional[Notifier] = None,
) -> Ticket:
    """Allocate slots and record the ticket; the purchase notice goes out after commit."""
    settings = settings or get_settings()
    if payment_status is not None and payment_status not in PAYMENT_STATUSES:
        raise InvalidInputError(f"payment_status must be one of: {', '.join(PAYMENT_STATUSES)}")

    match = await load_match(session, match_id)
    buyer = await resolve_buyer(session, customer_id=customer_id, name=buyer_name, email=buyer_email)
    if sold_by:
        await get_seller(session, sold_by)
    if payment_reference:
        if await TicketRepository(session).get_by_payment_reference(payment_reference):
            raise InvalidStateError(f"Payment reference {payment_reference} already has a ticket")

    allocation = await allocate(
        session,
        match_id,
        quantity,
        preferred_curva_id=curva_id,
        rng=rng,
        settings=settings,
    )
    number = await SequenceRepository(session).next_value(
        TICKET_NUMBER_SEQUENCE, settings.ticket_number_start
    )

    ticket = Ticket(
        id=str(uuid4()),
        ticket_number=number,
        match_id=match_id,
        user_id=buyer.id,
        curva_id=allocation.curva_id,
        sold_by=sold_by,
        payed_amount=match.ticket_price * quantity,
        status=TICKET_PENDING,
        close=False,
        payment_status=payment_status,
        payment_reference=payment_reference,
        customer_email=buyer.email,
        created_date=utcnow(),
    )
    ticket.results_purchased = allocation.slots
    await TicketRepository(session).add(ticket)
    await session.commit()

    logger.info(
        "Ticket %s created for match %s: %d result(s) from %d curva(s)",
        number,
        match_id,
        len(allocation.slots),
        len(allocation.curvas_touched),
    )
    notifier = notifier or get_default_notifier()
    dispatch_notification(
        notifier.ticket_purchased(TicketNotice.from_ticket(ticket)),
        "ticket_purchased",
        ticket_id=ticket.id,
    )
    return ticket


@translate_errors("Error getting ticket")
async def get_ticket(session: AsyncSession, ticket_id: str) -> Ticket:
    return await _load_ticket(session, ticket_id)


@translate_errors("Error getting ticket")
async def get_ticket_by_number(session: AsyncSession, ticket_number: int) -> Ticket:
    ticket = await TicketRepository(session).get_by_number(ticket_number)
    if ticket is None:
        raise NotFoundError(f"Ticket not found: #{ticket_number}")
    return ticket


@translate_errors("Error listing tickets")
async def list_tickets(
    session: AsyncSession,
    user_id: Optional[str] = None,
    match_id: Optional[str] = None,
    curva_id: Optional[str] = None,
) -> List[Ticket]:
    """Tickets by buyer, match or curva; exactly one filter is used."""
    repo = TicketRepository(session)
    if user_id:
        return await repo.list_by_user(user_id)
    if match_id:
        return await repo.list_by_match(match_id)
    if curva_id:
        return await repo.list_by_curva(curva_id)
    raise InvalidInputError("One of user_id, match_id or curva_id is required")


@translate_errors("Error changing ticket status")
async def change_status(
    session: AsyncSession,
    ticket_id: str,
    status: str,
    force: bool = False,
    reward_amount: Optional[float] = None,
    notifier: Optional[Notifier] = None,
) -> Ticket:
    ticket = await _load_ticket(session, ticket_id)
    if status == TICKET_WON and reward_amount is None:
        reward_amount = (await load_match(session, ticket.match_id)).reward_amount
    changed = apply_status(ticket, status, force=force, reward_amount=reward_amount)
    if not changed:
        return ticket
    await session.commit()
    logger.info("Ticket %s set to %s (force=%s)", ticket.ticket_number, status, force)
    notifier = notifier or get_default_notifier()
    dispatch_notification(
        notifier.ticket_status_changed(TicketNotice.from_ticket(ticket)),
        "ticket_status_changed",
        ticket_id=ticket.id,
    )
    return ticket


@translate_errors("Error recording payment")
async def record_payment(
    session: AsyncSession,
    payment_reference: str,
    payment_status: str,
    transaction_id: Optional[str] = None,
    customer_email: Optional[str] = None,
) -> Ticket:
    """
    Store the gateway's verdict. A declined payment closes the ticket as lost
    so settlement never classifies it.
    """
    if payment_status not in PAYMENT_STATUSES:
        raise InvalidInputError(f"payment_status must be one of: {', '.join(PAYMENT_STATUSES)}")
    ticket = await TicketRepository(session).get_by_payment_reference(payment_reference)
    if ticket is None:
        raise NotFoundError(f"No ticket for payment reference {payment_reference}")

    ticket.payment_status = payment_status
    if transaction_id:
        ticket.gateway_transaction_id = transaction_id
    if customer_email:
        ticket.customer_email = customer_email
    if payment_status == PAYMENT_DECLINED:
        apply_status(ticket, TICKET_LOST, force=True)
    await session.commit()
    logger.info("Payment %s for ticket %s: %s", payment_reference, ticket.ticket_number, payment_status)
    return ticket
