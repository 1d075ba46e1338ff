"""
Notification hooks (purchase confirmation, status change).

Delivery is fire-and-forget: notifications are dispatched as asyncio tasks
after the ticket mutation is committed, and their failures are only logged.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, List, Optional, Protocol, Set

from curvas.models.ticket import Ticket
from curvas.ops.ops_events import log_side_effect_failure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TicketNotice:
    """Snapshot of a ticket handed to notifiers (no live ORM state)."""

    ticket_id: str
    ticket_number: int
    match_id: str
    user_id: str
    status: str
    results_purchased: List[str] = field(default_factory=list)
    payed_amount: float = 0.0
    reward_amount: Optional[float] = None
    customer_email: Optional[str] = None

    @classmethod
    def from_ticket(cls, ticket: Ticket) -> "TicketNotice":
        return cls(
            ticket_id=ticket.id,
            ticket_number=ticket.ticket_number,
            match_id=ticket.match_id,
            user_id=ticket.user_id,
            status=ticket.status,
            results_purchased=ticket.results_purchased,
            payed_amount=ticket.payed_amount,
            reward_amount=ticket.reward_amount,
            customer_email=ticket.customer_email,
        )


class Notifier(Protocol):
    async def ticket_purchased(self, notice: TicketNotice) -> None: ...

    async def ticket_status_changed(self, notice: TicketNotice) -> None: ...


class LoggingNotifier:
    """Default notifier: records what would be sent."""

    async def ticket_purchased(self, notice: TicketNotice) -> None:
        logger.info(
            "Ticket %s purchased: match=%s slots=%s amount=%s",
            notice.ticket_number,
            notice.match_id,
            notice.results_purchased,
            notice.payed_amount,
        )

    async def ticket_status_changed(self, notice: TicketNotice) -> None:
        logger.info(
            "Ticket %s is now %s (reward=%s)",
            notice.ticket_number,
            notice.status,
            notice.reward_amount,
        )


_default_notifier: Notifier = LoggingNotifier()
_pending: Set["asyncio.Task[None]"] = set()


def get_default_notifier() -> Notifier:
    return _default_notifier


async def _guarded(awaitable: Awaitable[None], effect: str, context: dict) -> None:
    try:
        await awaitable
    except Exception as exc:
        logger.exception("Notification %s failed", effect)
        log_side_effect_failure(effect, str(exc), **context)


def dispatch_notification(awaitable: Awaitable[None], effect: str, **context: Any) -> "asyncio.Task[None]":
    """Schedule a notification; never raises into the caller."""
    task = asyncio.ensure_future(_guarded(awaitable, effect, context))
    _pending.add(task)
    task.add_done_callback(_pending.discard)
    return task


async def drain_notifications() -> None:
    """Wait for every dispatched notification (shutdown, tests)."""
    while _pending:
        await asyncio.gather(*list(_pending))
