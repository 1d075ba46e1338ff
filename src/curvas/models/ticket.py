from __future__ import annotations

import json
from datetime import datetime
from typing import List, Optional

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, dump_json_list

TICKET_PENDING = "pending"
TICKET_WON = "won"
TICKET_LOST = "lost"

TICKET_STATUSES = (TICKET_PENDING, TICKET_WON, TICKET_LOST)

PAYMENT_APPROVED = "APPROVED"
PAYMENT_DECLINED = "DECLINED"
PAYMENT_PENDING = "PENDING"

PAYMENT_STATUSES = (PAYMENT_APPROVED, PAYMENT_DECLINED, PAYMENT_PENDING)


class Ticket(Base):
    """A purchase of one or more slots.

    ``curva_id`` is the first curva touched by the allocation; the purchased
    slots may span several curvas. ``close`` is set once settlement (or an
    admin override) has finalized the ticket.
    """

    __tablename__ = "tickets"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    ticket_number: Mapped[int] = mapped_column(Integer, nullable=False, unique=True)

    match_id: Mapped[str] = mapped_column(ForeignKey("matches.id"), nullable=False)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False)
    curva_id: Mapped[str] = mapped_column(String(36), nullable=False)
    sold_by: Mapped[Optional[str]] = mapped_column(ForeignKey("users.id"), nullable=True)

    results_purchased_json: Mapped[str] = mapped_column(Text, nullable=False)
    payed_amount: Mapped[float] = mapped_column(Float, nullable=False)

    status: Mapped[str] = mapped_column(String(16), nullable=False, default=TICKET_PENDING)
    close: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    reward_amount: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    # Payment gateway verdict (online sales only).
    payment_status: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)
    payment_reference: Mapped[Optional[str]] = mapped_column(
        String(128), nullable=True, unique=True
    )
    gateway_transaction_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    customer_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    created_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    closed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_ticket_match_close", "match_id", "close"),
        Index("ix_ticket_user", "user_id"),
        Index("ix_ticket_curva", "curva_id"),
    )

    @property
    def results_purchased(self) -> List[str]:
        return list(json.loads(self.results_purchased_json or "[]"))

    @results_purchased.setter
    def results_purchased(self, values: List[str]) -> None:
        self.results_purchased_json = dump_json_list(values)

    @property
    def is_physical_sale(self) -> bool:
        return self.sold_by is not None and self.gateway_transaction_id is None
