"""Per-staff commission on physical sales for one finished match."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class StaffCommissionHistory(Base):
    __tablename__ = "staff_commission_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    staff_id: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    staff_name: Mapped[str] = mapped_column(String(128), nullable=False)
    staff_email: Mapped[str] = mapped_column(String(255), nullable=False)
    match_id: Mapped[str] = mapped_column(ForeignKey("matches.id"), nullable=False, index=True)

    total_tickets_sold: Mapped[int] = mapped_column(Integer, nullable=False)
    total_amount_sold: Mapped[float] = mapped_column(Float, nullable=False)

    commission_percentage: Mapped[float] = mapped_column(Float, nullable=False)
    commission_amount: Mapped[float] = mapped_column(Float, nullable=False)
    transaction_cost: Mapped[float] = mapped_column(Float, nullable=False)
    total_transaction_costs: Mapped[float] = mapped_column(Float, nullable=False)
    net_commission: Mapped[float] = mapped_column(Float, nullable=False)

    # Informational only; the gateway charges this on online sales.
    gateway_commission_percentage: Mapped[float] = mapped_column(Float, nullable=False)
    gateway_commission_amount: Mapped[float] = mapped_column(Float, nullable=False)

    game_finished_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        UniqueConstraint("staff_id", "match_id", name="uq_staff_commission_staff_match"),
    )
