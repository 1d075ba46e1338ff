from __future__ import annotations

from datetime import datetime
from typing import Optional, Tuple

from sqlalchemy import DateTime, Float, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base

MATCH_PENDING = "pending"
MATCH_IN_PROGRESS = "in_progress"
MATCH_FINISHED = "finished"

MATCH_STATUSES = (MATCH_PENDING, MATCH_IN_PROGRESS, MATCH_FINISHED)
ACTIVE_MATCH_STATUSES = (MATCH_PENDING, MATCH_IN_PROGRESS)


class Match(Base):
    """A soccer match tickets are sold against.

    The match owns its curvas (see ``Curva.match_id``); score and status are
    mutated by admin actions and by settlement.
    """

    __tablename__ = "matches"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    home_team: Mapped[str] = mapped_column(String(128), nullable=False)
    away_team: Mapped[str] = mapped_column(String(128), nullable=False)
    tournament: Mapped[str] = mapped_column(String(128), nullable=False)

    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    finished_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    ticket_price: Mapped[float] = mapped_column(Float, nullable=False)
    reward_amount: Mapped[float] = mapped_column(Float, nullable=False)

    score_home: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    score_away: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    status: Mapped[str] = mapped_column(String(16), nullable=False, default=MATCH_PENDING)

    __table_args__ = (
        Index("ix_match_teams_status", "home_team", "away_team", "status"),
        Index("ix_match_created", "created_date"),
    )

    @property
    def score(self) -> Tuple[int, int]:
        return (self.score_home, self.score_away)

    @property
    def teams(self) -> Tuple[str, str]:
        return (self.home_team, self.away_team)

    @property
    def is_finished(self) -> bool:
        return self.status == MATCH_FINISHED
