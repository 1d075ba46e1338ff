"""House-wins audit: one row per qualifying match end, never updated."""

from __future__ import annotations

import json
from datetime import datetime
from typing import List, Optional

from sqlalchemy import DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base

REASON_HIGH_SCORE = "high_score"
REASON_NO_WINNERS = "no_winners"

HOUSE_WINS_REASONS = (REASON_HIGH_SCORE, REASON_NO_WINNERS)


class HouseWinsHistory(Base):
    __tablename__ = "house_wins_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    match_id: Mapped[str] = mapped_column(
        ForeignKey("matches.id"), nullable=False, index=True
    )
    reason: Mapped[str] = mapped_column(String(16), nullable=False, index=True)
    score_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)  # [a, b] for high_score
    total_tickets: Mapped[int] = mapped_column(Integer, nullable=False)
    house_winnings: Mapped[float] = mapped_column(Float, nullable=False)
    tournament: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    teams_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )

    @property
    def score(self) -> Optional[List[int]]:
        return json.loads(self.score_json) if self.score_json else None

    @property
    def teams(self) -> Optional[List[str]]:
        return json.loads(self.teams_json) if self.teams_json else None
