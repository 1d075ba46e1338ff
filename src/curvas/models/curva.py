from __future__ import annotations

import json
from datetime import datetime
from typing import List

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from curvas.core.errors import MalformedCurvaError

from .base import Base, dump_json_list

CURVA_OPEN = "open"
CURVA_CLOSED = "closed"
CURVA_SOLD_OUT = "sold_out"

CURVA_STATUSES = (CURVA_OPEN, CURVA_CLOSED, CURVA_SOLD_OUT)


class Curva(Base):
    """A bounded pool of 64 score slots sold against one match.

    Curvas are rows keyed by id rather than an array inside the match, so a
    partition write touches exactly one row. ``version`` is bumped on every
    partition write and guards conditional updates.
    """

    __tablename__ = "curvas"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    match_id: Mapped[str] = mapped_column(
        ForeignKey("matches.id", ondelete="CASCADE"), nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)

    available_results_json: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    sold_results_json: Mapped[str] = mapped_column(Text, nullable=False, default="[]")

    status: Mapped[str] = mapped_column(String(16), nullable=False, default=CURVA_OPEN)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("ix_curva_match_position", "match_id", "position", unique=True),
        Index("ix_curva_match_status", "match_id", "status"),
    )

    @property
    def available_results(self) -> List[str]:
        return self._decode("available_results_json")

    @available_results.setter
    def available_results(self, values: List[str]) -> None:
        self.available_results_json = dump_json_list(values)

    @property
    def sold_results(self) -> List[str]:
        return self._decode("sold_results_json")

    @sold_results.setter
    def sold_results(self, values: List[str]) -> None:
        self.sold_results_json = dump_json_list(values)

    @property
    def is_allocatable(self) -> bool:
        return self.status == CURVA_OPEN and len(self.available_results) > 0

    def _decode(self, column: str) -> List[str]:
        if not self.id:
            raise MalformedCurvaError("Curva without identifier")
        raw = getattr(self, column)
        try:
            values = json.loads(raw) if raw is not None else None
        except (TypeError, ValueError):
            values = None
        if not isinstance(values, list) or not all(isinstance(v, str) for v in values):
            raise MalformedCurvaError(
                f"Curva {self.id} has malformed {column.replace('_json', '')}"
            )
        return values
