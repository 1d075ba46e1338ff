from __future__ import annotations

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base

TICKET_NUMBER_SEQUENCE = "ticket_number"


class Sequence(Base):
    """Named monotonic counter, advanced only by an atomic increment."""

    __tablename__ = "sequences"

    name: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[int] = mapped_column(Integer, nullable=False)
