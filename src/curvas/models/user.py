from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base

ROLE_ADMIN = "admin"
ROLE_CUSTOMER = "customer"
ROLE_STAFF = "staff"

USER_ROLES = (ROLE_ADMIN, ROLE_CUSTOMER, ROLE_STAFF)


class User(Base):
    """Buyer or staff member; only the fields tickets and commissions need."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    role: Mapped[str] = mapped_column(String(16), nullable=False, default=ROLE_CUSTOMER)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
