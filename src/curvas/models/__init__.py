"""SQLAlchemy models for the curvas ticketing store."""

from .base import Base
from .curva import Curva
from .house_wins_history import HouseWinsHistory
from .match import Match
from .sequence import Sequence
from .staff_commission_history import StaffCommissionHistory
from .ticket import Ticket
from .user import User

__all__ = [
    "Base",
    "Curva",
    "HouseWinsHistory",
    "Match",
    "Sequence",
    "StaffCommissionHistory",
    "Ticket",
    "User",
]
