"""Repositories over the async session; commit responsibility stays with services."""

from .base import BaseRepository
from .curva_repo import CurvaRepository
from .house_wins_repo import HouseWinsRepository
from .match_repo import MatchRepository
from .sequence_repo import SequenceRepository
from .staff_commission_repo import StaffCommissionRepository
from .ticket_repo import TicketRepository
from .user_repo import UserRepository

__all__ = [
    "BaseRepository",
    "CurvaRepository",
    "HouseWinsRepository",
    "MatchRepository",
    "SequenceRepository",
    "StaffCommissionRepository",
    "TicketRepository",
    "UserRepository",
]
