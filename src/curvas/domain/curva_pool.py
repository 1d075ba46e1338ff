"""
Curva pool generation.

A slot is a possible final score "X.Y" with X, Y in 0..7; a curva holds all
64 of them. Slots are collected by rejection sampling over uniform pairs, so
the pool is always the complete slot space, in random order.
"""

from __future__ import annotations

import random
import re
from typing import List, Optional, Set, Tuple
from uuid import uuid4

from curvas.core.clock import utcnow

MAX_SLOT_GOALS = 7
CURVA_SIZE = (MAX_SLOT_GOALS + 1) ** 2  # 64

_SLOT_RE = re.compile(r"^([0-7])\.([0-7])$")

ALL_SLOTS: Tuple[str, ...] = tuple(
    f"{a}.{b}" for a in range(MAX_SLOT_GOALS + 1) for b in range(MAX_SLOT_GOALS + 1)
)


def slot_for_score(home_goals: int, away_goals: int) -> str:
    """Canonical slot string for a score. Not necessarily a sellable slot (e.g. "8.0")."""
    return f"{home_goals}.{away_goals}"


def is_valid_slot(value: str) -> bool:
    return isinstance(value, str) and _SLOT_RE.match(value) is not None


def score_out_of_range(home_goals: int, away_goals: int) -> bool:
    """True when no slot can match the score."""
    return home_goals > MAX_SLOT_GOALS or away_goals > MAX_SLOT_GOALS


def generate_curva_slots(rng: Optional[random.Random] = None) -> List[str]:
    """Return the 64 slots in randomized order (rejection sampling)."""
    rng = rng or random.Random()
    seen: Set[str] = set()
    slots: List[str] = []
    while len(slots) < CURVA_SIZE:
        candidate = slot_for_score(
            rng.randint(0, MAX_SLOT_GOALS), rng.randint(0, MAX_SLOT_GOALS)
        )
        if candidate in seen:
            continue
        seen.add(candidate)
        slots.append(candidate)
    return slots


def draw_slots(
    available: List[str], quantity: int, rng: random.Random
) -> Tuple[List[str], List[str]]:
    """
    Draw ``min(quantity, len(available))`` slots uniformly without replacement.

    Returns (drawn, remaining); ``available`` is not mutated.
    """
    count = min(quantity, len(available))
    drawn = rng.sample(available, count)
    taken = set(drawn)
    remaining = [s for s in available if s not in taken]
    return drawn, remaining


def new_curva(match_id: str, position: int, rng: Optional[random.Random] = None):
    """Fresh open curva row for the match: 64 available slots, nothing sold."""
    from curvas.models.curva import CURVA_OPEN, Curva

    curva = Curva(
        id=str(uuid4()),
        match_id=match_id,
        position=position,
        status=CURVA_OPEN,
        version=0,
        created_date=utcnow(),
    )
    curva.available_results = generate_curva_slots(rng)
    curva.sold_results = []
    return curva
