"""
Structured ops events for allocation and settlement milestones.
Log-level + structured event dict; keys sorted so lines are stable.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional, Sequence

OPS_LOGGER_NAME = "curvas.ops_events"


def _logger() -> logging.Logger:
    return logging.getLogger(OPS_LOGGER_NAME)


def _event(event_type: str, level: int = logging.INFO, **kwargs: Any) -> None:
    """Emit a structured ops event."""
    msg = f"ops_event={event_type} " + " ".join(f"{k}={v!r}" for k, v in sorted(kwargs.items()))
    _logger().log(level, msg, extra={"ops_event_type": event_type, "ops_event": {**kwargs}})


def log_curva_opened(match_id: str, curva_id: str, position: int, reason: str) -> None:
    """reason: 'match_created' | 'exhausted' | 'admin'."""
    _event("curva_opened", match_id=match_id, curva_id=curva_id, position=position, reason=reason)


def log_curva_closed(match_id: str, curva_id: Optional[str], count: int) -> None:
    _event("curva_closed", match_id=match_id, curva_id=curva_id, count=count)


def log_allocation(
    match_id: str,
    requested: int,
    curvas_touched: Sequence[str],
    conflicts: int,
) -> None:
    _event(
        "allocation",
        match_id=match_id,
        requested=requested,
        curvas_touched=list(curvas_touched),
        conflicts=conflicts,
    )


def log_allocation_conflict(match_id: str, curva_id: str, attempt: int) -> None:
    _event(
        "allocation_conflict",
        level=logging.WARNING,
        match_id=match_id,
        curva_id=curva_id,
        attempt=attempt,
    )


def log_settlement_start(match_id: str, score: Sequence[int]) -> float:
    """Log settlement start; return start time for duration calculation."""
    _event("settlement_start", match_id=match_id, score=list(score))
    return time.perf_counter()


def log_settlement_end(
    match_id: str,
    winners: int,
    losers: int,
    house_wins: Sequence[str],
    duration_seconds: float,
    error: str | None = None,
) -> None:
    payload: Dict[str, Any] = {
        "match_id": match_id,
        "winners": winners,
        "losers": losers,
        "house_wins": list(house_wins),
        "duration_seconds": round(duration_seconds, 4),
    }
    if error:
        payload["error"] = error
    _event("settlement_end", level=logging.ERROR if error else logging.INFO, **payload)


def log_house_wins(match_id: str, reason: str, total_tickets: int, house_winnings: float) -> None:
    _event(
        "house_wins",
        match_id=match_id,
        reason=reason,
        total_tickets=total_tickets,
        house_winnings=house_winnings,
    )


def log_side_effect_failure(effect: str, detail: str, **context: Any) -> None:
    """Best-effort work (audit row, commission, notification) failed; the caller continues."""
    _event("side_effect_failure", level=logging.ERROR, effect=effect, detail=detail, **context)
