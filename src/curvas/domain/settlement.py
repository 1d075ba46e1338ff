"""
Settlement classification: deterministic win/loss of tickets vs final score.

Inputs: final score and the tickets of one match.
Outputs: winners, losers and the house-wins verdicts.

Rules:
- The winning slot is "{home}.{away}".
- high_score: either side scored more than 7, so no slot can win. Totals cover
  every ticket of the match, settled or not.
- Only tickets not yet closed are classified.
- no_winners: nothing was classified at all (no open tickets). This does not
  detect "tickets sold but nobody holds the winning slot".
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from curvas.models.house_wins_history import REASON_HIGH_SCORE, REASON_NO_WINNERS

from .curva_pool import score_out_of_range, slot_for_score


@dataclass
class TicketView:
    """What classification needs from a ticket."""

    ticket_id: str
    results_purchased: List[str]
    payed_amount: float
    close: bool = False


@dataclass
class HouseWinsVerdict:
    reason: str  # high_score | no_winners
    score: Optional[Tuple[int, int]]
    total_tickets: int
    house_winnings: float


@dataclass
class Classification:
    winning_slot: str
    winners: List[str] = field(default_factory=list)
    losers: List[str] = field(default_factory=list)
    house_wins: List[HouseWinsVerdict] = field(default_factory=list)


def _totals(tickets: Sequence[TicketView]) -> Tuple[int, float]:
    return len(tickets), float(sum(t.payed_amount or 0 for t in tickets))


def classify(score: Tuple[int, int], tickets: Sequence[TicketView]) -> Classification:
    """Classify every open ticket and detect house-wins conditions."""
    home, away = score
    result = Classification(winning_slot=slot_for_score(home, away))

    if score_out_of_range(home, away):
        total, winnings = _totals(tickets)
        result.house_wins.append(
            HouseWinsVerdict(
                reason=REASON_HIGH_SCORE,
                score=(home, away),
                total_tickets=total,
                house_winnings=winnings,
            )
        )

    for ticket in tickets:
        if ticket.close:
            continue
        if result.winning_slot in ticket.results_purchased:
            result.winners.append(ticket.ticket_id)
        else:
            result.losers.append(ticket.ticket_id)

    if not result.winners and not result.losers:
        total, winnings = _totals(tickets)
        result.house_wins.append(
            HouseWinsVerdict(
                reason=REASON_NO_WINNERS,
                score=None,
                total_tickets=total,
                house_winnings=winnings,
            )
        )
    return result
