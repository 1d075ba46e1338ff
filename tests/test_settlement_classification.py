"""Pure classification of tickets against a final score (no database)."""

from __future__ import annotations

from curvas.domain.settlement import TicketView, classify


def _ticket(ticket_id, slots, amount=5000.0, close=False):
    return TicketView(ticket_id=ticket_id, results_purchased=slots, payed_amount=amount, close=close)


def test_winner_holds_exact_slot():
    """Score 3-5: only the ticket holding "3.5" wins."""
    tickets = [
        _ticket("a", ["3.5", "1.1"]),
        _ticket("b", ["2.2", "4.4"]),
        _ticket("c", ["5.3"]),
    ]
    result = classify((3, 5), tickets)
    assert result.winning_slot == "3.5"
    assert result.winners == ["a"]
    assert sorted(result.losers) == ["b", "c"]
    assert result.house_wins == []


def test_closed_tickets_are_not_reclassified():
    tickets = [_ticket("a", ["1.0"], close=True), _ticket("b", ["1.0"])]
    result = classify((1, 0), tickets)
    assert result.winners == ["b"]
    assert result.losers == []


def test_high_score_house_wins_covers_all_tickets():
    """Score 8-0: every open ticket loses and the house takes all sales."""
    tickets = [
        _ticket("a", ["7.0"], amount=5000.0),
        _ticket("b", ["0.0", "1.0"], amount=10000.0),
        _ticket("c", ["2.2"], amount=5000.0, close=True),
    ]
    result = classify((8, 0), tickets)
    assert result.winning_slot == "8.0"
    assert result.winners == []
    assert sorted(result.losers) == ["a", "b"]
    assert len(result.house_wins) == 1
    verdict = result.house_wins[0]
    assert verdict.reason == "high_score"
    assert verdict.score == (8, 0)
    assert verdict.total_tickets == 3
    assert verdict.house_winnings == 20000.0


def test_no_tickets_is_no_winners():
    result = classify((1, 1), [])
    assert result.winners == [] and result.losers == []
    assert [v.reason for v in result.house_wins] == ["no_winners"]
    assert result.house_wins[0].total_tickets == 0
    assert result.house_wins[0].house_winnings == 0.0


def test_sold_tickets_without_winner_is_not_no_winners():
    """Losers exist, so no_winners does not fire even though nobody won."""
    result = classify((1, 1), [_ticket("a", ["0.0"])])
    assert result.losers == ["a"]
    assert result.house_wins == []


def test_high_score_with_only_closed_tickets_records_both():
    result = classify((9, 9), [_ticket("a", ["1.1"], close=True)])
    assert [v.reason for v in result.house_wins] == ["high_score", "no_winners"]
