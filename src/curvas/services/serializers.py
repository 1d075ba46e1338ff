"""Plain-dict views of the models for API responses."""

from __future__ import annotations

from dataclasses import asdict
from datetime import datetime
from typing import Any, Dict, List, Optional

from curvas.models.curva import Curva
from curvas.models.house_wins_history import HouseWinsHistory
from curvas.models.match import Match
from curvas.models.staff_commission_history import StaffCommissionHistory
from curvas.models.ticket import Ticket
from curvas.models.user import User


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def curva_to_dict(curva: Curva) -> Dict[str, Any]:
    return {
        "id": curva.id,
        "match_id": curva.match_id,
        "position": curva.position,
        "status": curva.status,
        "available_results": curva.available_results,
        "sold_results": curva.sold_results,
        "created_date": _iso(curva.created_date),
    }


def match_to_dict(match: Match, curvas: Optional[List[Curva]] = None) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "id": match.id,
        "teams": list(match.teams),
        "tournament": match.tournament,
        "start_date": _iso(match.start_date),
        "end_time": _iso(match.end_time),
        "created_date": _iso(match.created_date),
        "finished_at": _iso(match.finished_at),
        "ticket_price": match.ticket_price,
        "reward_amount": match.reward_amount,
        "score": list(match.score),
        "status": match.status,
    }
    if curvas is not None:
        out["curvas"] = [curva_to_dict(c) for c in curvas]
    return out


def ticket_to_dict(ticket: Ticket) -> Dict[str, Any]:
    return {
        "id": ticket.id,
        "ticket_number": ticket.ticket_number,
        "match_id": ticket.match_id,
        "user_id": ticket.user_id,
        "curva_id": ticket.curva_id,
        "sold_by": ticket.sold_by,
        "physical_sale": ticket.is_physical_sale,
        "results_purchased": ticket.results_purchased,
        "payed_amount": ticket.payed_amount,
        "status": ticket.status,
        "close": ticket.close,
        "reward_amount": ticket.reward_amount,
        "payment_status": ticket.payment_status,
        "payment_reference": ticket.payment_reference,
        "created_date": _iso(ticket.created_date),
        "closed_at": _iso(ticket.closed_at),
    }


def user_to_dict(user: User) -> Dict[str, Any]:
    return {"id": user.id, "name": user.name, "email": user.email, "role": user.role}


def house_wins_to_dict(entry: HouseWinsHistory) -> Dict[str, Any]:
    return {
        "id": entry.id,
        "match_id": entry.match_id,
        "reason": entry.reason,
        "score": entry.score,
        "total_tickets": entry.total_tickets,
        "house_winnings": entry.house_winnings,
        "tournament": entry.tournament,
        "teams": entry.teams,
        "created_at": _iso(entry.created_at),
    }


def commission_to_dict(row: StaffCommissionHistory) -> Dict[str, Any]:
    return {
        "staff_id": row.staff_id,
        "staff_name": row.staff_name,
        "match_id": row.match_id,
        "total_tickets_sold": row.total_tickets_sold,
        "total_amount_sold": row.total_amount_sold,
        "commission_amount": row.commission_amount,
        "total_transaction_costs": row.total_transaction_costs,
        "net_commission": row.net_commission,
        "gateway_commission_amount": row.gateway_commission_amount,
        "game_finished_at": _iso(row.game_finished_at),
    }


def settlement_to_dict(report: Any) -> Dict[str, Any]:
    out = asdict(report)
    out["score"] = list(report.score)
    return out
