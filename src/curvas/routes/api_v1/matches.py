"""Match administration, curvas and end-of-match settlement."""

from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession

from curvas.core.dependencies import get_db_session, get_notifier, get_rng
from curvas.core.errors import CurvasError
from curvas.services import match_service, settlement_service, staff_commission_service
from curvas.services.serializers import (
    commission_to_dict,
    curva_to_dict,
    match_to_dict,
    settlement_to_dict,
)

from .errors import to_http

router = APIRouter(prefix="/matches", tags=["matches"])


class CreateMatchBody(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "teams": ["team-a", "team-b"],
                "tournament": "Liga",
                "start_date": "2025-06-01T18:00:00Z",
                "end_time": "2025-06-01T20:00:00Z",
                "ticket_price": 5000,
                "reward_amount": 200000,
            }
        }
    )

    teams: List[str] = Field(..., min_length=2, max_length=2)
    tournament: str
    start_date: datetime
    end_time: datetime
    ticket_price: float = Field(..., gt=0)
    reward_amount: float = Field(..., ge=0)


class ScoreBody(BaseModel):
    score: List[int] = Field(..., min_length=2, max_length=2, description="[home, away] goals")


class StatusBody(BaseModel):
    status: str = Field(..., description="pending | in_progress")


@router.post("", summary="Create a match with its first curva")
async def post_match(
    body: CreateMatchBody,
    session: AsyncSession = Depends(get_db_session),
):
    try:
        match = await match_service.create_match(
            session,
            home_team=body.teams[0],
            away_team=body.teams[1],
            tournament=body.tournament,
            start_date=body.start_date,
            end_time=body.end_time,
            ticket_price=body.ticket_price,
            reward_amount=body.reward_amount,
            rng=get_rng(),
        )
        curvas = await match_service.list_curvas(session, match.id)
    except CurvasError as e:
        raise to_http(e) from e
    return match_to_dict(match, curvas)


@router.get("", summary="List matches, newest first")
async def get_matches(
    limit: int = 100,
    offset: int = 0,
    session: AsyncSession = Depends(get_db_session),
):
    try:
        matches = await match_service.list_matches(session, limit=limit, offset=offset)
    except CurvasError as e:
        raise to_http(e) from e
    return {"matches": [match_to_dict(m) for m in matches]}


@router.get("/{match_id}")
async def get_match(match_id: str, session: AsyncSession = Depends(get_db_session)):
    try:
        match = await match_service.get_match(session, match_id)
        curvas = await match_service.list_curvas(session, match_id)
    except CurvasError as e:
        raise to_http(e) from e
    return match_to_dict(match, curvas)


@router.put("/{match_id}/score")
async def put_score(
    match_id: str,
    body: ScoreBody,
    session: AsyncSession = Depends(get_db_session),
):
    try:
        match = await match_service.update_score(session, match_id, tuple(body.score))
    except CurvasError as e:
        raise to_http(e) from e
    return match_to_dict(match)


@router.put("/{match_id}/status")
async def put_status(
    match_id: str,
    body: StatusBody,
    session: AsyncSession = Depends(get_db_session),
):
    try:
        match = await match_service.update_status(session, match_id, body.status)
    except CurvasError as e:
        raise to_http(e) from e
    return match_to_dict(match)


@router.get("/{match_id}/curvas/{curva_id}")
async def get_curva(
    match_id: str,
    curva_id: str,
    session: AsyncSession = Depends(get_db_session),
):
    try:
        curva = await match_service.get_curva(session, match_id, curva_id)
    except CurvasError as e:
        raise to_http(e) from e
    return curva_to_dict(curva)


@router.post("/{match_id}/curvas", summary="Open a new curva")
async def post_curva(match_id: str, session: AsyncSession = Depends(get_db_session)):
    try:
        curva = await match_service.open_new_curva(session, match_id, rng=get_rng())
    except CurvasError as e:
        raise to_http(e) from e
    return curva_to_dict(curva)


@router.put("/{match_id}/curvas/{curva_id}/close")
async def put_close_curva(
    match_id: str,
    curva_id: str,
    session: AsyncSession = Depends(get_db_session),
):
    try:
        curva = await match_service.close_curva(session, match_id, curva_id)
    except CurvasError as e:
        raise to_http(e) from e
    return curva_to_dict(curva)


@router.post(
    "/{match_id}/end",
    summary="End the match and settle its tickets",
    description="Closes every curva, marks open tickets won/lost against the current score, records house wins. Runs once per match.",
)
async def post_end_match(
    match_id: str,
    session: AsyncSession = Depends(get_db_session),
    notifier=Depends(get_notifier),
):
    try:
        report = await settlement_service.end_match(session, match_id, notifier=notifier)
    except CurvasError as e:
        raise to_http(e) from e
    return settlement_to_dict(report)


@router.get("/{match_id}/commissions")
async def get_commissions(match_id: str, session: AsyncSession = Depends(get_db_session)):
    try:
        await match_service.get_match(session, match_id)
        rows = await staff_commission_service.list_commissions_for_match(session, match_id)
    except CurvasError as e:
        raise to_http(e) from e
    return {"commissions": [commission_to_dict(r) for r in rows]}
