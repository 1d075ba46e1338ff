from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from curvas.core.dependencies import get_db_session
from curvas.core.errors import CurvasError
from curvas.services import settlement_service
from curvas.services.serializers import house_wins_to_dict

from .errors import to_http

router = APIRouter(prefix="/house-wins", tags=["house_wins"])


@router.get("", summary="House-wins audit, newest first or per match")
async def get_house_wins(
    match_id: Optional[str] = None,
    session: AsyncSession = Depends(get_db_session),
):
    try:
        entries = await settlement_service.list_house_wins(session, match_id=match_id)
    except CurvasError as e:
        raise to_http(e) from e
    return {"house_wins": [house_wins_to_dict(e) for e in entries]}
