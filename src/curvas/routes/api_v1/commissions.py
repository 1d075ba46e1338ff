from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from curvas.core.dependencies import get_db_session
from curvas.core.errors import CurvasError
from curvas.services import staff_commission_service
from curvas.services.serializers import commission_to_dict

from .errors import to_http

router = APIRouter(prefix="/commissions", tags=["commissions"])


@router.get("", summary="Staff commissions, newest first, optionally for one match")
async def get_commissions(
    match_id: Optional[str] = None,
    limit: int = 100,
    offset: int = 0,
    session: AsyncSession = Depends(get_db_session),
):
    try:
        rows = await staff_commission_service.list_commissions(
            session, match_id=match_id, limit=limit, offset=offset
        )
    except CurvasError as e:
        raise to_http(e) from e
    return {"commissions": [commission_to_dict(r) for r in rows]}


@router.get("/staff/{staff_id}", summary="Commission history of one staff member")
async def get_staff_commissions(staff_id: str, session: AsyncSession = Depends(get_db_session)):
    try:
        rows = await staff_commission_service.list_commissions_for_staff(session, staff_id)
    except CurvasError as e:
        raise to_http(e) from e
    return {"commissions": [commission_to_dict(r) for r in rows]}
