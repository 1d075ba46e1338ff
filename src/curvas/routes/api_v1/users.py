from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from curvas.core.dependencies import get_db_session
from curvas.core.errors import CurvasError
from curvas.services import user_service
from curvas.services.serializers import user_to_dict

from .errors import to_http

router = APIRouter(prefix="/users", tags=["users"])


class CreateUserBody(BaseModel):
    name: str
    email: str
    role: str = Field(default="customer", description="admin | customer | staff")


@router.post("")
async def post_user(body: CreateUserBody, session: AsyncSession = Depends(get_db_session)):
    try:
        user = await user_service.create_user(session, body.name, body.email, body.role)
    except CurvasError as e:
        raise to_http(e) from e
    return user_to_dict(user)


@router.get("/{user_id}")
async def get_user(user_id: str, session: AsyncSession = Depends(get_db_session)):
    try:
        user = await user_service.get_user(session, user_id)
    except CurvasError as e:
        raise to_http(e) from e
    return user_to_dict(user)
