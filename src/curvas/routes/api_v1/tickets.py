"""Ticket purchase, reads, status override and payment verdicts."""

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession

from curvas.core.dependencies import get_db_session, get_notifier, get_rng
from curvas.core.errors import CurvasError
from curvas.services import ticket_service
from curvas.services.serializers import ticket_to_dict

from .errors import to_http

router = APIRouter(prefix="/tickets", tags=["tickets"])


class PurchaseBody(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "match_id": "5b0c...",
                "quantity": 2,
                "buyer_name": "Ana",
                "buyer_email": "ana@example.com",
            }
        }
    )

    match_id: str
    quantity: int = Field(..., ge=1)
    customer_id: Optional[str] = None
    buyer_name: Optional[str] = None
    buyer_email: Optional[str] = None
    curva_id: Optional[str] = Field(default=None, description="Preferred curva for the first batch")
    sold_by: Optional[str] = Field(default=None, description="Staff user id for physical sales")
    payment_reference: Optional[str] = None
    payment_status: Optional[str] = None


class StatusBody(BaseModel):
    status: str = Field(..., description="won | lost")
    force: bool = False
    reward_amount: Optional[float] = None


class PaymentBody(BaseModel):
    payment_reference: str
    payment_status: str = Field(..., description="APPROVED | DECLINED | PENDING")
    transaction_id: Optional[str] = None
    customer_email: Optional[str] = None


@router.post("", summary="Buy random results for a match")
async def post_ticket(
    body: PurchaseBody,
    session: AsyncSession = Depends(get_db_session),
    notifier=Depends(get_notifier),
):
    try:
        ticket = await ticket_service.purchase_ticket(
            session,
            body.match_id,
            body.quantity,
            customer_id=body.customer_id,
            buyer_name=body.buyer_name,
            buyer_email=body.buyer_email,
            curva_id=body.curva_id,
            sold_by=body.sold_by,
            payment_reference=body.payment_reference,
            payment_status=body.payment_status,
            rng=get_rng(),
            notifier=notifier,
        )
    except CurvasError as e:
        raise to_http(e) from e
    return ticket_to_dict(ticket)


@router.get("", summary="Tickets by user, match or curva")
async def get_tickets(
    user_id: Optional[str] = None,
    match_id: Optional[str] = None,
    curva_id: Optional[str] = None,
    session: AsyncSession = Depends(get_db_session),
):
    try:
        tickets = await ticket_service.list_tickets(
            session, user_id=user_id, match_id=match_id, curva_id=curva_id
        )
    except CurvasError as e:
        raise to_http(e) from e
    return {"tickets": [ticket_to_dict(t) for t in tickets]}


@router.get("/number/{ticket_number}")
async def get_ticket_by_number(ticket_number: int, session: AsyncSession = Depends(get_db_session)):
    try:
        ticket = await ticket_service.get_ticket_by_number(session, ticket_number)
    except CurvasError as e:
        raise to_http(e) from e
    return ticket_to_dict(ticket)


@router.get("/{ticket_id}")
async def get_ticket(ticket_id: str, session: AsyncSession = Depends(get_db_session)):
    try:
        ticket = await ticket_service.get_ticket(session, ticket_id)
    except CurvasError as e:
        raise to_http(e) from e
    return ticket_to_dict(ticket)


@router.put("/{ticket_id}/status", summary="Admin status override")
async def put_ticket_status(
    ticket_id: str,
    body: StatusBody,
    session: AsyncSession = Depends(get_db_session),
    notifier=Depends(get_notifier),
):
    try:
        ticket = await ticket_service.change_status(
            session,
            ticket_id,
            body.status,
            force=body.force,
            reward_amount=body.reward_amount,
            notifier=notifier,
        )
    except CurvasError as e:
        raise to_http(e) from e
    return ticket_to_dict(ticket)


@router.post("/payments", summary="Record a payment gateway verdict")
async def post_payment(body: PaymentBody, session: AsyncSession = Depends(get_db_session)):
    try:
        ticket = await ticket_service.record_payment(
            session,
            body.payment_reference,
            body.payment_status,
            transaction_id=body.transaction_id,
            customer_email=body.customer_email,
        )
    except CurvasError as e:
        raise to_http(e) from e
    return ticket_to_dict(ticket)
