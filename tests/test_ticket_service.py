"""Ticket ledger: purchase, status changes, payments, notifications."""

from __future__ import annotations

import pytest

from curvas.core.errors import InvalidInputError, InvalidStateError, NotFoundError
from curvas.models.ticket import TICKET_LOST, TICKET_PENDING, TICKET_WON
from curvas.repositories.sequence_repo import SequenceRepository
from curvas.services import ticket_service, user_service
from curvas.services.notifications import drain_notifications


class RecordingNotifier:
    def __init__(self):
        self.purchased = []
        self.changed = []

    async def ticket_purchased(self, notice):
        self.purchased.append(notice)

    async def ticket_status_changed(self, notice):
        self.changed.append(notice)


class BrokenNotifier:
    async def ticket_purchased(self, notice):
        raise RuntimeError("mail server down")

    async def ticket_status_changed(self, notice):
        raise RuntimeError("mail server down")


@pytest.mark.asyncio
async def test_purchase_records_ticket(session, make_match, buy):
    """Purchase stores the slots, the amount and a sequential number."""
    match = await make_match(session)
    first = await buy(session, match.id, 3, email="Ana@Example.com")
    second = await buy(session, match.id, 1, email="ana@example.com")

    assert first.ticket_number == 1000
    assert second.ticket_number == 1001
    assert len(first.results_purchased) == 3
    assert first.payed_amount == 15000.0
    assert first.status == TICKET_PENDING
    assert first.close is False
    assert first.user_id == second.user_id
    assert first.customer_email == "ana@example.com"


@pytest.mark.asyncio
async def test_purchase_requires_buyer(session, make_match, rng, settings):
    match = await make_match(session)
    with pytest.raises(InvalidInputError):
        await ticket_service.purchase_ticket(session, match.id, 1, rng=rng, settings=settings)


@pytest.mark.asyncio
async def test_purchase_unknown_customer(session, make_match, rng, settings):
    match = await make_match(session)
    with pytest.raises(NotFoundError):
        await ticket_service.purchase_ticket(
            session, match.id, 1, customer_id="ghost", rng=rng, settings=settings
        )


@pytest.mark.asyncio
async def test_purchase_by_customer_id(session, make_match, buy):
    match = await make_match(session)
    user = await user_service.create_user(session, "Luis", "luis@example.com")
    await session.commit()
    ticket = await buy(session, match.id, 2, email=None, customer_id=user.id)
    assert ticket.user_id == user.id


@pytest.mark.asyncio
async def test_sold_by_must_be_staff(session, make_match, buy):
    match = await make_match(session)
    customer = await user_service.create_user(session, "C", "c@example.com")
    await session.commit()
    with pytest.raises(InvalidInputError):
        await buy(session, match.id, 1, sold_by=customer.id)


@pytest.mark.asyncio
async def test_duplicate_payment_reference(session, make_match, buy):
    match = await make_match(session)
    await buy(session, match.id, 1, payment_reference="ref-1")
    with pytest.raises(InvalidStateError):
        await buy(session, match.id, 1, payment_reference="ref-1")


@pytest.mark.asyncio
async def test_change_status_is_idempotent(session, make_match, buy):
    match = await make_match(session)
    ticket = await buy(session, match.id, 1)

    won = await ticket_service.change_status(session, ticket.id, TICKET_WON)
    assert won.status == TICKET_WON
    assert won.close is True
    assert won.reward_amount == match.reward_amount
    closed_at = (await ticket_service.get_ticket(session, ticket.id)).closed_at

    again = await ticket_service.change_status(session, ticket.id, TICKET_WON)
    assert again.status == TICKET_WON
    assert again.closed_at == closed_at


@pytest.mark.asyncio
async def test_change_settled_status_requires_force(session, make_match, buy):
    match = await make_match(session)
    ticket = await buy(session, match.id, 1)
    await ticket_service.change_status(session, ticket.id, TICKET_WON)

    with pytest.raises(InvalidStateError):
        await ticket_service.change_status(session, ticket.id, TICKET_LOST)

    corrected = await ticket_service.change_status(session, ticket.id, TICKET_LOST, force=True)
    assert corrected.status == TICKET_LOST
    assert corrected.reward_amount is None


@pytest.mark.asyncio
async def test_change_status_rejects_pending(session, make_match, buy):
    match = await make_match(session)
    ticket = await buy(session, match.id, 1)
    with pytest.raises(InvalidInputError):
        await ticket_service.change_status(session, ticket.id, TICKET_PENDING)


@pytest.mark.asyncio
async def test_declined_payment_closes_ticket_as_lost(session, make_match, buy):
    match = await make_match(session)
    ticket = await buy(session, match.id, 2, payment_reference="pay-9", payment_status="PENDING")

    updated = await ticket_service.record_payment(
        session, "pay-9", "DECLINED", transaction_id="tx-1"
    )
    assert updated.id == ticket.id
    assert updated.payment_status == "DECLINED"
    assert updated.gateway_transaction_id == "tx-1"
    assert updated.status == TICKET_LOST
    assert updated.close is True


@pytest.mark.asyncio
async def test_approved_payment_keeps_ticket_open(session, make_match, buy):
    match = await make_match(session)
    await buy(session, match.id, 1, payment_reference="pay-10", payment_status="PENDING")
    updated = await ticket_service.record_payment(session, "pay-10", "APPROVED")
    assert updated.status == TICKET_PENDING
    assert updated.close is False


@pytest.mark.asyncio
async def test_payment_for_unknown_reference(session):
    with pytest.raises(NotFoundError):
        await ticket_service.record_payment(session, "nope", "APPROVED")


@pytest.mark.asyncio
async def test_list_tickets_filters(session, make_match, buy):
    match = await make_match(session)
    a = await buy(session, match.id, 1, email="a@example.com")
    await buy(session, match.id, 1, email="b@example.com")

    assert len(await ticket_service.list_tickets(session, match_id=match.id)) == 2
    by_user = await ticket_service.list_tickets(session, user_id=a.user_id)
    assert [t.id for t in by_user] == [a.id]
    by_curva = await ticket_service.list_tickets(session, curva_id=a.curva_id)
    assert len(by_curva) == 2
    with pytest.raises(InvalidInputError):
        await ticket_service.list_tickets(session)


@pytest.mark.asyncio
async def test_get_ticket_by_number(session, make_match, buy):
    match = await make_match(session)
    ticket = await buy(session, match.id, 1)
    found = await ticket_service.get_ticket_by_number(session, ticket.ticket_number)
    assert found.id == ticket.id
    with pytest.raises(NotFoundError):
        await ticket_service.get_ticket_by_number(session, 99999)


@pytest.mark.asyncio
async def test_notifications_are_sent_after_commit(session, make_match, buy):
    match = await make_match(session)
    notifier = RecordingNotifier()
    ticket = await buy(session, match.id, 2, notifier=notifier)
    await ticket_service.change_status(session, ticket.id, TICKET_LOST, notifier=notifier)
    await drain_notifications()

    assert [n.ticket_id for n in notifier.purchased] == [ticket.id]
    assert [n.status for n in notifier.changed] == [TICKET_LOST]


@pytest.mark.asyncio
async def test_notification_failure_does_not_fail_purchase(session, make_match, buy):
    match = await make_match(session)
    ticket = await buy(session, match.id, 1, notifier=BrokenNotifier())
    await drain_notifications()
    assert (await ticket_service.get_ticket(session, ticket.id)).status == TICKET_PENDING


@pytest.mark.asyncio
async def test_sequence_starts_at_configured_value(session):
    repo = SequenceRepository(session)
    assert await repo.next_value("demo", 50) == 50
    assert await repo.next_value("demo", 50) == 51
    assert await repo.next_value("other", 1) == 1


@pytest.mark.asyncio
async def test_duplicate_user_email_is_a_conflict(session):
    await user_service.create_user(session, "Ana", "ana@example.com")
    await session.commit()
    with pytest.raises(InvalidStateError):
        await user_service.create_user(session, "Ana B", "ANA@example.com")
