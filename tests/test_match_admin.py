"""Match and curva administration."""

from __future__ import annotations

from datetime import timedelta

import pytest

from conftest import match_kwargs
from curvas.core.errors import InvalidInputError, InvalidStateError, NotFoundError
from curvas.models.curva import CURVA_CLOSED, CURVA_OPEN
from curvas.models.match import MATCH_IN_PROGRESS, MATCH_PENDING
from curvas.services import match_service, settlement_service


@pytest.mark.asyncio
async def test_create_match_opens_first_curva(session, make_match):
    match = await make_match(session)
    assert match.status == MATCH_PENDING
    assert match.score == (0, 0)
    curvas = await match_service.list_curvas(session, match.id)
    assert len(curvas) == 1
    assert curvas[0].status == CURVA_OPEN
    assert len(curvas[0].available_results) == 64
    assert curvas[0].sold_results == []


@pytest.mark.asyncio
async def test_create_match_validation(session, rng):
    base = match_kwargs()
    bad = [
        dict(away_team=base["home_team"]),
        dict(home_team="  "),
        dict(end_time=base["start_date"] - timedelta(minutes=1)),
        dict(ticket_price=0),
        dict(reward_amount=-1),
    ]
    for overrides in bad:
        with pytest.raises(InvalidInputError):
            await match_service.create_match(session, rng=rng, **match_kwargs(**overrides))


@pytest.mark.asyncio
async def test_one_active_match_per_team_pair(session, make_match, settings):
    match = await make_match(session)
    with pytest.raises(InvalidStateError):
        await make_match(session)

    await settlement_service.end_match(session, match.id, settings=settings)
    rematch = await make_match(session)
    assert rematch.id != match.id


@pytest.mark.asyncio
async def test_score_updates(session, make_match, settings):
    match = await make_match(session)
    updated = await match_service.update_score(session, match.id, (2, 1))
    assert updated.score == (2, 1)
    with pytest.raises(InvalidInputError):
        await match_service.update_score(session, match.id, (-1, 0))

    await settlement_service.end_match(session, match.id, settings=settings)
    with pytest.raises(InvalidStateError):
        await match_service.update_score(session, match.id, (3, 1))


@pytest.mark.asyncio
async def test_status_moves_forward_only(session, make_match):
    match = await make_match(session)
    started = await match_service.update_status(session, match.id, MATCH_IN_PROGRESS)
    assert started.status == MATCH_IN_PROGRESS
    same = await match_service.update_status(session, match.id, MATCH_IN_PROGRESS)
    assert same.status == MATCH_IN_PROGRESS

    with pytest.raises(InvalidStateError):
        await match_service.update_status(session, match.id, MATCH_PENDING)
    with pytest.raises(InvalidStateError):
        await match_service.update_status(session, match.id, "finished")
    with pytest.raises(InvalidInputError):
        await match_service.update_status(session, match.id, "halftime")


@pytest.mark.asyncio
async def test_open_and_close_curvas(session, make_match, rng, settings):
    match = await make_match(session)
    second = await match_service.open_new_curva(session, match.id, rng=rng)
    assert second.position == 1

    closed = await match_service.close_curva(session, match.id, second.id)
    assert closed.status == CURVA_CLOSED
    with pytest.raises(InvalidStateError):
        await match_service.close_curva(session, match.id, second.id)
    with pytest.raises(NotFoundError):
        await match_service.get_curva(session, match.id, "missing")

    await settlement_service.end_match(session, match.id, settings=settings)
    with pytest.raises(InvalidStateError):
        await match_service.open_new_curva(session, match.id, rng=rng)


@pytest.mark.asyncio
async def test_list_matches_newest_first(session, make_match):
    first = await make_match(session)
    second = await make_match(session, home_team="Nacional", away_team="Medellin")
    listed = await match_service.list_matches(session)
    assert [m.id for m in listed][:2] == [second.id, first.id]


@pytest.mark.asyncio
async def test_naive_datetimes_are_rejected(session, rng):
    """Mixing naive and aware datetimes is a bad request, not a crash."""
    base = match_kwargs()
    naive_start = base["start_date"].replace(tzinfo=None)
    for overrides in (
        dict(start_date=naive_start),
        dict(end_time=base["end_time"].replace(tzinfo=None)),
        dict(start_date=naive_start, end_time=base["end_time"].replace(tzinfo=None)),
    ):
        with pytest.raises(InvalidInputError):
            await match_service.create_match(session, rng=rng, **match_kwargs(**overrides))
