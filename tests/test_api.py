"""HTTP surface: /api/v1 routes over an in-memory store."""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from curvas.main import app
from curvas.services.notifications import drain_notifications

MATCH_BODY = {
    "teams": ["Junior", "America"],
    "tournament": "Liga BetPlay",
    "start_date": "2025-06-01T18:00:00Z",
    "end_time": "2025-06-01T20:00:00Z",
    "ticket_price": 5000,
    "reward_amount": 200000,
}


def _client():
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.mark.asyncio
async def test_health():
    async with _client() as client:
        resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_match_ticket_settlement_flow(api_db):
    """Create match, buy, set score, end; then read back tickets and house wins."""
    async with _client() as client:
        resp = await client.post("/api/v1/matches", json=MATCH_BODY)
        assert resp.status_code == 200, resp.text
        match = resp.json()
        assert match["status"] == "pending"
        assert match["score"] == [0, 0]
        assert len(match["curvas"]) == 1
        match_id = match["id"]

        resp = await client.post(
            "/api/v1/tickets",
            json={"match_id": match_id, "quantity": 3, "buyer_email": "fan@example.com"},
        )
        assert resp.status_code == 200, resp.text
        ticket = resp.json()
        assert len(ticket["results_purchased"]) == 3
        assert ticket["payed_amount"] == 15000
        assert ticket["ticket_number"] == 1000

        resp = await client.put(f"/api/v1/matches/{match_id}/score", json={"score": [8, 1]})
        assert resp.status_code == 200
        assert resp.json()["score"] == [8, 1]

        resp = await client.post(f"/api/v1/matches/{match_id}/end")
        assert resp.status_code == 200, resp.text
        report = resp.json()
        assert report["winning_slot"] == "8.1"
        assert report["losers"] == [ticket["id"]]
        assert report["house_wins"] == ["high_score"]

        resp = await client.post(f"/api/v1/matches/{match_id}/end")
        assert resp.status_code == 409

        resp = await client.get(f"/api/v1/tickets/{ticket['id']}")
        assert resp.json()["status"] == "lost"

        resp = await client.get("/api/v1/house-wins", params={"match_id": match_id})
        entries = resp.json()["house_wins"]
        assert [e["reason"] for e in entries] == ["high_score"]
        assert entries[0]["house_winnings"] == 15000

        resp = await client.get(f"/api/v1/matches/{match_id}")
        assert resp.json()["status"] == "finished"
        assert all(c["status"] == "closed" for c in resp.json()["curvas"])
    await drain_notifications()


@pytest.mark.asyncio
async def test_error_statuses(api_db):
    async with _client() as client:
        resp = await client.get("/api/v1/matches/unknown")
        assert resp.status_code == 404
        assert "unknown" in resp.json()["detail"]

        match_id = (await client.post("/api/v1/matches", json=MATCH_BODY)).json()["id"]
        resp = await client.post("/api/v1/matches", json=MATCH_BODY)
        assert resp.status_code == 409

        resp = await client.post("/api/v1/tickets", json={"match_id": match_id, "quantity": 1})
        assert resp.status_code == 400

        resp = await client.post(
            "/api/v1/tickets",
            json={"match_id": match_id, "quantity": 0, "buyer_email": "x@example.com"},
        )
        assert resp.status_code == 422

        resp = await client.get("/api/v1/tickets")
        assert resp.status_code == 400

        naive = dict(MATCH_BODY, teams=["Cali", "Tolima"], start_date="2025-06-01T18:00:00")
        resp = await client.post("/api/v1/matches", json=naive)
        assert resp.status_code == 400


@pytest.mark.asyncio
async def test_curva_admin_and_status_override(api_db):
    async with _client() as client:
        match_id = (await client.post("/api/v1/matches", json=MATCH_BODY)).json()["id"]

        resp = await client.post(f"/api/v1/matches/{match_id}/curvas")
        assert resp.status_code == 200
        curva = resp.json()
        assert curva["position"] == 1
        assert len(curva["available_results"]) == 64

        resp = await client.put(f"/api/v1/matches/{match_id}/curvas/{curva['id']}/close")
        assert resp.json()["status"] == "closed"
        resp = await client.put(f"/api/v1/matches/{match_id}/curvas/{curva['id']}/close")
        assert resp.status_code == 409

        ticket = (
            await client.post(
                "/api/v1/tickets",
                json={
                    "match_id": match_id,
                    "quantity": 1,
                    "buyer_email": "fan@example.com",
                    "payment_reference": "ref-77",
                    "payment_status": "PENDING",
                },
            )
        ).json()

        resp = await client.put(f"/api/v1/tickets/{ticket['id']}/status", json={"status": "won"})
        assert resp.json()["status"] == "won"
        assert resp.json()["reward_amount"] == 200000
        resp = await client.put(f"/api/v1/tickets/{ticket['id']}/status", json={"status": "lost"})
        assert resp.status_code == 409
        resp = await client.put(
            f"/api/v1/tickets/{ticket['id']}/status", json={"status": "lost", "force": True}
        )
        assert resp.json()["status"] == "lost"

        resp = await client.post(
            "/api/v1/tickets/payments",
            json={"payment_reference": "ref-77", "payment_status": "APPROVED"},
        )
        assert resp.json()["payment_status"] == "APPROVED"

        resp = await client.put(f"/api/v1/matches/{match_id}/status", json={"status": "in_progress"})
        assert resp.json()["status"] == "in_progress"
    await drain_notifications()


@pytest.mark.asyncio
async def test_commission_routes(api_db):
    async with _client() as client:
        staff = (
            await client.post(
                "/api/v1/users",
                json={"name": "Seller", "email": "seller@example.com", "role": "staff"},
            )
        ).json()
        match_id = (await client.post("/api/v1/matches", json=MATCH_BODY)).json()["id"]
        resp = await client.post(
            "/api/v1/tickets",
            json={
                "match_id": match_id,
                "quantity": 2,
                "buyer_email": "fan@example.com",
                "sold_by": staff["id"],
            },
        )
        assert resp.status_code == 200, resp.text
        assert resp.json()["physical_sale"] is True
        assert (await client.post(f"/api/v1/matches/{match_id}/end")).status_code == 200

        resp = await client.get(f"/api/v1/commissions/staff/{staff['id']}")
        assert resp.status_code == 200
        rows = resp.json()["commissions"]
        assert [r["match_id"] for r in rows] == [match_id]
        assert rows[0]["total_amount_sold"] == 10000

        resp = await client.get("/api/v1/commissions", params={"match_id": match_id})
        assert [r["staff_id"] for r in resp.json()["commissions"]] == [staff["id"]]
        resp = await client.get(f"/api/v1/matches/{match_id}/commissions")
        assert len(resp.json()["commissions"]) == 1

        resp = await client.get("/api/v1/commissions/staff/unknown")
        assert resp.status_code == 404

        resp = await client.post(
            "/api/v1/users",
            json={"name": "Again", "email": "seller@example.com", "role": "staff"},
        )
        assert resp.status_code == 409


def test_purchase_body_example_uses_real_fields():
    """The documented purchase example is a valid body with a buyer."""
    from curvas.routes.api_v1.tickets import PurchaseBody

    example = PurchaseBody.model_config["json_schema_extra"]["example"]
    assert set(example) <= set(PurchaseBody.model_fields)
    body = PurchaseBody.model_validate(example)
    assert body.buyer_email == "ana@example.com"
    assert body.buyer_name == "Ana"
