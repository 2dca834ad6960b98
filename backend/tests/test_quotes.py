"""
Quote tests.

Verifies:
- Only clients create quotes, and client_id is always the caller
- Role-filtered visibility on list, detail and stats
- Boundary responses (404 with message, 400 naming the missing field)
- Explicit status changes follow the lifecycle
"""

import pytest

from cargobid.extensions import db
from cargobid.models import Quote
from cargobid.services import quote_service


QUOTE = {
    "origin": "São Paulo",
    "destination": "Rio",
    "weight": 100,
    "cargoType": "General",
}


class TestCreateQuote:

    def test_client_creates_open_quote(self, client, client_user, client_headers):
        resp = client.post("/api/quotes", json=QUOTE, headers=client_headers)
        assert resp.status_code == 201
        body = resp.get_json()
        assert body["status"] == "open"
        assert body["client_id"] == client_user.id
        assert body["weight"] == "100.00"
        assert body["cargo_type"] == "General"

    def test_client_id_from_body_ignored(self, client, client_user, other_client_user, client_headers):
        resp = client.post(
            "/api/quotes", json={**QUOTE, "client_id": other_client_user.id, "status": "closed"},
            headers=client_headers,
        )
        body = resp.get_json()
        assert body["client_id"] == client_user.id
        assert body["status"] == "open"

    def test_missing_origin(self, client, client_headers):
        payload = {k: v for k, v in QUOTE.items() if k != "origin"}
        resp = client.post("/api/quotes", json=payload, headers=client_headers)
        assert resp.status_code == 400
        assert "origin" in resp.get_json()["message"]

    @pytest.mark.parametrize("weight", [0, -5, "heavy"])
    def test_bad_weight(self, client, client_headers, weight):
        resp = client.post("/api/quotes", json={**QUOTE, "weight": weight}, headers=client_headers)
        assert resp.status_code == 400
        assert "weight" in resp.get_json()["message"]

    def test_deadline_and_volume(self, client, client_headers):
        resp = client.post(
            "/api/quotes",
            json={**QUOTE, "volume": "2.5", "deadline": "2026-11-01T12:00:00Z", "notes": "Fragile"},
            headers=client_headers,
        )
        body = resp.get_json()
        assert body["volume"] == "2.50"
        assert body["deadline"] == "2026-11-01T12:00:00Z"
        assert body["notes"] == "Fragile"

    def test_bad_deadline(self, client, client_headers):
        resp = client.post("/api/quotes", json={**QUOTE, "deadline": "next week"}, headers=client_headers)
        assert resp.status_code == 400

    @pytest.mark.parametrize("headers_fixture", ["carrier_headers", "admin_headers", "auditor_headers"])
    def test_only_clients_create(self, client, request, headers_fixture):
        headers = request.getfixturevalue(headers_fixture)
        resp = client.post("/api/quotes", json=QUOTE, headers=headers)
        assert resp.status_code == 401
        assert resp.get_data() == b""

    def test_creation_is_audited(self, client, client_user, client_headers):
        from cargobid.models import AuditLog
        client.post("/api/quotes", json=QUOTE, headers=client_headers)
        entry = db.session.query(AuditLog).one()
        assert entry.action == "CREATE_QUOTE"
        assert entry.user_id == client_user.id


class TestQuoteVisibility:

    def test_requires_auth(self, client):
        assert client.get("/api/quotes").status_code == 401

    def test_client_sees_only_own(self, client, client_headers, other_client_headers, open_quote):
        mine = client.get("/api/quotes", headers=client_headers).get_json()
        assert [q["id"] for q in mine] == [open_quote["id"]]
        assert mine[0]["client"]["username"] == "alice@x.com"
        assert mine[0]["bids"] == []

        theirs = client.get("/api/quotes", headers=other_client_headers).get_json()
        assert theirs == []

    def test_service_filter_by_client(self, client_user, other_client_user, open_quote):
        assert [q.id for q in quote_service.get_quotes(client_user)] == [open_quote["id"]]
        assert quote_service.get_quotes(other_client_user) == []

    def test_newest_first(self, client, client_headers, open_quote):
        second = client.post("/api/quotes", json={**QUOTE, "destination": "Recife"}, headers=client_headers)
        ids = [q["id"] for q in client.get("/api/quotes", headers=client_headers).get_json()]
        assert ids == [second.get_json()["id"], open_quote["id"]]

    def test_carrier_sees_all_but_closed(self, client, client_headers, carrier_headers, open_quote):
        closed = client.post("/api/quotes", json=QUOTE, headers=client_headers).get_json()
        client.post(f"/api/quotes/{closed['id']}/status", json={"status": "closed"}, headers=client_headers)

        ids = [q["id"] for q in client.get("/api/quotes", headers=carrier_headers).get_json()]
        assert ids == [open_quote["id"]]

        resp = client.get(f"/api/quotes/{closed['id']}", headers=carrier_headers)
        assert resp.status_code == 404

    @pytest.mark.parametrize("headers_fixture", ["admin_headers", "auditor_headers"])
    def test_admin_and_auditor_see_everything(self, client, request, client_headers, headers_fixture, open_quote):
        closed = client.post("/api/quotes", json=QUOTE, headers=client_headers).get_json()
        client.post(f"/api/quotes/{closed['id']}/status", json={"status": "closed"}, headers=client_headers)

        headers = request.getfixturevalue(headers_fixture)
        ids = {q["id"] for q in client.get("/api/quotes", headers=headers).get_json()}
        assert ids == {open_quote["id"], closed["id"]}


class TestQuoteDetail:

    def test_missing_quote_404_with_message(self, client, client_headers):
        resp = client.get("/api/quotes/99999", headers=client_headers)
        assert resp.status_code == 404
        assert resp.get_json()["message"] == "Quote not found"

    def test_other_clients_quote_hidden(self, client, other_client_headers, open_quote):
        resp = client.get(f"/api/quotes/{open_quote['id']}", headers=other_client_headers)
        assert resp.status_code == 404

    def test_detail_includes_bids_with_carrier(self, client, client_headers, carrier_headers, open_quote):
        client.post(
            f"/api/quotes/{open_quote['id']}/bids",
            json={"amount": 500, "estimatedDays": 3},
            headers=carrier_headers,
        )
        body = client.get(f"/api/quotes/{open_quote['id']}", headers=client_headers).get_json()
        assert body["client"]["id"] == open_quote["client_id"]
        assert len(body["bids"]) == 1
        assert body["bids"][0]["carrier"]["username"] == "bob@y.com"
        assert "password" not in body["bids"][0]["carrier"]

    def test_winning_carrier_still_sees_closed_quote(
        self, client, client_headers, carrier_headers, other_carrier_headers, open_quote
    ):
        bid = client.post(
            f"/api/quotes/{open_quote['id']}/bids",
            json={"amount": 500, "estimated_days": 3},
            headers=carrier_headers,
        ).get_json()
        client.post(f"/api/bids/{bid['id']}/accept", headers=client_headers)

        assert client.get(f"/api/quotes/{open_quote['id']}", headers=carrier_headers).status_code == 200
        assert client.get(
            f"/api/quotes/{open_quote['id']}", headers=other_carrier_headers
        ).status_code == 404


class TestQuoteStats:

    def test_counts_per_status(self, client, client_headers, carrier_headers, open_quote):
        second = client.post("/api/quotes", json=QUOTE, headers=client_headers).get_json()
        client.post(
            f"/api/quotes/{second['id']}/bids",
            json={"amount": 10, "estimated_days": 1},
            headers=carrier_headers,
        )

        stats = client.get("/api/quotes/stats", headers=client_headers).get_json()
        assert stats["total"] == 2
        assert stats["by_status"] == {"open": 1, "responded": 1, "negotiation": 0, "closed": 0}

    def test_stats_follow_visibility(self, client, other_client_headers, open_quote):
        stats = client.get("/api/quotes/stats", headers=other_client_headers).get_json()
        assert stats["total"] == 0


class TestQuoteStatus:

    def test_owner_moves_through_lifecycle(self, client, client_headers, carrier_headers, open_quote):
        quote_id = open_quote["id"]
        client.post(
            f"/api/quotes/{quote_id}/bids", json={"amount": 10, "estimated_days": 1}, headers=carrier_headers
        )

        resp = client.post(f"/api/quotes/{quote_id}/status", json={"status": "negotiation"}, headers=client_headers)
        assert resp.status_code == 200
        assert resp.get_json()["status"] == "negotiation"

        resp = client.post(f"/api/quotes/{quote_id}/status", json={"status": "closed"}, headers=client_headers)
        assert resp.get_json()["status"] == "closed"

    def test_backwards_move_rejected(self, client, client_headers, open_quote):
        quote_id = open_quote["id"]
        client.post(f"/api/quotes/{quote_id}/status", json={"status": "closed"}, headers=client_headers)
        resp = client.post(f"/api/quotes/{quote_id}/status", json={"status": "open"}, headers=client_headers)
        assert resp.status_code == 400

    def test_open_cannot_skip_to_negotiation(self, client, client_headers, open_quote):
        resp = client.post(
            f"/api/quotes/{open_quote['id']}/status", json={"status": "negotiation"}, headers=client_headers
        )
        assert resp.status_code == 400

    def test_unknown_status(self, client, client_headers, open_quote):
        resp = client.post(
            f"/api/quotes/{open_quote['id']}/status", json={"status": "lost"}, headers=client_headers
        )
        assert resp.status_code == 400

    def test_non_owner_client_gets_404(self, client, other_client_headers, open_quote):
        resp = client.post(
            f"/api/quotes/{open_quote['id']}/status", json={"status": "closed"}, headers=other_client_headers
        )
        assert resp.status_code == 404

    def test_admin_can_close(self, client, admin_headers, open_quote):
        resp = client.post(
            f"/api/quotes/{open_quote['id']}/status", json={"status": "closed"}, headers=admin_headers
        )
        assert resp.status_code == 200
        db.session.expire_all()
        assert db.session.get(Quote, open_quote["id"]).status == "closed"

    def test_carrier_cannot_change_status(self, client, carrier_headers, open_quote):
        resp = client.post(
            f"/api/quotes/{open_quote['id']}/status", json={"status": "closed"}, headers=carrier_headers
        )
        assert resp.status_code == 401
