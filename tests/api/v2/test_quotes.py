"""
Tests for the quotes API (/api/v2/quotes).
"""
import pytest

from app.schemas.partner import PartnerCreate
from tests.conftest import login
from tests.factories import QuoteConfigFactory, QuoteFactory

QUOTES_PREFIX = "/api/v2/quotes"


async def _partner_quote(client, headers, **overrides) -> dict:
    response = await client.post(
        "/api/v2/calculator/AWS42/quotes", json=QuoteFactory(**overrides), headers=headers
    )
    assert response.status_code == 201, response.text
    return response.json()


async def _house_quote(client, headers, **overrides) -> dict:
    response = await client.post(QUOTES_PREFIX, json=QuoteFactory(**overrides), headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
class TestHouseQuotes:
    async def test_create_house_quote(self, client, admin_headers):
        """Test that a superadmin can create a house quote."""
        quote = await _house_quote(client, admin_headers, config=QuoteConfigFactory(model="x", warranty="warranty5"))
        assert quote["quote_number"].startswith("AQ-")
        assert quote["partner_id"] is None
        assert quote["final_total"] == 29999 + 1550 + 2999

    async def test_partner_user_cannot_create_house_quote(self, client, partner_headers):
        """Partner users cannot create house quotes."""
        response = await client.post(QUOTES_PREFIX, json=QuoteFactory(), headers=partner_headers)
        assert response.status_code == 403


@pytest.mark.asyncio
class TestQuoteVisibility:
    async def test_listing_is_scoped(self, client, admin_headers, partner_headers):
        """Test that quote listings are scoped to the caller's partner."""
        mine = await _partner_quote(client, partner_headers)
        house = await _house_quote(client, admin_headers)

        listing = (await client.get(QUOTES_PREFIX, headers=admin_headers)).json()
        assert listing["total"] == 2
        assert [q["quote_number"] for q in listing["items"]] == [house["quote_number"], mine["quote_number"]]

        filtered = (await client.get(QUOTES_PREFIX, params={"partner_code": "aws42"}, headers=admin_headers)).json()
        assert [q["quote_number"] for q in filtered["items"]] == [mine["quote_number"]]

        own = (await client.get(QUOTES_PREFIX, headers=partner_headers)).json()
        assert [q["quote_number"] for q in own["items"]] == [mine["quote_number"]]

    async def test_other_quotes_read_as_missing(self, client, directory, auth_service, admin_headers, partner_headers):
        """Another partner's quote reads as not found."""
        house = await _house_quote(client, admin_headers)
        response = await client.get(f"{QUOTES_PREFIX}/{house['quote_number']}", headers=partner_headers)
        assert response.status_code == 404

        mine = await _partner_quote(client, partner_headers)
        await directory.create(PartnerCreate(partner_code="RIO01", company_name="Rio Water"))
        await auth_service.create_user("sales@rio.example.com", "riopassword123", partner_code="RIO01")
        rio_headers = await login(client, "sales@rio.example.com", "riopassword123")

        response = await client.get(f"{QUOTES_PREFIX}/{mine['quote_number']}", headers=rio_headers)
        assert response.status_code == 404
        response = await client.post(
            f"{QUOTES_PREFIX}/{mine['quote_number']}/status", json={"status": "sent"}, headers=rio_headers
        )
        assert response.status_code == 404

    async def test_unknown_quote(self, client, admin_headers):
        """Test that an unknown quote returns 404."""
        response = await client.get(f"{QUOTES_PREFIX}/AQ-20260101-ZZZZZZ", headers=admin_headers)
        assert response.status_code == 404


@pytest.mark.asyncio
class TestQuoteWorkflow:
    async def test_send_accept_order(self, client, partner_headers):
        """Test the send, accept and order workflow."""
        number = (await _partner_quote(client, partner_headers))["quote_number"]

        response = await client.post(f"{QUOTES_PREFIX}/{number}/status", json={"status": "sent"}, headers=partner_headers)
        assert response.status_code == 200
        assert response.json()["send_count"] == 1
        assert response.json()["sent_at"] is not None

        response = await client.post(f"{QUOTES_PREFIX}/{number}/resend", headers=partner_headers)
        assert response.json()["send_count"] == 2

        for status in ("accepted", "ordered"):
            response = await client.post(
                f"{QUOTES_PREFIX}/{number}/status", json={"status": status}, headers=partner_headers
            )
            assert response.status_code == 200
            assert response.json()["status"] == status

    async def test_invalid_transition(self, client, partner_headers):
        """Test that an invalid status change is rejected."""
        number = (await _partner_quote(client, partner_headers))["quote_number"]
        response = await client.post(
            f"{QUOTES_PREFIX}/{number}/status", json={"status": "ordered"}, headers=partner_headers
        )
        assert response.status_code == 400
        assert response.json()["code"] == "BIZ_001"

    async def test_unknown_status(self, client, partner_headers):
        """Test that an unknown status is rejected."""
        number = (await _partner_quote(client, partner_headers))["quote_number"]
        response = await client.post(
            f"{QUOTES_PREFIX}/{number}/status", json={"status": "lost"}, headers=partner_headers
        )
        assert response.status_code == 422

    async def test_resend_requires_sent(self, client, partner_headers):
        """Test that only a sent quote can be resent."""
        number = (await _partner_quote(client, partner_headers))["quote_number"]
        response = await client.post(f"{QUOTES_PREFIX}/{number}/resend", headers=partner_headers)
        assert response.status_code == 400

    async def test_approval_gate(self, client, directory, partner, admin_headers, partner_headers):
        """Test that a quote needing approval cannot be sent until approved."""
        await directory.update_features(partner, {"requireApproval": True})
        number = (await _partner_quote(client, partner_headers))["quote_number"]

        response = await client.post(f"{QUOTES_PREFIX}/{number}/status", json={"status": "sent"}, headers=partner_headers)
        assert response.status_code == 400

        response = await client.post(f"{QUOTES_PREFIX}/{number}/approve", headers=partner_headers)
        assert response.status_code == 403

        response = await client.post(f"{QUOTES_PREFIX}/{number}/approve", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["approved_at"] is not None

        response = await client.post(f"{QUOTES_PREFIX}/{number}/status", json={"status": "sent"}, headers=partner_headers)
        assert response.status_code == 200


@pytest.mark.asyncio
class TestQuoteEdits:
    async def test_notes_editable(self, client, partner_headers):
        """Test that notes can be edited."""
        number = (await _partner_quote(client, partner_headers))["quote_number"]
        response = await client.patch(
            f"{QUOTES_PREFIX}/{number}", json={"notes": "Call before delivery"}, headers=partner_headers
        )
        assert response.status_code == 200
        assert response.json()["notes"] == "Call before delivery"

    @pytest.mark.parametrize("field", ["final_total", "quote_config", "partner_pricing", "status"])
    async def test_snapshot_not_editable(self, client, partner_headers, field):
        """Test that the priced snapshot cannot be edited."""
        quote = await _partner_quote(client, partner_headers)
        response = await client.patch(
            f"{QUOTES_PREFIX}/{quote['quote_number']}", json={field: None}, headers=partner_headers
        )
        assert response.status_code == 422

        unchanged = (await client.get(f"{QUOTES_PREFIX}/{quote['quote_number']}", headers=partner_headers)).json()
        assert unchanged["final_total"] == quote["final_total"]
        assert unchanged["quote_config"] == quote["quote_config"]

    async def test_delete(self, client, admin_headers, partner_headers):
        """Test deleting a quote."""
        number = (await _partner_quote(client, partner_headers))["quote_number"]

        assert (await client.delete(f"{QUOTES_PREFIX}/{number}", headers=partner_headers)).status_code == 403
        assert (await client.delete(f"{QUOTES_PREFIX}/{number}", headers=admin_headers)).status_code == 204
        assert (await client.get(f"{QUOTES_PREFIX}/{number}", headers=admin_headers)).status_code == 404
