"""Tests for quote numbering, persistence and the status workflow."""
import re
from datetime import date

import pytest

from app.exceptions import BusinessRuleError, ConflictError, NotFoundError, ValidationError
from app.services import quote_store
from app.services.quote_store import QuoteStore, generate_quote_number, quote_stats


def _values(**overrides) -> dict:
    values = {
        "customer_name": "Dana Reyes",
        "quote_config": {"model": "standard"},
        "original_total": 18594.0,
        "discount_amount": 0.0,
        "final_total": 18594.0,
    }
    values.update(overrides)
    return values


@pytest.fixture
def quotes(store):
    return QuoteStore(store)


class TestGenerateQuoteNumber:
    def test_partner_prefix(self):
        """Test that partner quote numbers use the partner prefix."""
        number = generate_quote_number("AWS42", today=date(2026, 1, 18))
        assert re.match(r"^AW-20260118-[0-9A-Z]{6}$", number)

    @pytest.mark.parametrize("code", [None, "", "AQUARIA_HQ", "aquaria_hq"])
    def test_house_prefix(self, code):
        """Test the house quote prefix."""
        assert generate_quote_number(code).startswith("AQ-")

    def test_numbers_differ(self):
        """Test that generated numbers differ."""
        numbers = {generate_quote_number("AWS42") for _ in range(50)}
        assert len(numbers) == 50


class _Q:
    def __init__(self, status, final_total):
        self.status = status
        self.final_total = final_total


def test_quote_stats():
    """Test the quote counts by status."""
    stats = quote_stats([_Q("draft", 100.10), _Q("sent", 200.20), _Q("sent", 0), _Q("ordered", 50)])
    assert stats == {
        "total": 4,
        "total_value": 350.3,
        "draft": 1,
        "sent": 2,
        "accepted": 0,
        "ordered": 1,
    }


@pytest.mark.asyncio
class TestQuoteStore:
    async def test_save_assigns_number_and_defaults(self, quotes, partner):
        """Test that saving assigns a number and defaults."""
        quote = await quotes.save(_values(partner_id=partner.id), partner_code=partner.partner_code)
        assert quote.quote_number.startswith("AW-")
        assert quote.status == "draft"
        assert quote.send_count == 0
        assert quote.requires_approval is False

    async def test_save_rejects_unknown_status(self, quotes):
        """Test that saving with an unknown status is rejected."""
        with pytest.raises(ValidationError):
            await quotes.save(_values(status="lost"))

    async def test_explicit_duplicate_number_conflicts(self, quotes):
        """An explicit duplicate quote number is a conflict."""
        await quotes.save(_values(quote_number="AQ-20260118-AAAAAA"))
        with pytest.raises(ConflictError):
            await quotes.save(_values(quote_number="AQ-20260118-AAAAAA"))

    async def test_number_collision_is_retried(self, quotes, monkeypatch):
        """Test that a generated number collision is retried."""
        await quotes.save(_values(quote_number="AQ-20260118-AAAAAA"))
        numbers = iter(["AQ-20260118-AAAAAA", "AQ-20260118-BBBBBB"])
        monkeypatch.setattr(quote_store, "generate_quote_number", lambda code=None: next(numbers))

        quote = await quotes.save(_values())
        assert quote.quote_number == "AQ-20260118-BBBBBB"

    async def test_get_by_number(self, quotes):
        """Test looking up a quote by number."""
        saved = await quotes.save(_values())
        assert (await quotes.get_by_number(saved.quote_number)).id == saved.id
        with pytest.raises(NotFoundError):
            await quotes.get_by_number("AQ-19990101-ZZZZZZ")

    async def test_listing(self, quotes, partner):
        """Test listing quotes with filters."""
        first = await quotes.save(_values(partner_id=partner.id), partner_code="AWS42")
        second = await quotes.save(_values(partner_id=partner.id), partner_code="AWS42")
        house = await quotes.save(_values())

        mine = await quotes.list_for_partner(partner.id)
        assert [q.id for q in mine] == [second.id, first.id]
        assert {q.id for q in await quotes.list_all()} == {first.id, second.id, house.id}
        assert len(await quotes.list_all(partner_id=partner.id)) == 2

    @pytest.mark.parametrize("field", ["quote_number", "quote_config", "final_total", "partner_pricing"])
    async def test_snapshot_is_immutable(self, quotes, field):
        """Test that snapshot fields cannot be updated."""
        quote = await quotes.save(_values())
        with pytest.raises(ValidationError) as exc_info:
            await quotes.update(quote.id, {field: None})
        assert exc_info.value.errors[0]["field"] == field

    async def test_notes_are_editable(self, quotes):
        """Test that notes can be updated."""
        quote = await quotes.save(_values())
        updated = await quotes.update(quote.id, {"notes": "Gate code 1234"})
        assert updated.notes == "Gate code 1234"
        assert updated.final_total == quote.final_total

    async def test_delete(self, quotes):
        """Test deleting a quote."""
        quote = await quotes.save(_values())
        assert await quotes.delete(quote.id) is True
        assert await quotes.delete(quote.id) is False

    async def test_full_workflow(self, quotes):
        """Test a quote through its whole lifecycle."""
        quote = await quotes.save(_values())

        quote = await quotes.transition(quote, "sent")
        assert quote.status == "sent"
        assert quote.send_count == 1
        assert quote.sent_at is not None

        quote = await quotes.transition(quote, "sent")
        assert quote.send_count == 2

        quote = await quotes.transition(quote, "accepted")
        quote = await quotes.transition(quote, "ordered")
        assert quote.status == "ordered"
        assert quote.send_count == 2

    @pytest.mark.parametrize(
        "path, bad",
        [
            ([], "accepted"),
            ([], "ordered"),
            ([], "draft"),
            (["sent"], "draft"),
            (["sent"], "ordered"),
            (["sent", "accepted"], "sent"),
            (["sent", "accepted", "ordered"], "sent"),
            (["sent", "accepted", "ordered"], "accepted"),
        ],
    )
    async def test_invalid_transitions(self, quotes, path, bad):
        """Test that invalid transitions are rejected."""
        quote = await quotes.save(_values())
        for status in path:
            quote = await quotes.transition(quote, status)
        with pytest.raises(BusinessRuleError):
            await quotes.transition(quote, bad)

    async def test_unknown_status(self, quotes):
        """Test that an unknown target status is rejected."""
        quote = await quotes.save(_values())
        with pytest.raises(ValidationError):
            await quotes.transition(quote, "lost")

    async def test_approval_required_before_send(self, quotes):
        """A quote needing approval cannot be sent before it is approved."""
        quote = await quotes.save(_values(requires_approval=True))
        with pytest.raises(BusinessRuleError):
            await quotes.transition(quote, "sent")

        quote = await quotes.approve(quote)
        assert quote.approved_at is not None
        again = await quotes.approve(quote)
        assert again.approved_at == quote.approved_at

        quote = await quotes.transition(quote, "sent")
        assert quote.status == "sent"

    async def test_approve_when_not_required(self, quotes):
        """Test approving a quote that does not need it."""
        quote = await quotes.save(_values())
        with pytest.raises(BusinessRuleError):
            await quotes.approve(quote)
