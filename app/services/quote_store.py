"""Quote store.

Saved quotes are priced snapshots: ``quote_config``, ``partner_pricing`` and
the three totals are written once by ``save`` and refused by ``update``.
Only the workflow fields (status, notes, approval and delivery tracking)
change afterwards.
"""

import logging
import secrets
import string
from datetime import date, datetime
from typing import Any, Iterable, List, Optional
from uuid import UUID

from app.config import settings
from app.exceptions import BusinessRuleError, ConflictError, NotFoundError, ValidationError
from app.models.partner import utcnow
from app.models.quote import QUOTE_STATUSES, Quote
from app.services.record_store import RecordStore

logger = logging.getLogger(__name__)

HOUSE_PREFIX = "AQ"
QUOTE_SUFFIX_ALPHABET = string.digits + string.ascii_uppercase
QUOTE_SUFFIX_LENGTH = 6

IMMUTABLE_FIELDS = frozenset(
    {
        "quote_number",
        "quote_config",
        "original_total",
        "discount_amount",
        "final_total",
        "partner_pricing",
    }
)

# current status -> statuses it may move to
TRANSITIONS = {
    "draft": {"sent"},
    "sent": {"sent", "accepted"},
    "accepted": {"ordered"},
    "ordered": set(),
}

# Attempts at a free quote number before surfacing the conflict
SAVE_ATTEMPTS = 3


def generate_quote_number(partner_code: Optional[str] = None, today: Optional[date] = None) -> str:
    """``<PREFIX>-<YYYYMMDD>-<6 base36 chars>``.

    The prefix is the first two characters of the partner code, or ``AQ``
    for house quotes (no partner, or the house partner code).
    """
    code = (partner_code or "").strip().upper()
    if not code or code == settings.HOUSE_PARTNER_CODE.upper():
        prefix = HOUSE_PREFIX
    else:
        prefix = code[:2]
    today = today or utcnow().date()
    suffix = "".join(secrets.choice(QUOTE_SUFFIX_ALPHABET) for _ in range(QUOTE_SUFFIX_LENGTH))
    return f"{prefix}-{today:%Y%m%d}-{suffix}"


def quote_stats(quotes: Iterable[Quote]) -> dict:
    """Counts and total value for the partner portal header."""
    quotes = list(quotes)
    return {
        "total": len(quotes),
        "total_value": round(sum(q.final_total or 0 for q in quotes), 2),
        "draft": sum(1 for q in quotes if q.status == "draft"),
        "sent": sum(1 for q in quotes if q.status == "sent"),
        "accepted": sum(1 for q in quotes if q.status == "accepted"),
        "ordered": sum(1 for q in quotes if q.status == "ordered"),
    }


class QuoteStore:
    """Quote records on top of the record store."""

    def __init__(self, store: RecordStore):
        self.store = store

    async def save(self, quote: dict, partner_code: Optional[str] = None) -> Quote:
        """Persist a new quote, assigning a quote number when none is given."""
        values = dict(quote)
        values.setdefault("status", "draft")
        if values["status"] not in QUOTE_STATUSES:
            raise ValidationError(f"Unknown quote status '{values['status']}'")

        explicit_number = "quote_number" in values
        for attempt in range(SAVE_ATTEMPTS):
            if not explicit_number:
                values["quote_number"] = generate_quote_number(partner_code)
            try:
                saved = await self.store.insert(Quote, values)
                break
            except ConflictError:
                if explicit_number or attempt == SAVE_ATTEMPTS - 1:
                    raise
                logger.warning("Quote number collision, regenerating")

        logger.info(f"Saved quote {saved.quote_number} (partner {saved.partner_id or 'house'})")
        return saved

    async def get_by_number(self, quote_number: str) -> Quote:
        quote = await self.store.get(Quote, quote_number=quote_number)
        if quote is None:
            raise NotFoundError("Quote", quote_number)
        return quote

    async def list_for_partner(self, partner_id: UUID) -> List[Quote]:
        """A partner's quotes, newest first."""
        return list(
            await self.store.list(Quote, {"partner_id": partner_id}, order_by="created_at", descending=True)
        )

    async def list_all(self, partner_id: Optional[UUID] = None) -> List[Quote]:
        filters = {"partner_id": partner_id} if partner_id else None
        return list(await self.store.list(Quote, filters, order_by="created_at", descending=True))

    async def update(self, quote_id: UUID, fields: dict[str, Any]) -> Quote:
        """Update workflow fields. Pricing snapshot fields are immutable."""
        touched = IMMUTABLE_FIELDS.intersection(fields)
        if touched:
            raise ValidationError(
                "Quote pricing snapshot cannot be modified",
                errors=[
                    {"field": field, "message": "Immutable after creation", "type": "value_error"}
                    for field in sorted(touched)
                ],
            )
        if "status" in fields and fields["status"] not in QUOTE_STATUSES:
            raise ValidationError(f"Unknown quote status '{fields['status']}'")

        values = dict(fields)
        values["updated_at"] = utcnow()
        quote = await self.store.update(Quote, quote_id, values)
        if quote is None:
            raise NotFoundError("Quote", str(quote_id))
        return quote

    async def delete(self, quote_id: UUID) -> bool:
        deleted = await self.store.delete(Quote, quote_id)
        if deleted:
            logger.info(f"Deleted quote {quote_id}")
        return deleted

    async def transition(self, quote: Quote, new_status: str) -> Quote:
        """Move a quote along draft -> sent -> accepted -> ordered.

        Sending an already sent quote is a resend: it bumps ``send_count``
        and ``sent_at``. Quotes that require approval cannot be sent until
        approved.
        """
        if new_status not in QUOTE_STATUSES:
            raise ValidationError(f"Unknown quote status '{new_status}'")
        if new_status not in TRANSITIONS[quote.status]:
            raise BusinessRuleError(f"Cannot move quote from {quote.status} to {new_status}")

        fields: dict[str, Any] = {"status": new_status}
        if new_status == "sent":
            if quote.requires_approval and quote.approved_at is None:
                raise BusinessRuleError("Quote requires approval before it can be sent")
            fields["sent_at"] = utcnow()
            fields["send_count"] = (quote.send_count or 0) + 1

        updated = await self.update(quote.id, fields)
        logger.info(f"Quote {quote.quote_number}: {quote.status} -> {new_status}")
        return updated

    async def approve(self, quote: Quote) -> Quote:
        if not quote.requires_approval:
            raise BusinessRuleError("Quote does not require approval")
        if quote.approved_at is not None:
            return quote
        approved_at: datetime = utcnow()
        return await self.update(quote.id, {"approved_at": approved_at})
