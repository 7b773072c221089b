"""Partner directory.

CRUD over the ``partners`` table plus the helpers the superadmin roster and
the partner portal need: code generation, search and roster stats.

Partners are never hard-deleted; deactivate them with ``is_active=False``.
"""

import logging
import random
import re
from typing import Any, Iterable, List, Optional
from uuid import UUID

from app.exceptions import (
    ConflictError,
    DuplicateCodeError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from app.models.partner import Partner, utcnow
from app.schemas.partner import PartnerCreate
from app.services.feature_config import merge_feature_update
from app.services.pricing_overrides import normalize_overrides
from app.services.record_store import RecordStore

logger = logging.getLogger(__name__)

LEGAL_SUFFIXES = re.compile(r"\b(LLC|Inc|Corp|Corporation|Company|Co|Ltd|Limited)\b", re.IGNORECASE)
PARTNER_CODE_PATTERN = re.compile(r"^[A-Z0-9_]+$")
PARTNER_CODE_MAX_LENGTH = 32

# Attempts at a free generated code before giving up
GENERATED_CODE_ATTEMPTS = 5

EDITABLE_FIELDS = {
    "company_name",
    "contact_name",
    "contact_email",
    "contact_phone",
    "logo_url",
    "primary_color",
    "accent_color",
    "display_address",
    "display_phone",
    "display_email",
    "display_website",
    "pricing_overrides",
    "feature_config",
    "is_active",
    "can_create_quotes",
    "can_edit_pricing",
    "notes",
}

# Booleans stored NOT NULL
REQUIRED_FLAGS = ("is_active", "can_create_quotes", "can_edit_pricing")


def generate_partner_code(company_name: str, suffix: Optional[int] = None) -> str:
    """Suggest a partner code from a company name.

    Legal suffixes are dropped, then a single remaining word gives its first
    four characters and several words give their initials (at most four).
    A two-digit suffix (random 00-99 unless given) keeps suggestions apart.

    >>> generate_partner_code("ABC Water Solutions", suffix=7)
    'AWS07'
    """
    stripped = LEGAL_SUFFIXES.sub(" ", company_name or "")
    words = [re.sub(r"[^A-Za-z0-9]", "", word) for word in stripped.split()]
    words = [word for word in words if word]
    if not words:
        raise ValidationError(
            "Company name has no letters or digits to build a partner code from",
            errors=[{"field": "company_name", "message": "Cannot derive a code", "type": "value_error"}],
        )

    if len(words) == 1:
        base = words[0][:4]
    else:
        base = "".join(word[0] for word in words[:4])

    if suffix is None:
        suffix = random.randint(0, 99)
    return f"{base.upper()}{suffix:02d}"


def normalize_partner_code(code: str) -> str:
    """Canonical form of a submitted code; raises ``ValidationError`` if malformed."""
    normalized = (code or "").strip().upper()
    if not normalized or len(normalized) > PARTNER_CODE_MAX_LENGTH or not PARTNER_CODE_PATTERN.match(normalized):
        raise ValidationError(
            "Partner code may only contain A-Z, 0-9 and underscores",
            errors=[{"field": "partner_code", "message": "Invalid partner code", "type": "value_error"}],
        )
    return normalized


def search(partners: Iterable[Partner], query: Optional[str] = None, status: str = "all") -> List[Partner]:
    """Filter the roster by status (all/active/inactive) and free-text query."""
    if status not in ("all", "active", "inactive"):
        raise ValidationError(f"Unknown status filter '{status}'")

    needle = (query or "").strip().lower()
    results = []
    for partner in partners:
        if status == "active" and not partner.is_active:
            continue
        if status == "inactive" and partner.is_active:
            continue
        if needle:
            haystack = (
                partner.company_name,
                partner.partner_code,
                partner.contact_email,
                partner.contact_name,
            )
            if not any(needle in (value or "").lower() for value in haystack):
                continue
        results.append(partner)
    return results


def partner_stats(partners: Iterable[Partner]) -> dict:
    partners = list(partners)
    active = sum(1 for p in partners if p.is_active)
    return {
        "total": len(partners),
        "active": active,
        "inactive": len(partners) - active,
        "can_create_quotes": sum(1 for p in partners if p.can_create_quotes),
        "can_edit_pricing": sum(1 for p in partners if p.can_edit_pricing),
    }


def _merge_overrides(stored: Optional[dict], update: dict) -> dict:
    """Leaf-level merge of a normalized override update over stored overrides.

    A ``None`` leaf in the update clears that leaf back to the default.
    """
    merged = {category: dict(values) for category, values in (stored or {}).items() if isinstance(values, dict)}
    for category, values in update.items():
        target = merged.setdefault(category, {})
        for key, value in values.items():
            if isinstance(value, dict):
                nested = dict(target.get(key) or {})
                for field, leaf in value.items():
                    if leaf is None:
                        nested.pop(field, None)
                    else:
                        nested[field] = leaf
                target[key] = nested
            elif value is None:
                target.pop(key, None)
            else:
                target[key] = value
    return {category: values for category, values in merged.items() if values}


class PartnerDirectory:
    """Partner records on top of the record store."""

    def __init__(self, store: RecordStore):
        self.store = store

    async def list_all(self) -> List[Partner]:
        """Every partner, ordered by company name."""
        return list(await self.store.list(Partner, order_by="company_name"))

    async def get_by_code(self, partner_code: str) -> Partner:
        code = (partner_code or "").strip().upper()
        partner = await self.store.get(Partner, partner_code=code)
        if partner is None:
            raise NotFoundError("Partner", code)
        return partner

    async def get(self, partner_id: UUID) -> Partner:
        partner = await self.store.get(Partner, id=partner_id)
        if partner is None:
            raise NotFoundError("Partner", str(partner_id))
        return partner

    async def _code_taken(self, code: str) -> bool:
        return any(partner.partner_code == code for partner in await self.list_all())

    async def suggest_code(self, company_name: str) -> str:
        """A generated code not yet used by any partner."""
        for _ in range(GENERATED_CODE_ATTEMPTS):
            code = generate_partner_code(company_name)
            if not await self._code_taken(code):
                return code
        raise ConflictError("Could not find a free partner code, please choose one")

    async def create(self, draft: PartnerCreate) -> Partner:
        """Create a partner.

        The whole roster is checked for the code before the insert, and a
        unique-constraint violation at insert time is reported the same way,
        so a duplicate code never produces a second record.
        """
        if not draft.company_name.strip():
            raise ValidationError(
                "Company name is required",
                errors=[{"field": "company_name", "message": "Required", "type": "missing"}],
            )
        nulled = sorted(name for name in REQUIRED_FLAGS if name in fields and fields[name] is None)
        if nulled:
            raise ValidationError(
                "Access flags cannot be null",
                errors=[{"field": name, "message": "Must be true or false", "type": "bool_type"} for name in nulled],
            )

        if draft.partner_code:
            code = normalize_partner_code(draft.partner_code)
            if await self._code_taken(code):
                raise DuplicateCodeError(code)
        else:
            code = await self.suggest_code(draft.company_name)

        values = draft.model_dump(exclude_none=True, exclude={"partner_code", "feature_config", "pricing_overrides"})
        values["partner_code"] = code
        values["company_name"] = draft.company_name.strip()
        if draft.feature_config is not None:
            values["feature_config"] = merge_feature_update(None, draft.feature_config.as_update())
        if draft.pricing_overrides:
            values["pricing_overrides"] = _merge_overrides(None, normalize_overrides(draft.pricing_overrides))

        try:
            partner = await self.store.insert(Partner, values)
        except ConflictError:
            raise DuplicateCodeError(code)

        logger.info(f"Created partner {partner.partner_code}")
        return partner

    async def update(self, partner_id: UUID, fields: dict[str, Any]) -> Partner:
        """Apply an edit. The partner code can be echoed back but not changed."""
        current = await self.get(partner_id)
        fields = dict(fields)

        if "partner_code" in fields:
            submitted = fields.pop("partner_code")
            if submitted is not None and normalize_partner_code(submitted) != current.partner_code:
                raise ValidationError(
                    "Partner code cannot be changed",
                    errors=[{"field": "partner_code", "message": "Immutable", "type": "value_error"}],
                )

        unknown = set(fields) - EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update fields: {', '.join(sorted(unknown))}")
        if "company_name" in fields and not (fields["company_name"] or "").strip():
            raise ValidationError(
                "Company name is required",
                errors=[{"field": "company_name", "message": "Required", "type": "missing"}],
            )

        fields["updated_at"] = utcnow()
        partner = await self.store.update(Partner, current.id, fields)
        if partner is None:
            raise NotFoundError("Partner", str(partner_id))
        logger.info(f"Updated partner {partner.partner_code}: {', '.join(sorted(set(fields) - {'updated_at'}))}")
        return partner

    async def update_features(self, partner: Partner, update: dict) -> Partner:
        """Merge a partial feature config over the stored one."""
        merged = merge_feature_update(partner.feature_config, update)
        return await self.update(partner.id, {"feature_config": merged or None})

    async def update_pricing(self, partner: Partner, raw: dict) -> Partner:
        """Merge a pricing-tab submission over the stored overrides."""
        if not partner.can_edit_pricing:
            raise ForbiddenError("This partner is not allowed to edit pricing")
        merged = _merge_overrides(partner.pricing_overrides, normalize_overrides(raw))
        return await self.update(partner.id, {"pricing_overrides": merged or None})

    async def reset_pricing(self, partner: Partner) -> Partner:
        return await self.update(partner.id, {"pricing_overrides": None})
