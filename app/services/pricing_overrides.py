"""Partner pricing override resolution.

A partner's ``pricing_overrides`` is a partial copy of the default price
table. Resolution is per leaf: a present numeric leaf replaces the default
leaf, anything unset (missing, ``None``, blank string) keeps the default.
A category appearing in the overrides never replaces the whole category.
"""

import logging
import math
from typing import Any, Optional

from app.exceptions import ValidationError
from app.models.partner import Partner
from app.schemas.pricing import PriceTable
from app.services.catalog import DEFAULT_PRICING, FLAT_PRICE_CATEGORIES, MODEL_PRICE_FIELDS

logger = logging.getLogger(__name__)


def coerce_price(value: Any) -> Optional[float]:
    """Return the numeric value of an override leaf, or ``None`` when unset.

    Blank strings and ``None`` are unset, never zero. Numeric strings are
    accepted because form inputs are stored as typed. Booleans, non-numeric
    strings and non-finite numbers are treated as unset.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number):
        return None
    return number


def _resolve_leaf(overrides: Any, key: str, default: float, path: str) -> float:
    if not isinstance(overrides, dict) or key not in overrides:
        return default
    raw = overrides[key]
    number = coerce_price(raw)
    if number is None:
        blank = raw is None or (isinstance(raw, str) and not raw.strip())
        if not blank:
            logger.warning(f"Ignoring non-numeric price override at {path}")
        return default
    return number


def resolve_price_table(overrides: Optional[dict], edit_allowed: bool) -> PriceTable:
    """Merge ``overrides`` over the default table, leaf by leaf.

    When ``edit_allowed`` is false the default table is returned whatever the
    stored overrides contain; a partner without pricing permission always
    quotes vendor prices.
    """
    if not edit_allowed or not isinstance(overrides, dict) or not overrides:
        return PriceTable.model_validate(DEFAULT_PRICING)

    resolved: dict = {}

    model_overrides = overrides.get("modelPrices")
    resolved["modelPrices"] = {}
    for model, fields in DEFAULT_PRICING["modelPrices"].items():
        per_model = model_overrides.get(model) if isinstance(model_overrides, dict) else None
        resolved["modelPrices"][model] = {
            field: _resolve_leaf(per_model, field, default, f"modelPrices.{model}.{field}")
            for field, default in fields.items()
        }

    for category in FLAT_PRICE_CATEGORIES:
        category_overrides = overrides.get(category)
        resolved[category] = {
            key: _resolve_leaf(category_overrides, key, default, f"{category}.{key}")
            for key, default in DEFAULT_PRICING[category].items()
        }

    return PriceTable.model_validate(resolved)


def resolve_partner_pricing(partner: Optional[Partner]) -> PriceTable:
    """Effective price table for a partner; vendor defaults when there is none."""
    if partner is None:
        return PriceTable.model_validate(DEFAULT_PRICING)
    return resolve_price_table(partner.pricing_overrides, bool(partner.can_edit_pricing))


def _normalize_leaf(value: Any, path: str, errors: list) -> Optional[float]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    number = coerce_price(value)
    if number is None:
        errors.append({"field": path, "message": "Price must be a number or blank", "type": "value_error"})
        return None
    if number < 0:
        errors.append({"field": path, "message": "Price cannot be negative", "type": "value_error"})
        return None
    return number


def normalize_overrides(raw: dict) -> dict:
    """Validate a pricing-tab submission and return the document to store.

    Unknown categories or leaves and non-numeric values are rejected with a
    single ``ValidationError`` listing every offending field; blank leaves
    are stored as ``None`` so they resolve to the default.
    """
    if not isinstance(raw, dict):
        raise ValidationError("Pricing overrides must be an object")

    errors: list = []
    normalized: dict = {}

    for category, values in raw.items():
        if category not in DEFAULT_PRICING:
            errors.append({"field": category, "message": "Unknown price category", "type": "value_error"})
            continue
        if values is None:
            continue
        if not isinstance(values, dict):
            errors.append({"field": category, "message": "Expected an object", "type": "type_error"})
            continue

        normalized[category] = {}
        for key, value in values.items():
            path = f"{category}.{key}"
            if key not in DEFAULT_PRICING[category]:
                errors.append({"field": path, "message": "Unknown price field", "type": "value_error"})
                continue
            if category == "modelPrices":
                if value is None:
                    continue
                if not isinstance(value, dict):
                    errors.append({"field": path, "message": "Expected an object", "type": "type_error"})
                    continue
                normalized[category][key] = {}
                for field, leaf in value.items():
                    leaf_path = f"{path}.{field}"
                    if field not in MODEL_PRICE_FIELDS:
                        errors.append({"field": leaf_path, "message": "Unknown price field", "type": "value_error"})
                        continue
                    normalized[category][key][field] = _normalize_leaf(leaf, leaf_path, errors)
            else:
                normalized[category][key] = _normalize_leaf(value, path, errors)

    if errors:
        raise ValidationError("Invalid pricing overrides", errors=errors)
    return normalized
