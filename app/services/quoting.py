"""Pricing a calculator session for a partner and turning it into a quote record."""

import logging
from typing import Optional, Tuple

from app.models.partner import Partner
from app.schemas.auth import AuthUser
from app.schemas.pricing import FeatureConfig, PriceTable, QuoteConfig, QuoteTotals
from app.schemas.quote import QuoteCreate
from app.services.feature_config import DEFAULT_FEATURE_CONFIG, resolve_feature_config
from app.services.pricing_overrides import resolve_partner_pricing
from app.services.quote_calculator import check_selection_enabled, compute_quote

logger = logging.getLogger(__name__)


def price_for_partner(
    partner: Optional[Partner],
    config: QuoteConfig,
    discount_amount=0,
) -> Tuple[FeatureConfig, PriceTable, QuoteTotals]:
    """Resolve the partner's features and prices, then price ``config``.

    House quotes (``partner=None``) use the default features and table and
    may select anything in the catalog.
    """
    if partner is None:
        features = DEFAULT_FEATURE_CONFIG
    else:
        features = resolve_feature_config(partner.feature_config)
        check_selection_enabled(config, features)
    prices = resolve_partner_pricing(partner)
    totals = compute_quote(config, prices, features, discount_amount)
    return features, prices, totals


def build_quote_record(draft: QuoteCreate, partner: Optional[Partner], user: AuthUser) -> dict:
    """Values for a new ``Quote`` row, with the pricing snapshot frozen in."""
    features, prices, totals = price_for_partner(partner, draft.config, draft.discount_amount)
    values = draft.model_dump(exclude={"config", "discount_amount"})
    values.update(
        quote_config=draft.config.as_document(),
        original_total=float(totals.original_total),
        discount_amount=float(totals.discount_amount),
        final_total=float(totals.final_total),
        partner_pricing=prices.as_document(),
        requires_approval=features.require_approval,
        created_by=user.email,
    )
    if partner is not None:
        values.update(
            partner_id=partner.id,
            partner_name=partner.company_name,
            partner_logo_url=partner.logo_url,
        )
    return values
