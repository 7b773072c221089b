"""
Partner calculator - public catalog and pricing, authenticated quote saving.
"""
from fastapi import APIRouter, status
import logging

from app.api.deps import CurrentUser, Directory, Quotes
from app.exceptions import BusinessRuleError, ForbiddenError
from app.models.partner import Partner
from app.schemas.calculator import CalculatorResponse, PartnerBranding, PriceRequest, PriceResponse
from app.schemas.quote import QuoteCreate, QuoteResponse
from app.security.rbac import require_partner_access
from app.services.catalog import offered_catalog
from app.services.feature_config import resolve_feature_config
from app.services.partner_directory import PartnerDirectory
from app.services.pricing_overrides import resolve_partner_pricing
from app.services.quoting import build_quote_record, price_for_partner

logger = logging.getLogger(__name__)

router = APIRouter()


async def _active_partner(partner_code: str, directory: PartnerDirectory) -> Partner:
    partner = await directory.get_by_code(partner_code)
    if not partner.is_active:
        raise BusinessRuleError("This partner calculator is not active")
    return partner


@router.get("/{partner_code}", response_model=CalculatorResponse)
async def get_calculator(partner_code: str, directory: Directory):
    """Branding, effective features and offered catalog for a partner calculator.

    The price table is only included when the partner shows pricing.
    """
    partner = await _active_partner(partner_code, directory)
    features = resolve_feature_config(partner.feature_config)
    return CalculatorResponse(
        partner=PartnerBranding.model_validate(partner),
        features=features.model_dump(by_alias=True),
        catalog=offered_catalog(features),
        pricing=resolve_partner_pricing(partner).as_document() if features.show_pricing else None,
    )


@router.post("/{partner_code}/price", response_model=PriceResponse)
async def price_configuration(
    partner_code: str,
    price_data: PriceRequest,
    directory: Directory,
):
    """Price a configuration with the partner's effective prices."""
    partner = await _active_partner(partner_code, directory)
    features, _, totals = price_for_partner(partner, price_data.config, price_data.discount_amount)
    return PriceResponse.from_totals(totals, show_pricing=features.show_pricing)


@router.post(
    "/{partner_code}/quotes",
    response_model=QuoteResponse,
    status_code=status.HTTP_201_CREATED,
)
async def save_quote(
    partner_code: str,
    quote_data: QuoteCreate,
    directory: Directory,
    quotes: Quotes,
    current_user: CurrentUser,
):
    """Price and save a quote for this partner.

    The totals and the price table used are frozen into the quote.
    """
    require_partner_access(current_user, partner_code)
    partner = await _active_partner(partner_code, directory)
    if not partner.can_create_quotes:
        raise ForbiddenError("This partner is not allowed to create quotes")

    values = build_quote_record(quote_data, partner, current_user)
    return await quotes.save(values, partner_code=partner.partner_code)
