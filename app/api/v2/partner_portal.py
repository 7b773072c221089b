"""
Partner portal - settings, features, pricing and quotes for one partner.

Available to the partner's own users and to superadmins.
"""
from fastapi import APIRouter, Body
from typing import Any

from app.api.deps import CurrentUser, Directory, Quotes
from app.models.partner import Partner
from app.schemas.auth import AuthUser
from app.schemas.calculator import PortalResponse
from app.schemas.partner import FeatureConfigUpdate, PartnerResponse, PartnerSettingsUpdate
from app.schemas.quote import QuoteListResponse
from app.security.rbac import require_partner_access
from app.services.feature_config import resolve_feature_config
from app.services.partner_directory import PartnerDirectory
from app.services.pricing_overrides import resolve_partner_pricing
from app.services.quote_store import quote_stats

router = APIRouter()


async def _load_partner(partner_code: str, directory: PartnerDirectory, user: AuthUser) -> Partner:
    # Access is checked before the lookup so unknown and foreign codes look alike
    require_partner_access(user, partner_code)
    return await directory.get_by_code(partner_code)


@router.get("/{partner_code}/portal", response_model=PortalResponse)
async def get_portal(
    partner_code: str,
    directory: Directory,
    quotes: Quotes,
    current_user: CurrentUser,
):
    """Partner record, effective features and prices, and quote stats."""
    partner = await _load_partner(partner_code, directory, current_user)
    partner_quotes = await quotes.list_for_partner(partner.id)
    return PortalResponse(
        partner=PartnerResponse.model_validate(partner),
        features=resolve_feature_config(partner.feature_config).model_dump(by_alias=True),
        pricing=resolve_partner_pricing(partner).as_document(),
        quote_stats=quote_stats(partner_quotes),
    )


@router.put("/{partner_code}/portal/settings", response_model=PartnerResponse)
async def update_settings(
    partner_code: str,
    settings_data: PartnerSettingsUpdate,
    directory: Directory,
    current_user: CurrentUser,
):
    """Company, contact and branding details."""
    partner = await _load_partner(partner_code, directory, current_user)
    return await directory.update(partner.id, settings_data.model_dump(exclude_unset=True))


@router.put("/{partner_code}/portal/features")
async def update_features(
    partner_code: str,
    features_data: FeatureConfigUpdate,
    directory: Directory,
    current_user: CurrentUser,
):
    """Merge a partial feature config; returns the effective config."""
    partner = await _load_partner(partner_code, directory, current_user)
    partner = await directory.update_features(partner, features_data.as_update())
    return resolve_feature_config(partner.feature_config).model_dump(by_alias=True)


@router.put("/{partner_code}/portal/pricing")
async def update_pricing(
    partner_code: str,
    directory: Directory,
    current_user: CurrentUser,
    overrides: dict[str, Any] = Body(...),
):
    """Merge partial price overrides; returns the effective price table."""
    partner = await _load_partner(partner_code, directory, current_user)
    partner = await directory.update_pricing(partner, overrides)
    return resolve_partner_pricing(partner).as_document()


@router.delete("/{partner_code}/portal/pricing")
async def reset_pricing(
    partner_code: str,
    directory: Directory,
    current_user: CurrentUser,
):
    """Drop every override; the partner quotes vendor prices again."""
    partner = await _load_partner(partner_code, directory, current_user)
    partner = await directory.reset_pricing(partner)
    return resolve_partner_pricing(partner).as_document()


@router.get("/{partner_code}/portal/quotes", response_model=QuoteListResponse)
async def list_partner_quotes(
    partner_code: str,
    directory: Directory,
    quotes: Quotes,
    current_user: CurrentUser,
):
    """The partner's quotes, newest first."""
    partner = await _load_partner(partner_code, directory, current_user)
    items = await quotes.list_for_partner(partner.id)
    return QuoteListResponse(items=items, total=len(items))
