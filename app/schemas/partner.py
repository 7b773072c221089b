from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel
from datetime import datetime
from typing import Optional, List, Any
from uuid import UUID

from app.services.catalog import CITIES, MODELS, TANK_SIZES

HEX_COLOR = r"^#[0-9A-Fa-f]{6}$"


def blank_to_none(v):
    """Form inputs send empty strings for cleared optional fields."""
    if isinstance(v, str) and not v.strip():
        return None
    return v


class FeatureConfigUpdate(BaseModel):
    """Partial feature config from the portal Features tab.

    Omitted keys keep their stored value; keys sent as ``null`` revert to
    the default.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    enabled_models: Optional[List[str]] = None
    enabled_tanks: Optional[List[str]] = None
    enabled_cities: Optional[List[str]] = None
    enable_warranty_upgrades: Optional[bool] = None
    enable_demolition: Optional[bool] = None
    enable_trenching: Optional[bool] = None
    enable_aboveground_trenching: Optional[bool] = None
    enable_panel_upgrade: Optional[bool] = None
    enable_custom_adjustments: Optional[bool] = None
    enable_pumps: Optional[bool] = None
    enable_sensors: Optional[bool] = None
    enable_filters: Optional[bool] = None
    custom_disclaimers: Optional[str] = None
    custom_notes: Optional[str] = None
    show_pricing: Optional[bool] = None
    require_approval: Optional[bool] = None

    @field_validator("enabled_tanks", mode="before")
    @classmethod
    def tank_sizes_to_str(cls, v):
        if isinstance(v, list):
            return [str(item) for item in v]
        return v

    @field_validator("enabled_models")
    @classmethod
    def known_models(cls, v):
        if v is not None:
            unknown = [m for m in v if m not in MODELS]
            if unknown:
                raise ValueError(f"Unknown models: {', '.join(unknown)}")
        return v

    @field_validator("enabled_tanks")
    @classmethod
    def known_tanks(cls, v):
        if v is not None:
            unknown = [t for t in v if t not in TANK_SIZES]
            if unknown:
                raise ValueError(f"Unknown tank sizes: {', '.join(unknown)}")
        return v

    @field_validator("enabled_cities")
    @classmethod
    def known_cities(cls, v):
        if v is not None:
            unknown = [c for c in v if c not in CITIES]
            if unknown:
                raise ValueError(f"Unknown cities: {', '.join(unknown)}")
        return v

    def as_update(self) -> dict:
        """Only the keys the client actually sent, camelCase, nulls kept."""
        return self.model_dump(by_alias=True, exclude_unset=True)


class PartnerSettingsUpdate(BaseModel):
    """Portal Settings tab: branding and contact details only."""

    model_config = ConfigDict(extra="forbid")

    company_name: Optional[str] = Field(None, min_length=1, max_length=255)
    contact_name: Optional[str] = Field(None, max_length=255)
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = Field(None, max_length=50)
    logo_url: Optional[str] = Field(None, max_length=500)
    primary_color: Optional[str] = Field(None, pattern=HEX_COLOR)
    accent_color: Optional[str] = Field(None, pattern=HEX_COLOR)
    display_address: Optional[str] = Field(None, max_length=500)
    display_phone: Optional[str] = Field(None, max_length=50)
    display_email: Optional[EmailStr] = None
    display_website: Optional[str] = Field(None, max_length=255)

    @field_validator("contact_email", "display_email", mode="before")
    @classmethod
    def blank_email_to_none(cls, v):
        return blank_to_none(v)


class PartnerUpdate(PartnerSettingsUpdate):
    """Superadmin edit. ``partner_code`` may be echoed back but never changed."""

    partner_code: Optional[str] = None
    is_active: Optional[bool] = None
    can_create_quotes: Optional[bool] = None
    can_edit_pricing: Optional[bool] = None
    notes: Optional[str] = None


class PartnerCreate(BaseModel):
    """Schema for creating a partner. The code is generated when omitted."""

    partner_code: Optional[str] = Field(None, max_length=32)
    company_name: str = Field(..., min_length=1, max_length=255)
    contact_name: Optional[str] = Field(None, max_length=255)
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = Field(None, max_length=50)
    logo_url: Optional[str] = Field(None, max_length=500)
    primary_color: Optional[str] = Field(None, pattern=HEX_COLOR)
    accent_color: Optional[str] = Field(None, pattern=HEX_COLOR)
    display_address: Optional[str] = Field(None, max_length=500)
    display_phone: Optional[str] = Field(None, max_length=50)
    display_email: Optional[EmailStr] = None
    display_website: Optional[str] = Field(None, max_length=255)
    is_active: bool = True
    can_create_quotes: bool = True
    can_edit_pricing: bool = False
    notes: Optional[str] = None
    feature_config: Optional[FeatureConfigUpdate] = None
    pricing_overrides: Optional[dict[str, Any]] = None

    @field_validator("contact_email", "display_email", mode="before")
    @classmethod
    def blank_email_to_none(cls, v):
        return blank_to_none(v)

    @field_validator("partner_code", mode="before")
    @classmethod
    def blank_code_to_none(cls, v):
        return blank_to_none(v)


class PartnerResponse(BaseModel):
    """Schema for partner response."""

    id: UUID
    partner_code: str
    company_name: str
    contact_name: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    logo_url: Optional[str] = None
    primary_color: Optional[str] = None
    accent_color: Optional[str] = None
    display_address: Optional[str] = None
    display_phone: Optional[str] = None
    display_email: Optional[str] = None
    display_website: Optional[str] = None
    pricing_overrides: Optional[dict[str, Any]] = None
    feature_config: Optional[dict[str, Any]] = None
    is_active: bool
    can_create_quotes: bool
    can_edit_pricing: bool
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PartnerStats(BaseModel):
    total: int
    active: int
    inactive: int
    can_create_quotes: int
    can_edit_pricing: int


class PartnerListResponse(BaseModel):
    """Superadmin partner list with roster stats."""

    items: list[PartnerResponse]
    stats: PartnerStats


class PartnerCodeSuggestion(BaseModel):
    partner_code: str
