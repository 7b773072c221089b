from pydantic import BaseModel
from typing import Optional, Any
from decimal import Decimal

from app.schemas.partner import PartnerResponse
from app.schemas.pricing import QuoteConfig, QuoteTotals


class PriceRequest(BaseModel):
    config: QuoteConfig
    discount_amount: Decimal = Decimal("0")


class LineItemResponse(BaseModel):
    key: str
    label: str
    amount: float


class PriceResponse(BaseModel):
    """Calculator totals. Line items are withheld when pricing is hidden."""

    original_total: float
    discount_amount: float
    final_total: float
    line_items: Optional[list[LineItemResponse]] = None

    @classmethod
    def from_totals(cls, totals: QuoteTotals, show_pricing: bool = True) -> "PriceResponse":
        return cls(
            original_total=float(totals.original_total),
            discount_amount=float(totals.discount_amount),
            final_total=float(totals.final_total),
            line_items=[
                LineItemResponse(key=item.key, label=item.label, amount=float(item.amount))
                for item in totals.line_items
            ]
            if show_pricing
            else None,
        )


class PartnerBranding(BaseModel):
    """Public partner details shown on the calculator."""

    partner_code: str
    company_name: str
    logo_url: Optional[str] = None
    primary_color: Optional[str] = None
    accent_color: Optional[str] = None
    display_address: Optional[str] = None
    display_phone: Optional[str] = None
    display_email: Optional[str] = None
    display_website: Optional[str] = None

    class Config:
        from_attributes = True


class CalculatorResponse(BaseModel):
    partner: PartnerBranding
    features: dict[str, Any]
    catalog: dict[str, Any]
    pricing: Optional[dict[str, Any]] = None


class QuoteStats(BaseModel):
    total: int
    total_value: float
    draft: int
    sent: int
    accepted: int
    ordered: int


class PortalResponse(BaseModel):
    """Everything the partner portal loads on open."""

    partner: PartnerResponse
    features: dict[str, Any]
    pricing: dict[str, Any]
    quote_stats: QuoteStats
