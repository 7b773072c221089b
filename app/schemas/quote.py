from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from datetime import datetime
from typing import Optional, Literal, Any
from decimal import Decimal
from uuid import UUID

from app.schemas.partner import blank_to_none
from app.schemas.pricing import QuoteConfig

QuoteStatus = Literal["draft", "sent", "accepted", "ordered"]


class QuoteCustomer(BaseModel):
    """Customer and service address captured with a quote."""

    customer_company: Optional[str] = Field(None, max_length=255)
    customer_name: str = Field(..., min_length=1, max_length=255)
    customer_email: Optional[EmailStr] = None
    customer_phone: Optional[str] = Field(None, max_length=50)
    service_street: str = Field("", max_length=255)
    service_city: str = Field("", max_length=100)
    service_state: str = Field("", max_length=50)
    service_zip: str = Field("", max_length=20)
    po_number: Optional[str] = Field(None, max_length=100)

    @field_validator("customer_email", mode="before")
    @classmethod
    def blank_email_to_none(cls, v):
        return blank_to_none(v)


class QuoteCreate(QuoteCustomer):
    """Schema for saving a calculator session as a quote."""

    config: QuoteConfig
    discount_amount: Decimal = Decimal("0")
    notes: Optional[str] = None


class QuoteStatusUpdate(BaseModel):
    status: QuoteStatus


class QuoteNotesUpdate(BaseModel):
    """The only free edit on a saved quote."""

    model_config = ConfigDict(extra="forbid")

    notes: Optional[str] = None


class QuoteResponse(BaseModel):
    """Schema for quote response."""

    id: UUID
    quote_number: str
    customer_company: Optional[str] = None
    customer_name: str
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    service_street: Optional[str] = None
    service_city: Optional[str] = None
    service_state: Optional[str] = None
    service_zip: Optional[str] = None
    po_number: Optional[str] = None
    partner_id: Optional[UUID] = None
    partner_name: Optional[str] = None
    partner_logo_url: Optional[str] = None
    quote_config: dict[str, Any]
    original_total: Optional[float] = None
    discount_amount: float = 0
    final_total: float
    partner_pricing: Optional[dict[str, Any]] = None
    status: QuoteStatus
    notes: Optional[str] = None
    requires_approval: bool = False
    approved_at: Optional[datetime] = None
    sent_at: Optional[datetime] = None
    send_count: int = 0
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class QuoteListResponse(BaseModel):
    """Quote list response."""

    items: list[QuoteResponse]
    total: int
