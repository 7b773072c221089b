"""
SQLAlchemy model for saved quotes.

``quote_config`` is the frozen calculator configuration and
``partner_pricing`` the effective price table used to price it; together
with the three totals they are written once and never patched.
"""
import uuid

from sqlalchemy import (
    Boolean, Column, DateTime, Float, ForeignKey, Index, Integer, JSON, String, Text, Uuid
)

from app.database import Base
from app.models.partner import utcnow


QUOTE_STATUSES = ("draft", "sent", "accepted", "ordered")


class Quote(Base):
    """Priced configuration snapshot tied to a customer and (optionally) a partner."""
    __tablename__ = "quotes"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # e.g. "AW-20260118-K3Z9QP"
    quote_number = Column(String(50), unique=True, nullable=False, index=True)

    # Customer
    customer_company = Column(String(255), nullable=True)
    customer_name = Column(String(255), nullable=False)
    customer_email = Column(String(255), nullable=True)
    customer_phone = Column(String(50), nullable=True)

    # Service address
    service_street = Column(String(255), nullable=False, default="")
    service_city = Column(String(100), nullable=False, default="")
    service_state = Column(String(50), nullable=False, default="")
    service_zip = Column(String(20), nullable=False, default="")
    po_number = Column(String(100), nullable=True)

    # Partner (null for vendor house quotes)
    partner_id = Column(Uuid(as_uuid=True), ForeignKey("partners.id"), nullable=True, index=True)
    partner_name = Column(String(255), nullable=True)
    partner_logo_url = Column(String(500), nullable=True)

    # Frozen configuration snapshot
    quote_config = Column(JSON, nullable=False)

    # Pricing, rounded to cents at save time
    original_total = Column(Float, nullable=True)
    discount_amount = Column(Float, nullable=False, default=0.0)
    final_total = Column(Float, nullable=False)
    partner_pricing = Column(JSON, nullable=True)

    # Status: draft, sent, accepted, ordered
    status = Column(String(20), nullable=False, default="draft", index=True)
    notes = Column(Text, nullable=True)

    # Approval / delivery tracking
    requires_approval = Column(Boolean, nullable=False, default=False)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    sent_at = Column(DateTime(timezone=True), nullable=True)
    send_count = Column(Integer, nullable=False, default=0)
    created_by = Column(String(255), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index('idx_quotes_partner_created', 'partner_id', 'created_at'),
    )

    def __repr__(self):
        return f"<Quote(id={self.id}, quote_number={self.quote_number}, status={self.status})>"
