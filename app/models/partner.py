"""
SQLAlchemy model for reseller partners.

A partner owns a branded calculator (keyed by ``partner_code``) and an admin
portal. ``feature_config`` and ``pricing_overrides`` hold partial JSON
documents that are merged over the vendor defaults when read, never replaced
wholesale.
"""
import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, JSON, String, Text, Uuid

from app.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


DEFAULT_PRIMARY_COLOR = "#2B6777"
DEFAULT_ACCENT_COLOR = "#52AB98"


class Partner(Base):
    """Reseller tenant with its own calculator, branding and pricing scope."""

    __tablename__ = "partners"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # Immutable once created; the unique constraint is the final authority
    partner_code = Column(String(32), unique=True, nullable=False, index=True)

    # Company / contact
    company_name = Column(String(255), nullable=False, index=True)
    contact_name = Column(String(255), nullable=True)
    contact_email = Column(String(255), nullable=True)
    contact_phone = Column(String(50), nullable=True)

    # Branding shown on the calculator
    logo_url = Column(String(500), nullable=True)
    primary_color = Column(String(20), nullable=True, default=DEFAULT_PRIMARY_COLOR)
    accent_color = Column(String(20), nullable=True, default=DEFAULT_ACCENT_COLOR)
    display_address = Column(String(500), nullable=True)
    display_phone = Column(String(50), nullable=True)
    display_email = Column(String(255), nullable=True)
    display_website = Column(String(500), nullable=True)

    # Partial JSON documents, merged over defaults at read time
    pricing_overrides = Column(JSON, nullable=True)
    feature_config = Column(JSON, nullable=True)

    # Permissions
    is_active = Column(Boolean, nullable=False, default=True)
    can_create_quotes = Column(Boolean, nullable=False, default=True)
    can_edit_pricing = Column(Boolean, nullable=False, default=False)

    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<Partner {self.partner_code} - {self.company_name}>"
