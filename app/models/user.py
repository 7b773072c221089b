import uuid

from sqlalchemy import Boolean, Column, DateTime, String, Uuid

from app.database import Base
from app.models.partner import utcnow


class User(Base):
    """Credential record for superadmins and partner users."""

    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    # super_admin | partner_user
    role = Column(String(20), nullable=False, default="partner_user")
    # Partner scope for partner users; null for superadmins
    partner_code = Column(String(32), nullable=True, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    def __repr__(self):
        return f"<User {self.email}>"
