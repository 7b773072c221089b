# Security module
from app.security.rbac import Role, require_partner_access, require_super_admin

__all__ = [
    "Role",
    "require_partner_access",
    "require_super_admin",
]
