from fastapi import APIRouter
from app.api.v2 import (
    auth,
    admin_partners,
    partner_portal,
    calculator,
    quotes,
)

api_router = APIRouter()

# Include all v2 routers
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(admin_partners.router, prefix="/admin/partners", tags=["admin-partners"])
api_router.include_router(partner_portal.router, prefix="/partners", tags=["partner-portal"])
api_router.include_router(calculator.router, prefix="/calculator", tags=["calculator"])
api_router.include_router(quotes.router, prefix="/quotes", tags=["quotes"])
