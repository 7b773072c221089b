"""
Superadmin partner roster: list, search, create and edit partners.
"""
from fastapi import APIRouter, Query, status
from typing import Literal, Optional

from app.api.deps import CurrentUser, Directory
from app.schemas.partner import (
    PartnerCodeSuggestion,
    PartnerCreate,
    PartnerListResponse,
    PartnerResponse,
    PartnerUpdate,
)
from app.security.rbac import require_super_admin
from app.services.partner_directory import partner_stats, search

router = APIRouter()


@router.get("", response_model=PartnerListResponse)
async def list_partners(
    directory: Directory,
    current_user: CurrentUser,
    status: Literal["all", "active", "inactive"] = "all",
    q: Optional[str] = Query(None, max_length=100),
):
    """List partners sorted by company name, with roster stats."""
    require_super_admin(current_user)
    partners = await directory.list_all()
    return PartnerListResponse(
        items=search(partners, q, status),
        stats=partner_stats(partners),
    )


@router.get("/generate-code", response_model=PartnerCodeSuggestion)
async def generate_code(
    directory: Directory,
    current_user: CurrentUser,
    company_name: str = Query(..., min_length=1, max_length=255),
):
    """Suggest an unused partner code for a company name."""
    require_super_admin(current_user)
    return PartnerCodeSuggestion(partner_code=await directory.suggest_code(company_name))


@router.post("", response_model=PartnerResponse, status_code=status.HTTP_201_CREATED)
async def create_partner(
    partner_data: PartnerCreate,
    directory: Directory,
    current_user: CurrentUser,
):
    """Create a partner. 409 when the code is already taken."""
    require_super_admin(current_user)
    return await directory.create(partner_data)


@router.get("/{partner_code}", response_model=PartnerResponse)
async def get_partner(
    partner_code: str,
    directory: Directory,
    current_user: CurrentUser,
):
    require_super_admin(current_user)
    return await directory.get_by_code(partner_code)


@router.patch("/{partner_code}", response_model=PartnerResponse)
async def update_partner(
    partner_code: str,
    partner_data: PartnerUpdate,
    directory: Directory,
    current_user: CurrentUser,
):
    """Edit any partner field except the code."""
    require_super_admin(current_user)
    partner = await directory.get_by_code(partner_code)
    return await directory.update(partner.id, partner_data.model_dump(exclude_unset=True))
