"""
Quotes API - saved quotes across partners, status workflow and approval.
"""
from fastapi import APIRouter, Query, Response, status
from typing import Optional

from app.api.deps import CurrentUser, Directory, Quotes
from app.exceptions import BusinessRuleError, NotFoundError
from app.models.quote import Quote
from app.schemas.auth import AuthUser
from app.schemas.quote import (
    QuoteCreate,
    QuoteListResponse,
    QuoteNotesUpdate,
    QuoteResponse,
    QuoteStatusUpdate,
)
from app.security.rbac import is_super_admin, require_super_admin
from app.services.partner_directory import PartnerDirectory
from app.services.quote_store import QuoteStore
from app.services.quoting import build_quote_record

router = APIRouter()


async def _load_quote(
    quote_number: str,
    quotes: QuoteStore,
    directory: PartnerDirectory,
    user: AuthUser,
) -> Quote:
    """Fetch a quote the user may see; other partners' quotes read as missing."""
    quote = await quotes.get_by_number(quote_number)
    if is_super_admin(user):
        return quote
    if not user.partner_code or quote.partner_id is None:
        raise NotFoundError("Quote", quote_number)
    partner = await directory.get_by_code(user.partner_code)
    if quote.partner_id != partner.id:
        raise NotFoundError("Quote", quote_number)
    return quote


@router.post("", response_model=QuoteResponse, status_code=status.HTTP_201_CREATED)
async def create_house_quote(
    quote_data: QuoteCreate,
    quotes: Quotes,
    current_user: CurrentUser,
):
    """Vendor quote with default features and prices (``AQ`` prefix)."""
    require_super_admin(current_user)
    values = build_quote_record(quote_data, None, current_user)
    return await quotes.save(values)


@router.get("", response_model=QuoteListResponse)
async def list_quotes(
    quotes: Quotes,
    directory: Directory,
    current_user: CurrentUser,
    partner_code: Optional[str] = Query(None, max_length=32),
):
    """List quotes newest first.

    Superadmins see every quote (optionally one partner's); partner users
    only their own partner's.
    """
    if is_super_admin(current_user):
        partner_id = (await directory.get_by_code(partner_code)).id if partner_code else None
        items = await quotes.list_all(partner_id)
    elif current_user.partner_code:
        partner = await directory.get_by_code(current_user.partner_code)
        items = await quotes.list_for_partner(partner.id)
    else:
        items = []
    return QuoteListResponse(items=items, total=len(items))


@router.get("/{quote_number}", response_model=QuoteResponse)
async def get_quote(
    quote_number: str,
    quotes: Quotes,
    directory: Directory,
    current_user: CurrentUser,
):
    return await _load_quote(quote_number, quotes, directory, current_user)


@router.post("/{quote_number}/status", response_model=QuoteResponse)
async def update_quote_status(
    quote_number: str,
    status_data: QuoteStatusUpdate,
    quotes: Quotes,
    directory: Directory,
    current_user: CurrentUser,
):
    """Move a quote along draft -> sent -> accepted -> ordered."""
    quote = await _load_quote(quote_number, quotes, directory, current_user)
    return await quotes.transition(quote, status_data.status)


@router.post("/{quote_number}/resend", response_model=QuoteResponse)
async def resend_quote(
    quote_number: str,
    quotes: Quotes,
    directory: Directory,
    current_user: CurrentUser,
):
    quote = await _load_quote(quote_number, quotes, directory, current_user)
    if quote.status != "sent":
        raise BusinessRuleError("Only sent quotes can be resent")
    return await quotes.transition(quote, "sent")


@router.post("/{quote_number}/approve", response_model=QuoteResponse)
async def approve_quote(
    quote_number: str,
    quotes: Quotes,
    current_user: CurrentUser,
):
    """Release a quote that requires approval so it can be sent."""
    require_super_admin(current_user)
    quote = await quotes.get_by_number(quote_number)
    return await quotes.approve(quote)


@router.patch("/{quote_number}", response_model=QuoteResponse)
async def update_quote_notes(
    quote_number: str,
    notes_data: QuoteNotesUpdate,
    quotes: Quotes,
    directory: Directory,
    current_user: CurrentUser,
):
    """Edit notes. Pricing and configuration are fixed once saved."""
    quote = await _load_quote(quote_number, quotes, directory, current_user)
    return await quotes.update(quote.id, notes_data.model_dump(exclude_unset=True))


@router.delete("/{quote_number}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_quote(
    quote_number: str,
    quotes: Quotes,
    current_user: CurrentUser,
):
    require_super_admin(current_user)
    quote = await quotes.get_by_number(quote_number)
    await quotes.delete(quote.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
