"""
FastAPI Endpoints for URL Shortener Service

This module defines all REST API endpoints with minimal logic.
Endpoints only handle:
- Request parsing (Pydantic models)
- Translating service exceptions into HTTP responses
- Delegating to service layer

Route order matters: the single-segment routes (/popular) are registered
before the catch-all /{short_code} redirect.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from shortener.api.dependencies import get_current_user
from shortener.api.errors import http_error
from shortener.api.schemas import (
    CreateUserRequest,
    CreateUserResponse,
    OwnerResponse,
    ShortenRequest,
    ShortenResponse,
    UrlRecordResponse,
)
from shortener.core.exceptions import ShortCodeNotFoundError, URLShortenerException
from shortener.core.setting import settings
from shortener.core.validators import sanitize_short_code
from shortener.db.models import UrlRecord, User
from shortener.db.session import get_session
from shortener.services.identity_store import IdentityStore
from shortener.services.owner_service import OwnerLookupService
from shortener.services.popularity_service import PopularityRanker
from shortener.services.redirect_service import RedirectService
from shortener.services.stats_service import StatsService
from shortener.services.url_service import URLShorteningService


router = APIRouter()


def _checked_code(short_code: str) -> str:
    """Codes that cannot have been derived are answered with 404 straight away."""
    sanitized_code = sanitize_short_code(short_code, settings.SHORT_CODE_LENGTH)
    if not sanitized_code:
        raise http_error(ShortCodeNotFoundError(short_code))
    return sanitized_code


def _record_response(record: UrlRecord) -> UrlRecordResponse:
    return UrlRecordResponse(**record.model_dump())


@router.post(
    "/users",
    response_model=CreateUserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a user",
    description="Creates a user and returns the API credential to send as X-Api-Token"
)
async def create_user(
    body: CreateUserRequest,
    session: AsyncSession = Depends(get_session)
) -> CreateUserResponse:
    try:
        user = await IdentityStore(session).register(body.display_name)
    except URLShortenerException as e:
        raise http_error(e)

    return CreateUserResponse(user_id=user.id, api_credential=user.api_token)


@router.post(
    "/urls",
    response_model=ShortenResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a short URL",
    description="Derives the short code for a long URL and the caller's credential"
)
async def create_short_url(
    body: ShortenRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
) -> ShortenResponse:
    """
    Create a new short URL, or return the existing one for this URL and user.

    Returns:
        ShortenResponse with short_code, short_url, and original_url
    """
    try:
        record = await URLShorteningService(session).shorten(body.original_url, user)
    except URLShortenerException as e:
        raise http_error(e)

    return ShortenResponse(
        short_code=record.short_code,
        short_url=f"{settings.BASE_URL}/{record.short_code}",
        original_url=record.original_url
    )


@router.get(
    "/popular",
    response_model=List[UrlRecordResponse],
    summary="Most visited short URLs",
    description="Short URLs ordered by click count, ties in creation order"
)
async def get_popular_urls(
    limit: Optional[int] = Query(None, ge=1, le=100),
    session: AsyncSession = Depends(get_session)
) -> List[UrlRecordResponse]:
    try:
        records = await PopularityRanker(session).top_urls(limit)
    except URLShortenerException as e:
        raise http_error(e)

    return [_record_response(record) for record in records]


@router.get(
    "/owner/{short_code}",
    response_model=OwnerResponse,
    summary="Owner of a short URL",
    description="Returns the user who created a short code"
)
async def get_owner(
    short_code: str,
    session: AsyncSession = Depends(get_session)
) -> OwnerResponse:
    short_code = _checked_code(short_code)

    try:
        owner = await OwnerLookupService(session).get_owner(short_code)
    except URLShortenerException as e:
        raise http_error(e)

    return OwnerResponse(
        user_id=owner.user_id,
        display_name=owner.display_name,
        short_code=owner.short_code,
        url_created_at=owner.url_created_at
    )


@router.get(
    "/stats/{short_code}",
    response_model=UrlRecordResponse,
    summary="Get URL statistics",
    description="Returns a short URL with its click count and visit timestamps"
)
async def get_url_stats(
    short_code: str,
    session: AsyncSession = Depends(get_session)
) -> UrlRecordResponse:
    short_code = _checked_code(short_code)

    try:
        record = await StatsService(session).get_stats(short_code)
    except URLShortenerException as e:
        raise http_error(e)

    return _record_response(record)


@router.get(
    "/{short_code}",
    status_code=status.HTTP_302_FOUND,
    summary="Redirect to original URL",
    description="Counts a visit and redirects to the original long URL"
)
async def redirect_to_url(
    short_code: str,
    session: AsyncSession = Depends(get_session)
) -> RedirectResponse:
    """
    Redirect to the original URL for a given short code.

    Raises:
        HTTPException 404: If short code not found
        HTTPException 500: If the visit could not be recorded
    """
    short_code = _checked_code(short_code)

    try:
        original_url = await RedirectService(session).resolve(short_code)
    except URLShortenerException as e:
        raise http_error(e)

    return RedirectResponse(
        url=original_url,
        status_code=status.HTTP_302_FOUND
    )
