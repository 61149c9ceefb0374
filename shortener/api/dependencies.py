"""
FastAPI dependencies for authenticated endpoints.
"""

from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from shortener.api.errors import http_error
from shortener.core.exceptions import AuthError, StoreUnavailableError
from shortener.db.models import User
from shortener.db.session import get_session
from shortener.services.identity_store import IdentityStore

API_TOKEN_HEADER = "X-Api-Token"


async def get_current_user(
    api_token: Optional[str] = Header(default=None, alias=API_TOKEN_HEADER),
    session: AsyncSession = Depends(get_session)
) -> User:
    """
    Resolve the X-Api-Token header to a user.

    Raises:
        HTTPException 401: If the header is missing or the token is unknown
        HTTPException 500: If the store is unavailable
    """
    if not api_token:
        raise http_error(AuthError("API token missing"))

    try:
        user = await IdentityStore(session).resolve(api_token)
    except StoreUnavailableError as e:
        raise http_error(e)

    if user is None:
        raise http_error(AuthError("Invalid API token"))

    return user
