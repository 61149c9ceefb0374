"""
Mapping from service exceptions to HTTP errors.
"""

from fastapi import HTTPException, status

from shortener.core.exceptions import (
    AuthError,
    NotFoundError,
    StoreUnavailableError,
    URLShortenerException,
    ValidationError,
)


def http_error(exc: URLShortenerException) -> HTTPException:
    """Translate a service exception into the HTTPException to raise."""
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    if isinstance(exc, AuthError):
        return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc))

    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))

    if isinstance(exc, StoreUnavailableError):
        headers = {"Retry-After": "1"} if exc.retriable else None
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
            headers=headers
        )

    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Internal server error"
    )
