"""
Custom Exceptions

This module defines the error taxonomy of the shortener. Each class maps to
one HTTP outcome in the API layer:

- ValidationError: malformed or missing input (400)
- AuthError: missing or unknown API credential (401)
- NotFoundError: unknown short code or user (404)
- ConflictError: uniqueness race, retried internally
- StoreUnavailableError: durable store failure (500)
"""

from typing import Optional


class URLShortenerException(Exception):
    """Base exception for URL shortener service."""
    pass


class ValidationError(URLShortenerException):
    """Raised when user-supplied input is missing or malformed."""

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"{field}: {reason}")


class InvalidURLError(ValidationError):
    """Raised when URL validation fails."""

    def __init__(self, url: str, reason: str = "Invalid URL format"):
        self.url = url
        super().__init__("originalUrl", f"{reason}: {url}")


class AuthError(URLShortenerException):
    """Raised when the API credential is missing or matches no user."""

    def __init__(self, message: str = "Invalid API token"):
        super().__init__(message)


class NotFoundError(URLShortenerException):
    """Raised when a looked-up entity does not exist."""
    pass


class ShortCodeNotFoundError(NotFoundError):
    """Raised when a short code is not found in the database."""

    def __init__(self, short_code: str):
        self.short_code = short_code
        super().__init__(f"Short code '{short_code}' not found")


class UserNotFoundError(NotFoundError):
    """Raised when a user id does not resolve to a user."""

    def __init__(self, user_id: int):
        self.user_id = user_id
        super().__init__(f"User {user_id} not found")


class ConflictError(URLShortenerException):
    """Raised when a uniqueness constraint is violated."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.original_error = original_error
        super().__init__(message)


class StoreUnavailableError(URLShortenerException):
    """Raised when database operations fail."""

    def __init__(
        self,
        message: str,
        original_error: Optional[Exception] = None,
        retriable: bool = True
    ):
        self.original_error = original_error
        self.retriable = retriable
        super().__init__(f"Database error: {message}")
