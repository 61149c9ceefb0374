"""
Input Validators and Sanitizers

This module provides validation and sanitization functions for user inputs.
These functions help prevent security issues and ensure data integrity.

Security Considerations:
- Input validation prevents injection attacks
- Length limits prevent DoS attacks
"""

import re
from typing import Optional
from urllib.parse import urlparse

from shortener.core.exceptions import InvalidURLError, ValidationError


def sanitize_short_code(short_code: str, length: int = 8) -> Optional[str]:
    """
    Sanitize and validate short code format.

    Short codes are a prefix of a SHA-256 hex digest, so only lowercase
    hex characters of exactly the configured length can ever exist.

    Args:
        short_code: The short code to sanitize
        length: Configured short code length

    Returns:
        Sanitized short code if valid, None otherwise
    """
    if not short_code or not isinstance(short_code, str):
        return None

    short_code = short_code.strip()

    if len(short_code) != length:
        return None

    if not re.match(r'^[0-9a-f]+$', short_code):
        return None

    return short_code


def validate_url_length(url: str, max_length: int = 2048) -> bool:
    """
    Validate URL length to prevent DoS attacks.

    Args:
        url: The URL to validate
        max_length: Maximum allowed length (default: 2048 per RFC 7230)

    Returns:
        True if URL length is valid, False otherwise
    """
    return bool(url) and len(url) <= max_length


def is_valid_url(url: str, max_length: int = 2048) -> bool:
    """
    Validate URL format and security.

    Checks that URL uses http/https, has a host, and doesn't use a
    dangerous scheme such as javascript: or data:.
    """
    if not url or not isinstance(url, str):
        return False

    if not validate_url_length(url, max_length):
        return False

    try:
        result = urlparse(url)
    except ValueError:
        return False

    if result.scheme.lower() not in {'http', 'https'}:
        return False

    if not result.hostname:
        return False

    if any(ch.isspace() for ch in url):
        return False

    return True


def is_encodable(value: str) -> bool:
    """
    Check that a string survives UTF-8 encoding.

    JSON can carry lone surrogates (e.g. "\\ud800") that Python decodes
    but that cannot be hashed or stored.
    """
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def require_original_url(original_url: Optional[str], max_length: int = 2048) -> str:
    """
    Return the URL unchanged if it can be shortened, raise otherwise.

    The URL is deliberately not normalized: the short code is derived from
    the exact submitted string.

    Raises:
        ValidationError: If the URL is missing or blank
        InvalidURLError: If the URL is too long or not an http(s) URL
    """
    if original_url is None or not original_url.strip():
        raise ValidationError("originalUrl", "Missing original URL")

    if not is_encodable(original_url):
        raise InvalidURLError(
            original_url.encode("utf-8", "backslashreplace").decode("utf-8")[:64],
            reason="URL is not valid UTF-8"
        )

    if not validate_url_length(original_url, max_length):
        raise InvalidURLError(original_url[:64], reason=f"URL longer than {max_length} characters")

    if not is_valid_url(original_url, max_length):
        raise InvalidURLError(
            original_url,
            reason="Invalid URL format. URL must use http:// or https:// and have a valid host"
        )

    return original_url


def require_display_name(display_name: Optional[str]) -> str:
    """
    Return the stripped display name, raise ValidationError when blank.
    """
    if display_name is None or not display_name.strip():
        raise ValidationError("displayName", "Missing name")
    if not is_encodable(display_name):
        raise ValidationError("displayName", "Name is not valid UTF-8")
    return display_name.strip()
