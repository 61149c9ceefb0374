"""
Short Code Derivation

Short codes are derived, not allocated: the code is the leading hex
characters of SHA-256(original_url + api_token).

Design Decisions:
- Deterministic: the same URL with the same credential always yields the
  same code, so a re-submission finds its record by code alone
- Namespaced per owner: the credential is part of the hash input, so two
  users shortening the same URL get unrelated codes
- Eight hex characters are only 32 bits, so the catalog's unique index is
  authoritative. When a candidate is already taken by a different URL,
  the next candidate appends "#<attempt>" to the hash input. Attempt 0 is
  the unsalted reference code, and candidates are always tried in the same
  order, so re-submission stays idempotent.
"""

import hashlib
from typing import Iterator, Optional

from shortener.core.setting import settings


def derive_short_code(
    original_url: str,
    api_token: str,
    attempt: int = 0,
    length: int = 8
) -> str:
    """
    Derive the short code for a URL submitted with a credential.

    Args:
        original_url: The URL exactly as submitted
        api_token: The owner's API credential
        attempt: Collision attempt (0 for the reference code)
        length: Number of hex characters to keep

    Returns:
        Lowercase hex short code

    Example:
        derive_short_code("https://example.com/a", token) == derive_short_code("https://example.com/a", token)
    """
    if attempt < 0:
        raise ValueError("attempt must be >= 0")

    payload = original_url + api_token
    if attempt:
        payload = f"{payload}#{attempt}"

    return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:length]


class CodeDeriver:
    """Derivation policy bound to the configured code length and attempt budget."""

    def __init__(self, length: Optional[int] = None, max_attempts: Optional[int] = None):
        self.length = length or settings.SHORT_CODE_LENGTH
        self.max_attempts = max_attempts or settings.MAX_DERIVATION_ATTEMPTS

        if not 1 <= self.length <= 64:
            raise ValueError("short code length must be between 1 and 64")

    def derive(self, original_url: str, api_token: str, attempt: int = 0) -> str:
        return derive_short_code(original_url, api_token, attempt=attempt, length=self.length)

    def candidates(self, original_url: str, api_token: str) -> Iterator[str]:
        """Yield the candidate codes in the order they must be tried."""
        for attempt in range(self.max_attempts):
            yield self.derive(original_url, api_token, attempt)
