"""
Identity Store

Holds registered users and their API credentials.

Design Decisions:
- Credentials come from `secrets.token_urlsafe`, so they are unpredictable
- Uniqueness is enforced by the unique index on users.api_token; a
  collision surfaces as IntegrityError and is retried with a new token
- A credential is never changed after registration
"""

import logging
import secrets
from datetime import datetime
from typing import Callable, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from shortener.core.exceptions import ConflictError
from shortener.core.setting import settings
from shortener.core.validators import require_display_name
from shortener.db.errors import store_errors
from shortener.db.models import CredentialUsage, User

logger = logging.getLogger(__name__)


def generate_api_token(nbytes: Optional[int] = None) -> str:
    """Generate a new URL-safe API credential."""
    return secrets.token_urlsafe(nbytes or settings.API_TOKEN_BYTES)


class IdentityStore:
    """
    Registration and credential resolution for users.
    """

    def __init__(
        self,
        session: AsyncSession,
        token_factory: Callable[[], str] = generate_api_token,
        max_attempts: Optional[int] = None
    ):
        """
        Args:
            session: Database session
            token_factory: Produces candidate credentials
            max_attempts: Credential generation attempts before giving up
        """
        self.session = session
        self.token_factory = token_factory
        self.max_attempts = max_attempts or settings.TOKEN_GENERATION_ATTEMPTS

    async def register(self, display_name: Optional[str]) -> User:
        """
        Create a user with a freshly generated API credential.

        Args:
            display_name: Name of the new user

        Returns:
            The persisted User (id and api_token populated)

        Raises:
            ValidationError: If display_name is missing or blank
            ConflictError: If every generated credential collided
            StoreUnavailableError: If the database fails
        """
        name = require_display_name(display_name)

        for attempt in range(1, self.max_attempts + 1):
            try:
                return await self._insert_user(name)
            except ConflictError:
                logger.warning(
                    f"API credential collision on attempt {attempt}/{self.max_attempts}, regenerating"
                )

        raise ConflictError(
            f"Could not generate a unique API credential after {self.max_attempts} attempts"
        )

    async def _insert_user(self, name: str) -> User:
        user = User(display_name=name, api_token=self.token_factory())

        async with store_errors(self.session, "register user"):
            try:
                self.session.add(user)
                await self.session.flush()
                await self.session.commit()
            except IntegrityError as e:
                await self.session.rollback()
                raise ConflictError("API credential already exists", original_error=e)

        logger.info(f"Registered user id={user.id}")
        return user

    async def resolve(self, api_token: Optional[str]) -> Optional[User]:
        """
        Find the user owning an API credential.

        Returns:
            User if the credential is known, None otherwise
        """
        if not api_token:
            return None

        async with store_errors(self.session, "resolve API credential"):
            statement = select(User).where(User.api_token == api_token)
            result = await self.session.execute(statement)
            return result.scalar_one_or_none()

    async def get_user(self, user_id: int) -> Optional[User]:
        """Reverse lookup of a user by id."""
        async with store_errors(self.session, "load user"):
            return await self.session.get(User, user_id)

    async def credential_history(self, user_id: int) -> List[datetime]:
        """
        Timestamps at which the user's credential created new short URLs,
        oldest first.
        """
        async with store_errors(self.session, "load credential history"):
            statement = (
                select(CredentialUsage.used_at)
                .where(CredentialUsage.user_id == user_id)
                .order_by(CredentialUsage.id)
            )
            result = await self.session.execute(statement)
            return list(result.scalars().all())
