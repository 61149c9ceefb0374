"""
Database Models for URL Shortener Service

This module defines the SQLModel database schemas for:
- User: Registered clients and their API credentials
- CredentialUsage: Audit trail of URL creations made with a credential
- ShortURL: Stores the mapping between short codes and original URLs
- UrlVisit: One row per resolved redirect

and the UrlRecord read model returned by the catalog.

Design Decisions:
- click_count is denormalized on ShortURL and updated in the same
  transaction as the UrlVisit insert, so it always equals the visit count
- Indexes on short_code for fast lookups (most common operation)
- Visit and usage rows are ordered by their autoincrement id
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlmodel import Column, Field, SQLModel


class User(SQLModel, table=True):
    """
    Registered client.

    Fields:
    - id: Auto-incrementing primary key
    - display_name: Name given at registration
    - api_token: Opaque credential, unique and never changed after creation
    - created_at: Registration timestamp
    """
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    display_name: str = Field(sa_column=Column(String(200), nullable=False))
    api_token: str = Field(
        sa_column=Column(String(64), nullable=False, unique=True, index=True)
    )
    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )


class CredentialUsage(SQLModel, table=True):
    """
    A timestamp appended to a user's history each time their credential
    creates a new short URL.
    """
    __tablename__ = "credential_usages"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(
        sa_column=Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    )
    used_at: datetime = Field(
        default_factory=datetime.utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )


class ShortURL(SQLModel, table=True):
    """
    Main table storing URL shortening mappings.

    Fields:
    - id: Auto-incrementing primary key (insertion order, used as ranking tie-break)
    - original_url: The long URL that was shortened
    - short_code: Unique short code derived from the URL and owner credential
    - click_count: Number of resolved redirects
    - created_at: Timestamp when URL was shortened
    - owner_id: User who created the record

    Indexes:
    - short_code: Unique index for fast lookups (most critical path)
    - click_count: For the popularity ranking
    """
    __tablename__ = "short_urls"

    id: Optional[int] = Field(default=None, primary_key=True)
    original_url: str = Field(sa_column=Column(Text, nullable=False))
    short_code: str = Field(
        sa_column=Column(String(64), nullable=False, unique=True, index=True)
    )
    click_count: int = Field(
        default=0,
        sa_column=Column(Integer, nullable=False, default=0, index=True)
    )
    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True)
    )
    owner_id: int = Field(
        sa_column=Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    )


class UrlVisit(SQLModel, table=True):
    """
    Visit log table: one row per successful redirect.

    Rows are only ever inserted together with the click_count increment
    of their ShortURL.
    """
    __tablename__ = "url_visits"

    id: Optional[int] = Field(default=None, primary_key=True)
    short_url_id: int = Field(
        sa_column=Column(Integer, ForeignKey("short_urls.id"), nullable=False, index=True)
    )
    visited_at: datetime = Field(
        default_factory=datetime.utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )


class UrlRecord(SQLModel):
    """Snapshot of a ShortURL together with its ordered visit timestamps."""

    id: int
    original_url: str
    short_code: str
    click_count: int
    visit_timestamps: List[datetime] = Field(default_factory=list)
    created_at: datetime
    owner_id: int

    @classmethod
    def from_row(cls, row: ShortURL, visit_timestamps: List[datetime]) -> "UrlRecord":
        return cls(
            id=row.id,
            original_url=row.original_url,
            short_code=row.short_code,
            click_count=row.click_count,
            visit_timestamps=visit_timestamps,
            created_at=row.created_at,
            owner_id=row.owner_id,
        )
