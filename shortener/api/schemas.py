"""
API Request and Response Schemas

This module defines all Pydantic models for API requests and responses.
JSON field names are camelCase; Python attributes stay snake_case.

Request fields are optional at the schema level so that a missing value
reaches the service layer and is reported as a 400 with a precise message.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CreateUserRequest(CamelModel):
    """Request model for user registration."""
    display_name: Optional[str] = Field(None, description="Name of the new user")


class CreateUserResponse(CamelModel):
    """Response model for user registration."""
    user_id: int = Field(..., description="Identifier of the new user")
    api_credential: str = Field(..., description="API token to send as X-Api-Token")


class ShortenRequest(CamelModel):
    """Request model for URL shortening endpoint."""
    original_url: Optional[str] = Field(None, description="The long URL to shorten")


class ShortenResponse(CamelModel):
    """Response model for URL shortening endpoint."""
    short_code: str = Field(..., description="The derived short code")
    short_url: str = Field(..., description="The complete short URL")
    original_url: str = Field(..., description="The original long URL")


class UrlRecordResponse(CamelModel):
    """A short URL with its usage counters."""
    id: int
    original_url: str
    short_code: str
    click_count: int
    visit_timestamps: List[datetime]
    created_at: datetime
    owner_id: int


class OwnerResponse(CamelModel):
    """Response model for the owner lookup endpoint."""
    user_id: int
    display_name: str
    short_code: str
    url_created_at: datetime
