"""
Mixpost Request Models
======================
Pydantic payloads sent to the Mixpost API.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class PostContent(BaseModel):
    """Body, media and links of one post version."""
    body: Optional[str] = None
    media: List[Any] = Field(default_factory=list)
    urls: List[str] = Field(default_factory=list)


class PostVersion(BaseModel):
    """Content variant published to one account."""
    account_id: str
    is_original: bool
    content: PostContent
    options: Optional[Dict[str, Any]] = None


class CreatePostRequest(BaseModel):
    """Payload for creating a post."""
    date: str = Field(pattern=r"^\d{4}-\d{2}-\d{2}$", description="YYYY-MM-DD")
    time: str = Field(pattern=r"^\d{2}:\d{2}$", description="HH:MM")
    timezone: str = Field(min_length=1)
    schedule: Optional[bool] = None
    schedule_now: Optional[bool] = None
    queue: Optional[bool] = None
    accounts: List[str] = Field(min_length=1)
    tags: Optional[List[str]] = None
    versions: List[PostVersion] = Field(min_length=1)


class UpdatePostRequest(CreatePostRequest):
    """Payload for updating a post; same shape as creation."""
    pass


class TagRequest(BaseModel):
    """Payload for creating or updating a tag."""
    name: str = Field(min_length=1)
    hex_color: Optional[str] = None


class TagUpdateRequest(BaseModel):
    """Payload for updating a tag; omitted fields are left unchanged."""
    name: Optional[str] = Field(default=None, min_length=1)
    hex_color: Optional[str] = None


class MediaUpdateRequest(BaseModel):
    """Payload for updating media metadata."""
    name: Optional[str] = None
    alt_text: Optional[str] = None
