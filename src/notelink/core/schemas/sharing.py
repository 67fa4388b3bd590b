"""
Note sharing schemas.

API contracts for sharing notes with other users and listing shares.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from .common import PaginationResponse


class ShareRequest(BaseModel):
    """Note sharing request schema."""

    note_id: uuid.UUID = Field(description="Note ID to share")
    shared_with_usernames: List[str] = Field(
        min_length=1,
        max_length=20,
        description="Usernames to share with"
    )
    message: Optional[str] = Field(
        default=None,
        max_length=500,
        description="Optional message included in the notification"
    )

    @field_validator('shared_with_usernames')
    @classmethod
    def validate_unique_usernames(cls, v: List[str]) -> List[str]:
        """Validate username uniqueness."""
        cleaned = [name.strip() for name in v]
        if any(not name for name in cleaned):
            raise ValueError('Usernames must not be blank')
        if len(cleaned) != len(set(cleaned)):
            raise ValueError('Duplicate usernames are not allowed')
        return cleaned

    class Config:
        json_schema_extra = {
            "example": {
                "note_id": "123e4567-e89b-12d3-a456-426614174000",
                "shared_with_usernames": ["colleague", "study_buddy"],
                "message": "Notes from Tuesday's lecture",
            }
        }


class ShareResponse(BaseModel):
    """Note sharing response schema."""

    id: uuid.UUID = Field(description="Share record ID")
    note_id: uuid.UUID = Field(description="Shared note ID")
    note_title: str = Field(description="Shared note title")
    shared_by_user_id: uuid.UUID = Field(description="Owner who shared the note")
    shared_with_user_id: uuid.UUID = Field(description="User ID who received the share")
    shared_with_username: str = Field(description="Username of the recipient")
    message: Optional[str] = Field(default=None, description="Message included with share")
    shared_at: datetime = Field(description="When the note was shared")


class ShareListResponse(PaginationResponse[ShareResponse]):
    """Paginated list of shares."""
