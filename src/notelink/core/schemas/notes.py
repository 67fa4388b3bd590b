"""
Note schemas.

API contracts for creating, listing and reading course notes.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from .common import PaginationResponse


class NoteCreate(BaseModel):
    """Note creation request."""

    title: str = Field(min_length=1, max_length=200, description="Note title")
    course_code: str = Field(min_length=1, max_length=30, description="Course code, e.g. CS101")
    description: Optional[str] = Field(default=None, max_length=2000, description="Short description")
    instructor: Optional[str] = Field(default=None, max_length=100, description="Course instructor")
    content: str = Field(default="", max_length=50000, description="Note body")

    @field_validator('title', 'course_code')
    @classmethod
    def strip_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError('must not be blank')
        return v

    class Config:
        json_schema_extra = {
            "example": {
                "title": "Week 3 - Graph traversal",
                "course_code": "CS201",
                "description": "BFS/DFS lecture notes",
                "instructor": "Dr. Rossi",
                "content": "BFS explores neighbours level by level..."
            }
        }


class OwnerInfo(BaseModel):
    id: uuid.UUID
    username: str
    full_name: Optional[str] = None


class NoteResponse(BaseModel):
    """Full note."""

    id: uuid.UUID
    title: str
    course_code: str
    description: Optional[str] = None
    instructor: Optional[str] = None
    content: str
    owner: OwnerInfo
    is_owned: bool = Field(description="Whether the current user owns this note")
    shared_with: List[uuid.UUID] = Field(default_factory=list, description="Recipients (owner view only)")
    created_at: datetime
    updated_at: datetime


class NoteListItem(BaseModel):
    """Note entry in a listing."""

    id: uuid.UUID
    title: str
    course_code: str
    description: Optional[str] = None
    owner_username: str
    is_owned: bool
    created_at: datetime


class NoteListResponse(PaginationResponse[NoteListItem]):
    """Paginated list of notes."""
