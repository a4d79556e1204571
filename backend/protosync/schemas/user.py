"""
Pydantic schemas for user endpoints.

WHY: Schemas reject malformed input before it reaches the service
(name length, email format, age range, unknown fields) and define the
camelCase record shape clients receive.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field


class UserCreateRequest(BaseModel):
    """Request schema for creating a user."""

    model_config = {"extra": "forbid"}

    name: str = Field(
        ...,
        min_length=2,
        max_length=50,
        description="Display name",
        examples=["Ada Lovelace"],
    )
    email: EmailStr = Field(
        ...,
        description="Unique email address (case-insensitive)",
        examples=["ada@example.com"],
    )
    age: int = Field(..., ge=0, le=120, description="Age in years")
    tags: List[str] = Field(default_factory=list, description="Free-form labels")


class UserUpdateRequest(BaseModel):
    """
    Request schema for updating a user.

    WHY: Every field is optional so PUT and PATCH both apply partial updates.
    """

    model_config = {"extra": "forbid", "populate_by_name": True}

    name: Optional[str] = Field(None, min_length=2, max_length=50)
    email: Optional[EmailStr] = None
    age: Optional[int] = Field(None, ge=0, le=120)
    is_active: Optional[bool] = Field(None, alias="isActive")
    tags: Optional[List[str]] = None


class UserResponse(BaseModel):
    """User record as returned to clients."""

    model_config = {"from_attributes": True, "populate_by_name": True}

    id: str = Field(..., alias="_id")
    name: str
    email: str
    age: int
    is_active: bool = Field(..., alias="isActive")
    tags: List[str] = Field(default_factory=list)
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")
