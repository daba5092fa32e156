"""
TechNotes Backend - User Request/Response Schemas
==================================================

What:  Pydantic models defining the /users API contract.
Why:   UserResponse is the only shape a user ever leaves the API in, and it
       has no password field, so a hash cannot leak through serialization.
"""

import uuid
from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, Field, StrictBool


class UserCreate(BaseModel):
    """Body of POST /users."""
    username: Optional[str] = None
    password: Optional[str] = None
    # Elements are checked by UserService (non-blank strings)
    roles: Optional[List[Any]] = None


class UserUpdate(BaseModel):
    """Body of PATCH /users. Omitting `password` keeps the stored hash."""
    id: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    roles: Optional[List[Any]] = None
    active: Optional[StrictBool] = None


class UserDelete(BaseModel):
    """Body of DELETE /users."""
    id: Optional[str] = None


class UserResponse(BaseModel):
    """A user as returned by GET /users (password omitted)."""
    id: uuid.UUID
    username: str
    roles: List[str]
    active: bool
    created_at: datetime = Field(serialization_alias="createdAt")
    updated_at: datetime = Field(serialization_alias="updatedAt")

    model_config = {"from_attributes": True, "populate_by_name": True}
