"""
TechNotes Backend - Note Request/Response Schemas
==================================================

What:  Pydantic models defining the /notes API contract.
Why:   Automatic serialization and OpenAPI doc generation.

Request bodies are deliberately permissive: every field is optional at the
schema level so that a missing or blank field reaches NoteService, which
reports it with the same "... are required" message regardless of which
field was left out. Only type mismatches are rejected by FastAPI itself.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, StrictBool


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class NoteCreate(BaseModel):
    """Body of POST /notes."""
    user: Optional[str] = Field(default=None, description="Id of the owning user")
    title: Optional[str] = Field(default=None, description="Unique note title")
    text: Optional[str] = Field(default=None, description="Note body")


class NoteUpdate(BaseModel):
    """Body of PATCH /notes. All fields are replaced wholesale."""
    id: Optional[str] = Field(default=None, description="Id of the note to update")
    user: Optional[str] = Field(default=None, description="Id of the owning user")
    title: Optional[str] = Field(default=None, description="Unique note title")
    text: Optional[str] = Field(default=None, description="Note body")
    completed: Optional[StrictBool] = Field(default=None, description="Completion flag")


class NoteDelete(BaseModel):
    """Body of DELETE /notes."""
    id: Optional[str] = Field(default=None, description="Id of the note to delete")


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class NoteResponse(BaseModel):
    """
    What:  A note as returned by GET /notes.
    Why username: The frontend lists notes with the owner's name; resolving it
           server-side saves the client a second round trip per note.
    """
    id: uuid.UUID = Field(description="Unique note identifier")
    ticket: int = Field(description="Sequential ticket number (starts at 500)")
    user: uuid.UUID = Field(description="Id of the owning user")
    username: Optional[str] = Field(
        default=None,
        description="Owner's username (null if the owner no longer resolves)",
    )
    title: str
    text: str
    completed: bool
    created_at: datetime = Field(serialization_alias="createdAt")
    updated_at: datetime = Field(serialization_alias="updatedAt")

    model_config = {"from_attributes": True, "populate_by_name": True}
