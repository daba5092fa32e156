"""
TechNotes Backend - Note SQLAlchemy Model
==========================================

What:  ORM model representing the `notes` table.
Who:   Used by NoteService for CRUD operations and by Alembic for schema management.

Table Design Rationale:
    - UUID primary key: store-generated identifier used by the API
    - ticket: human-facing sequential number (500, 501, ...) taken from the
      `ticketNums` counter. Unique, and never reused after a delete because
      the counter only moves forward
    - user_id: non-owning reference to users.id. No ON DELETE CASCADE; the
      service blocks deleting a user who still owns notes instead
    - title: unique across all notes
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    false,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


# Longest title the title column accepts
TITLE_MAX_LENGTH = 255


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Note(Base):
    """
    A work ticket assigned to a user.

    Lifecycle:
        1. Created by NoteService.create_note with the next ticket number
        2. user, title, text and completed replaced wholesale by update_note
        3. Deleted unconditionally by delete_note (notes have no dependents)

    Query Patterns:
        - Owner lookup on delete_user: SELECT ... WHERE user_id = :id LIMIT 1
          → uses idx_notes_user_id
        - Duplicate check: SELECT ... WHERE title = :title
          → uses the uq_notes_title unique index
    """

    __tablename__ = "notes"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    ticket: Mapped[int] = mapped_column(Integer, nullable=False)

    # The attribute is `user` to match the API payload; the column is
    # user_id because USER is a reserved word in PostgreSQL
    user: Mapped[uuid.UUID] = mapped_column(
        "user_id",
        Uuid,
        ForeignKey("users.id"),
        nullable=False,
    )

    title: Mapped[str] = mapped_column(String(TITLE_MAX_LENGTH), nullable=False)

    text: Mapped[str] = mapped_column(Text, nullable=False)

    completed: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )

    __table_args__ = (
        UniqueConstraint("title", name="uq_notes_title"),
        UniqueConstraint("ticket", name="uq_notes_ticket"),
        Index("idx_notes_user_id", "user_id"),
    )

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, ticket={self.ticket}, title='{self.title}')>"
