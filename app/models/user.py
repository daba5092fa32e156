"""
TechNotes Backend - User SQLAlchemy Model
==========================================

What:  ORM model representing the `users` table.
Who:   Used by UserService for CRUD, by NoteService to resolve note owners,
       and by Alembic for schema management.

Table Design Rationale:
    - UUID primary key: store-generated, not guessable
    - username: unique constraint backs up the service's duplicate check, so
      two concurrent creates cannot both succeed
    - password: bcrypt hash only; never selected into API responses
    - roles: JSON array, one user may hold several roles (Employee, Manager, Admin)
"""

import uuid
from datetime import datetime, timezone
from typing import List

from sqlalchemy import JSON, Boolean, DateTime, String, UniqueConstraint, Uuid, true
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


# Longest username the username column accepts
USERNAME_MAX_LENGTH = 255


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """
    An employee account that notes are assigned to.

    Lifecycle:
        1. Created by UserService.create_user (active = True)
        2. Username, roles and active flag replaced by update_user; the
           password hash only changes when a new password is supplied
        3. Deleted by delete_user, which refuses while any note references it
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    username: Mapped[str] = mapped_column(String(USERNAME_MAX_LENGTH), nullable=False)

    password: Mapped[str] = mapped_column(String(255), nullable=False)

    roles: Mapped[List[str]] = mapped_column(JSON, nullable=False)

    active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default=true(),
    )

    # ── Timestamps ────────────────────────────────────────────────────────
    # Always UTC; conversion to local time happens in the frontend
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
        UniqueConstraint("username", name="uq_users_username"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}', active={self.active})>"
