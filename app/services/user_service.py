"""
TechNotes Backend - User Service
=================================

What:  Validation and persistence for user accounts.
Who:   Called by the /users route handlers; NoteService uses find_user to
       resolve note owners.

Rules enforced here:
    - username is unique (pre-write duplicate check, backed by the
      uq_users_username constraint for concurrent writers)
    - roles is a non-empty list of non-blank strings
    - passwords are stored as bcrypt hashes only; an update without a
      password keeps the stored hash
    - a user who still owns notes cannot be deleted. The note check runs
      before the user lookup, so deleting an unknown id that somehow still
      has notes reports the notes, not the missing user

Error Handling Strategy:
    Validation and integrity failures raise the matching TechNotesError.
    Write failures are wrapped in DatabaseError, except a uq_users_username
    violation (ConflictError) and a notes foreign-key violation on delete
    (HasDependentsError). Read failures propagate as SQLAlchemyError and are turned
    into a generic 500 by the global handler.
"""

import logging
from typing import Any, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import (
    ConflictError,
    DatabaseError,
    HasDependentsError,
    NotFoundError,
    ValidationError,
)
from app.models.note import Note
from app.models.user import USERNAME_MAX_LENGTH, User
from app.schemas.common import MessageResponse
from app.schemas.user import UserResponse
from app.security import hash_password
from app.services.validation import (
    is_blank,
    parse_id,
    valid_roles,
    violates_foreign_key,
    violates_unique,
)

logger = logging.getLogger(__name__)


def _check_username_length(username: str) -> None:
    if len(username) > USERNAME_MAX_LENGTH:
        raise ValidationError(
            message=f"Username must be at most {USERNAME_MAX_LENGTH} characters",
            field="username",
        )


def _is_duplicate_username(e: IntegrityError) -> bool:
    return violates_unique(e, "uq_users_username", "users.username")


class UserService:
    """
    Business logic layer for user operations.

    Responsibilities:
        - list_users(): every user, without password hashes
        - create_user(): validate, reject duplicates, hash, persist
        - update_user(): wholesale replace, optional password change
        - delete_user(): refuse while notes reference the user
    """

    # ── Lookups ───────────────────────────────────────────────────────────

    async def find_user(self, db: AsyncSession, user_id: Any) -> Optional[User]:
        """Return the user with this id, or None (malformed ids never match)."""
        parsed = parse_id(user_id)
        if parsed is None:
            return None
        result = await db.execute(select(User).where(User.id == parsed))
        return result.scalar_one_or_none()

    async def find_by_username(self, db: AsyncSession, username: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    # ── Operations ────────────────────────────────────────────────────────

    async def list_users(self, db: AsyncSession) -> List[UserResponse]:
        """
        Return all users, oldest first.

        Raises:
            NotFoundError: There are no users at all
        """
        result = await db.execute(select(User).order_by(User.created_at))
        users = list(result.scalars().all())
        if not users:
            raise NotFoundError(resource="user", message="No users found")
        return [UserResponse.model_validate(user) for user in users]

    async def create_user(
        self,
        db: AsyncSession,
        username: Optional[str],
        password: Optional[str],
        roles: Any,
    ) -> MessageResponse:
        """
        Create a new active user.

        Raises:
            ValidationError: username/password missing, username too long,
                             roles invalid, or password longer than bcrypt allows
            ConflictError:   username already taken
            DatabaseError:   the insert failed
        """
        if is_blank(username) or not password or not valid_roles(roles):
            raise ValidationError(message="Username, password and roles fields are required!")
        _check_username_length(username)

        if await self.find_by_username(db, username) is not None:
            raise ConflictError(message="Duplicate username", context={"username": username})

        user = User(
            username=username,
            password=hash_password(password),
            roles=list(roles),
            active=True,
        )
        try:
            db.add(user)
            await db.flush()
        except IntegrityError as e:
            if not _is_duplicate_username(e):
                logger.error("Integrity error creating user %s: %s", username, str(e), exc_info=True)
                raise DatabaseError(
                    message="An issue occurred creating user in database",
                    context={"error_type": type(e).__name__},
                ) from e
            # Another request inserted the same username after our check
            raise ConflictError(message="Duplicate username", context={"username": username}) from e
        except SQLAlchemyError as e:
            logger.error("Database error creating user %s: %s", username, str(e), exc_info=True)
            raise DatabaseError(
                message="An issue occurred creating user in database",
                context={"error_type": type(e).__name__},
            ) from e

        logger.info("User created: %s (%s)", user.username, user.id)
        return MessageResponse(message=f"New user {username} created")

    async def update_user(
        self,
        db: AsyncSession,
        user_id: Optional[str],
        username: Optional[str],
        roles: Any,
        active: Any,
        password: Optional[str] = None,
    ) -> MessageResponse:
        """
        Replace username, roles and active flag; change the password only
        when a non-empty one is supplied.

        Raises:
            ValidationError: id/username missing, username too long, roles
                             invalid, or active not a bool
            NotFoundError:   no user with this id
            ConflictError:   username belongs to another user
            DatabaseError:   the update failed
        """
        if (
            not user_id
            or is_blank(username)
            or not valid_roles(roles)
            or not isinstance(active, bool)
        ):
            raise ValidationError(message="Id, username, roles and active fields are required!")
        _check_username_length(username)

        user = await self.find_user(db, user_id)
        if user is None:
            raise NotFoundError(resource="user", resource_id=user_id, message="User not found")

        duplicate = await self.find_by_username(db, username)
        if duplicate is not None and duplicate.id != user.id:
            raise ConflictError(message="Duplicate username", context={"username": username})

        user.username = username
        user.roles = list(roles)
        user.active = active
        if password:
            user.password = hash_password(password)

        try:
            await db.flush()
        except IntegrityError as e:
            if not _is_duplicate_username(e):
                logger.error("Integrity error updating user %s: %s", user_id, str(e), exc_info=True)
                raise DatabaseError(
                    message="An issue occurred updating user in database",
                    context={"error_type": type(e).__name__},
                ) from e
            raise ConflictError(message="Duplicate username", context={"username": username}) from e
        except SQLAlchemyError as e:
            logger.error("Database error updating user %s: %s", user_id, str(e), exc_info=True)
            raise DatabaseError(
                message="An issue occurred updating user in database",
                context={"error_type": type(e).__name__},
            ) from e

        logger.info("User updated: %s (%s)", user.username, user.id)
        return MessageResponse(message=f"{user.username} updated successfully")

    async def delete_user(self, db: AsyncSession, user_id: Optional[str]) -> MessageResponse:
        """
        Delete a user who owns no notes.

        Raises:
            ValidationError:    id missing
            HasDependentsError: at least one note references the user
            NotFoundError:      no user with this id
        """
        if not user_id:
            raise ValidationError(message="Id is required", field="id")

        parsed = parse_id(user_id)
        if parsed is not None:
            result = await db.execute(select(Note.id).where(Note.user == parsed).limit(1))
            if result.scalar_one_or_none() is not None:
                raise HasDependentsError(context={"user_id": user_id})

        user = await self.find_user(db, user_id)
        if user is None:
            raise NotFoundError(resource="user", resource_id=user_id)

        username = user.username
        try:
            await db.delete(user)
            await db.flush()
        except IntegrityError as e:
            if not violates_foreign_key(e):
                logger.error("Integrity error deleting user %s: %s", user_id, str(e), exc_info=True)
                raise DatabaseError(
                    message="An issue occurred deleting user from database",
                    context={"error_type": type(e).__name__},
                ) from e
            # A note was assigned to the user after the dependents check
            raise HasDependentsError(context={"user_id": user_id}) from e
        except SQLAlchemyError as e:
            logger.error("Database error deleting user %s: %s", user_id, str(e), exc_info=True)
            raise DatabaseError(
                message="An issue occurred deleting user from database",
                context={"error_type": type(e).__name__},
            ) from e

        logger.info("User deleted: %s (%s)", username, user_id)
        return MessageResponse(message=f"Username {username} with id {user_id} deleted")


# Stateless; one shared instance is enough
user_service = UserService()
