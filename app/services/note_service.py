"""
TechNotes Backend - Note Service (Business Logic)
==================================================

What:  Validation and persistence for notes, including the cross-check that
       every note points at an existing user.
Why:   Encapsulates all note rules in one place, independent of HTTP concerns.
Who:   Called by the /notes route handlers.

Create Flow (POST /notes):
    ┌──────────┐    ┌─────────────┐    ┌──────────────┐    ┌─────────────┐    ┌──────────┐
    │ Validate │───▶│ Owner must  │───▶│ Title must   │───▶│ Next ticket │───▶│  Insert  │
    │  fields  │    │   exist     │    │  be unused   │    │ (counter)   │    │  (flush) │
    └──────────┘    └─────────────┘    └──────────────┘    └─────────────┘    └──────────┘

    The duplicate-title check is a fast path with a friendly message. Two
    concurrent creates can both pass it; the uq_notes_title constraint then
    rejects the second insert and the IntegrityError becomes a ConflictError.
    A foreign-key failure (owner deleted meanwhile) becomes NotFoundError.

Design Decision:
    NoteService is stateless. It receives the db session for each call and
    never commits: get_db_session commits once the route returns, or rolls
    back if anything raised.
"""

import logging
from typing import Any, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.exceptions import (
    ConflictError,
    DatabaseError,
    NotFoundError,
    TechNotesError,
    ValidationError,
)
from app.models.note import TITLE_MAX_LENGTH, Note
from app.schemas.common import MessageResponse
from app.schemas.note import NoteResponse
from app.services.counter_service import counter_service
from app.services.user_service import user_service
from app.services.validation import (
    is_blank,
    parse_id,
    violates_foreign_key,
    violates_unique,
)

logger = logging.getLogger(__name__)

# Name of the counter row backing Note.ticket
TICKET_COUNTER = "ticketNums"


class NoteService:
    """
    Business logic layer for note operations.

    Responsibilities:
        - list_notes(): every note, each enriched with its owner's username
        - create_note(): validate, check owner and title, assign ticket, persist
        - update_note(): wholesale replace of user/title/text/completed
        - delete_note(): remove by id
    """

    # ── Lookups ───────────────────────────────────────────────────────────

    async def find_note(self, db: AsyncSession, note_id: Any) -> Optional[Note]:
        parsed = parse_id(note_id)
        if parsed is None:
            return None
        result = await db.execute(select(Note).where(Note.id == parsed))
        return result.scalar_one_or_none()

    async def find_by_title(self, db: AsyncSession, title: str) -> Optional[Note]:
        result = await db.execute(select(Note).where(Note.title == title))
        return result.scalar_one_or_none()

    @staticmethod
    def _check_title_length(title: str) -> None:
        if len(title) > TITLE_MAX_LENGTH:
            raise ValidationError(
                message=f"Title must be at most {TITLE_MAX_LENGTH} characters",
                field="title",
            )

    @staticmethod
    def _integrity_error(
        e: IntegrityError, title: str, user: str, message: str, duplicate_message: str
    ) -> TechNotesError:
        """
        Map a failed flush to the error the client should see.

        uq_notes_title → ConflictError; the notes → users foreign key (owner
        deleted after our lookup) → NotFoundError; anything else, such as a
        clash on the counter row, is a store failure.
        """
        if violates_unique(e, "uq_notes_title", "notes.title"):
            return ConflictError(message=duplicate_message, context={"title": title})
        if violates_foreign_key(e):
            return NotFoundError(resource="user", resource_id=user)
        logger.error("Integrity error on note '%s': %s", title, str(e), exc_info=True)
        return DatabaseError(message=message, context={"error_type": type(e).__name__})

    # ── Operations ────────────────────────────────────────────────────────

    async def list_notes(self, db: AsyncSession) -> List[NoteResponse]:
        """
        Return every note in ticket order with the owner's username attached.

        Owners are resolved one note at a time. A note whose owner cannot be
        found is still returned, with username = None.

        Raises:
            NotFoundError: There are no notes at all
        """
        result = await db.execute(select(Note).order_by(Note.ticket))
        notes = list(result.scalars().all())
        if not notes:
            raise NotFoundError(resource="note", message="No notes found")

        items = []
        for note in notes:
            owner = await user_service.find_user(db, note.user)
            if owner is None:
                logger.warning("Note %s references missing user %s", note.id, note.user)
            item = NoteResponse.model_validate(note)
            item.username = owner.username if owner else None
            items.append(item)
        return items

    async def create_note(
        self,
        db: AsyncSession,
        user: Optional[str],
        title: Optional[str],
        text: Optional[str],
    ) -> MessageResponse:
        """
        Create a note for an existing user.

        Args:
            db: Async database session
            user: Id of the owning user
            title: Note title, unique across all notes
            text: Note body

        Raises:
            ValidationError: Any field missing or blank, or title too long
            NotFoundError:   `user` does not resolve to a user
            ConflictError:   Title already in use
            DatabaseError:   The insert failed
        """
        if not user or is_blank(title) or is_blank(text):
            raise ValidationError(message="User, title and text are required")
        self._check_title_length(title)

        owner = await user_service.find_user(db, user)
        if owner is None:
            raise NotFoundError(resource="user", resource_id=user)

        if await self.find_by_title(db, title) is not None:
            raise ConflictError(
                message=f"Note with title {title} already exists",
                context={"title": title},
            )

        try:
            ticket = await counter_service.next_value(db, TICKET_COUNTER, settings.ticket_start)
            note = Note(ticket=ticket, user=owner.id, title=title, text=text)
            db.add(note)
            await db.flush()
        except IntegrityError as e:
            raise self._integrity_error(
                e,
                title,
                user,
                message="An issue occurred creating note in database",
                duplicate_message=f"Note with title {title} already exists",
            ) from e
        except SQLAlchemyError as e:
            logger.error("Database error creating note '%s': %s", title, str(e), exc_info=True)
            raise DatabaseError(
                message="An issue occurred creating note in database",
                context={"error_type": type(e).__name__},
            ) from e

        logger.info("Note created: ticket=%d title='%s' user=%s", note.ticket, note.title, note.user)
        return MessageResponse(message=f"New note '{note.title}' created for user {note.user}")

    async def update_note(
        self,
        db: AsyncSession,
        note_id: Optional[str],
        user: Optional[str],
        title: Optional[str],
        text: Optional[str],
        completed: Any,
    ) -> MessageResponse:
        """
        Replace user, title, text and completed on an existing note.

        Check order: note exists → title free → user exists.

        Raises:
            ValidationError: Any field missing/blank, completed not a bool,
                             or title too long
            NotFoundError:   Note or user does not exist
            ConflictError:   Another note already has this title
            DatabaseError:   The update failed
        """
        if (
            not note_id
            or not user
            or is_blank(title)
            or is_blank(text)
            or not isinstance(completed, bool)
        ):
            raise ValidationError(message="Id, user, title, text and completed are required")
        self._check_title_length(title)

        note = await self.find_note(db, note_id)
        if note is None:
            raise NotFoundError(resource="note", resource_id=note_id)

        duplicate = await self.find_by_title(db, title)
        if duplicate is not None and duplicate.id != note.id:
            raise ConflictError(
                message=f"Note with title '{title}' already exists",
                context={"title": title},
            )

        owner = await user_service.find_user(db, user)
        if owner is None:
            raise NotFoundError(resource="user", resource_id=user)

        note.user = owner.id
        note.title = title
        note.text = text
        note.completed = completed

        try:
            await db.flush()
        except IntegrityError as e:
            raise self._integrity_error(
                e,
                title,
                user,
                message="An issue occurred updating note in database",
                duplicate_message=f"Note with title '{title}' already exists",
            ) from e
        except SQLAlchemyError as e:
            logger.error("Database error updating note %s: %s", note_id, str(e), exc_info=True)
            raise DatabaseError(
                message="An issue occurred updating note in database",
                context={"error_type": type(e).__name__},
            ) from e

        logger.info("Note updated: ticket=%d title='%s'", note.ticket, note.title)
        return MessageResponse(message=f"Note '{note.title}' updated successfully")

    async def delete_note(self, db: AsyncSession, note_id: Optional[str]) -> MessageResponse:
        """
        Delete a note by id. Notes have no dependents, so nothing blocks this.

        Raises:
            ValidationError: id missing
            NotFoundError:   no note with this id
        """
        if not note_id:
            raise ValidationError(message="Id is required", field="id")

        note = await self.find_note(db, note_id)
        if note is None:
            raise NotFoundError(resource="note", resource_id=note_id)

        title = note.title
        try:
            await db.delete(note)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error deleting note %s: %s", note_id, str(e), exc_info=True)
            raise DatabaseError(
                message="An issue occurred deleting note from database",
                context={"error_type": type(e).__name__},
            ) from e

        logger.info("Note deleted: title='%s' id=%s", title, note_id)
        return MessageResponse(message=f"Note '{title}' with id {note_id} deleted")


# Stateless; one shared instance is enough
note_service = NoteService()
