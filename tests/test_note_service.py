"""
TechNotes Backend - Note Service Unit Tests
============================================

What:  Tests for NoteService business logic (list, create, update, delete).
How:   Most tests run against a throwaway SQLite database through the
       db_session fixture; store-failure paths use a mock session.

What we test:
    ✅ Unknown owner is rejected and nothing is persisted
    ✅ Duplicate titles are rejected on create and update
    ✅ Tickets start at 500, increase, and are not reused after deletes
    ✅ Wholesale update, and the check order note → title → user
    ✅ Store failures map by constraint: title → ConflictError,
       owner foreign key → NotFoundError, anything else → DatabaseError
    ✅ Titles longer than the column are rejected before the insert
"""

import uuid
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy import func, select, text
from sqlalchemy.exc import IntegrityError, OperationalError

from app.exceptions import ConflictError, DatabaseError, NotFoundError, ValidationError
from app.models.note import Note
from app.models.user import User
from app.services.note_service import NoteService
from app.services.user_service import user_service


def result_with(value):
    """A mock execute() result whose scalar_one_or_none() returns `value`."""
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    return result


async def count_notes(db) -> int:
    result = await db.execute(select(func.count(Note.id)))
    return result.scalar_one()


class TestNoteServiceCreate:
    """Tests for create_note."""

    def setup_method(self):
        self.service = NoteService()

    @pytest.mark.asyncio
    async def test_create_note_success(self, db_session, alice):
        result = await self.service.create_note(
            db_session, user=str(alice.id), title="Task A", text="do it"
        )

        assert result.message == f"New note 'Task A' created for user {alice.id}"
        note = await self.service.find_by_title(db_session, "Task A")
        assert note.ticket == 500
        assert note.user == alice.id
        assert note.completed is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "user,title,text",
        [
            (None, "Task A", "do it"),
            ("", "Task A", "do it"),
            ("some-id", None, "do it"),
            ("some-id", "   ", "do it"),
            ("some-id", "Task A", ""),
            ("some-id", "Task A", " \t "),
        ],
    )
    async def test_create_note_missing_fields(self, db_session, user, title, text):
        with pytest.raises(ValidationError, match="User, title and text are required"):
            await self.service.create_note(db_session, user=user, title=title, text=text)

    @pytest.mark.asyncio
    async def test_create_note_unknown_user_persists_nothing(self, db_session, alice):
        missing = str(uuid.uuid4())

        with pytest.raises(NotFoundError, match=f"User with id {missing} not found"):
            await self.service.create_note(db_session, user=missing, title="Task A", text="do it")

        assert await count_notes(db_session) == 0

    @pytest.mark.asyncio
    async def test_create_note_malformed_user_id(self, db_session, alice):
        with pytest.raises(NotFoundError):
            await self.service.create_note(db_session, user="not-a-uuid", title="Task A", text="x")

    @pytest.mark.asyncio
    async def test_create_note_duplicate_title(self, db_session, alice_note, alice):
        with pytest.raises(ConflictError, match="Note with title Task A already exists"):
            await self.service.create_note(
                db_session, user=str(alice.id), title="Task A", text="again"
            )

        assert await count_notes(db_session) == 1

    @pytest.mark.asyncio
    async def test_tickets_increase_and_are_never_reused(self, db_session, alice):
        for title in ("one", "two", "three"):
            await self.service.create_note(db_session, user=str(alice.id), title=title, text="t")

        three = await self.service.find_by_title(db_session, "three")
        await self.service.delete_note(db_session, note_id=str(three.id))

        await self.service.create_note(db_session, user=str(alice.id), title="four", text="t")

        result = await db_session.execute(select(Note.ticket).order_by(Note.ticket))
        assert list(result.scalars().all()) == [500, 501, 503]

    @pytest.mark.asyncio
    async def test_create_note_store_failure_is_internal(self, mock_db_session):
        owner = MagicMock(spec=User)
        owner.id = uuid.uuid4()
        mock_db_session.execute = AsyncMock(side_effect=[result_with(owner), result_with(None)])
        mock_db_session.flush = AsyncMock(
            side_effect=OperationalError("INSERT INTO notes", {}, Exception("disk I/O error"))
        )

        with patch("app.services.note_service.counter_service") as mock_counter:
            mock_counter.next_value = AsyncMock(return_value=500)

            with pytest.raises(DatabaseError, match="An issue occurred creating note in database"):
                await self.service.create_note(
                    mock_db_session, user=str(owner.id), title="Task A", text="do it"
                )

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "driver_message",
        [
            "UNIQUE constraint failed: notes.title",
            'duplicate key value violates unique constraint "uq_notes_title"',
        ],
    )
    async def test_create_note_unique_violation_is_conflict(self, mock_db_session, driver_message):
        """Two racing creates: the loser's insert hits uq_notes_title."""
        owner = MagicMock(spec=User)
        owner.id = uuid.uuid4()
        mock_db_session.execute = AsyncMock(side_effect=[result_with(owner), result_with(None)])
        mock_db_session.flush = AsyncMock(
            side_effect=IntegrityError("INSERT INTO notes", {}, Exception(driver_message))
        )

        with patch("app.services.note_service.counter_service") as mock_counter:
            mock_counter.next_value = AsyncMock(return_value=501)

            with pytest.raises(ConflictError, match="Note with title Task A already exists"):
                await self.service.create_note(
                    mock_db_session, user=str(owner.id), title="Task A", text="do it"
                )

    @pytest.mark.asyncio
    async def test_create_note_foreign_key_violation_is_not_found(self, mock_db_session):
        """The owner was deleted between the lookup and the insert."""
        owner = MagicMock(spec=User)
        owner.id = uuid.uuid4()
        mock_db_session.execute = AsyncMock(side_effect=[result_with(owner), result_with(None)])
        mock_db_session.flush = AsyncMock(
            side_effect=IntegrityError(
                "INSERT INTO notes", {}, Exception("FOREIGN KEY constraint failed")
            )
        )

        with patch("app.services.note_service.counter_service") as mock_counter:
            mock_counter.next_value = AsyncMock(return_value=500)

            with pytest.raises(NotFoundError, match=f"User with id {owner.id} not found"):
                await self.service.create_note(
                    mock_db_session, user=str(owner.id), title="Brand new title", text="x"
                )

    @pytest.mark.asyncio
    async def test_create_note_counter_collision_is_internal(self, mock_db_session):
        """A clash on the counter row is a store failure, not a duplicate title."""
        owner = MagicMock(spec=User)
        owner.id = uuid.uuid4()
        mock_db_session.execute = AsyncMock(side_effect=[result_with(owner), result_with(None)])
        mock_db_session.flush = AsyncMock(
            side_effect=IntegrityError(
                "INSERT INTO counters", {}, Exception("UNIQUE constraint failed: counters.id")
            )
        )

        with patch("app.services.note_service.counter_service") as mock_counter:
            mock_counter.next_value = AsyncMock(return_value=500)

            with pytest.raises(DatabaseError, match="An issue occurred creating note in database"):
                await self.service.create_note(
                    mock_db_session, user=str(owner.id), title="Task A", text="do it"
                )

    @pytest.mark.asyncio
    async def test_create_note_owner_missing_from_store(self, db_session):
        """With foreign keys enforced, an owner that vanished is reported as not found."""
        await db_session.execute(text("PRAGMA foreign_keys=ON"))
        ghost = User(id=uuid.uuid4(), username="ghost", password="x", roles=["Employee"])

        with patch.object(user_service, "find_user", AsyncMock(return_value=ghost)):
            with pytest.raises(NotFoundError, match=f"User with id {ghost.id} not found"):
                await self.service.create_note(
                    db_session, user=str(ghost.id), title="Brand new title", text="x"
                )

    @pytest.mark.asyncio
    async def test_create_note_title_too_long(self, db_session, alice):
        with pytest.raises(ValidationError, match="Title must be at most 255 characters"):
            await self.service.create_note(
                db_session, user=str(alice.id), title="t" * 256, text="x"
            )

        assert await count_notes(db_session) == 0

    @pytest.mark.asyncio
    async def test_create_note_title_at_limit(self, db_session, alice):
        await self.service.create_note(db_session, user=str(alice.id), title="t" * 255, text="x")

        assert await count_notes(db_session) == 1


class TestNoteServiceList:
    """Tests for list_notes."""

    def setup_method(self):
        self.service = NoteService()

    @pytest.mark.asyncio
    async def test_list_notes_empty(self, db_session):
        with pytest.raises(NotFoundError, match="No notes found"):
            await self.service.list_notes(db_session)

    @pytest.mark.asyncio
    async def test_list_notes_attaches_username(self, db_session, alice, alice_note):
        await self.service.create_note(db_session, user=str(alice.id), title="Task B", text="b")

        notes = await self.service.list_notes(db_session)

        assert [n.title for n in notes] == ["Task A", "Task B"]
        assert [n.ticket for n in notes] == [500, 501]
        assert all(n.username == "alice" for n in notes)

    @pytest.mark.asyncio
    async def test_list_notes_missing_owner_gets_null_username(self, mock_db_session):
        now = datetime.now(timezone.utc)
        orphan = Note(
            id=uuid.uuid4(), ticket=500, user=uuid.uuid4(), title="Orphan", text="t",
            completed=False, created_at=now, updated_at=now,
        )
        listing = MagicMock()
        listing.scalars.return_value.all.return_value = [orphan]
        mock_db_session.execute = AsyncMock(side_effect=[listing, result_with(None)])

        notes = await self.service.list_notes(mock_db_session)

        assert len(notes) == 1
        assert notes[0].title == "Orphan"
        assert notes[0].username is None


class TestNoteServiceUpdate:
    """Tests for update_note."""

    def setup_method(self):
        self.service = NoteService()

    @pytest.mark.asyncio
    async def test_update_note_replaces_fields(self, db_session, alice, alice_note):
        bob = User(username="bob", password="x", roles=["Manager"])
        db_session.add(bob)
        await db_session.flush()

        result = await self.service.update_note(
            db_session,
            note_id=str(alice_note.id),
            user=str(bob.id),
            title="Task A",
            text="changed",
            completed=True,
        )

        assert result.message == "Note 'Task A' updated successfully"
        note = await self.service.find_note(db_session, alice_note.id)
        assert note.text == "changed"
        assert note.completed is True
        assert note.user == bob.id
        assert note.ticket == 500

    @pytest.mark.asyncio
    @pytest.mark.parametrize("completed", [None, "true", 1, 0])
    async def test_update_note_completed_must_be_bool(self, db_session, alice, alice_note, completed):
        with pytest.raises(ValidationError, match="Id, user, title, text and completed are required"):
            await self.service.update_note(
                db_session,
                note_id=str(alice_note.id),
                user=str(alice.id),
                title="Task A",
                text="x",
                completed=completed,
            )

    @pytest.mark.asyncio
    async def test_update_note_unknown_note(self, db_session, alice):
        missing = str(uuid.uuid4())
        with pytest.raises(NotFoundError, match=f"Note with id {missing} not found"):
            await self.service.update_note(
                db_session, note_id=missing, user=str(alice.id),
                title="Task A", text="x", completed=False,
            )

    @pytest.mark.asyncio
    async def test_update_note_title_taken_by_other_note(self, db_session, alice, alice_note):
        await self.service.create_note(db_session, user=str(alice.id), title="Task B", text="b")
        task_b = await self.service.find_by_title(db_session, "Task B")

        with pytest.raises(ConflictError, match="Note with title 'Task A' already exists"):
            await self.service.update_note(
                db_session, note_id=str(task_b.id), user=str(alice.id),
                title="Task A", text="b", completed=False,
            )

    @pytest.mark.asyncio
    async def test_update_note_title_check_runs_before_user_check(self, db_session, alice, alice_note):
        await self.service.create_note(db_session, user=str(alice.id), title="Task B", text="b")
        task_b = await self.service.find_by_title(db_session, "Task B")

        with pytest.raises(ConflictError):
            await self.service.update_note(
                db_session, note_id=str(task_b.id), user=str(uuid.uuid4()),
                title="Task A", text="b", completed=False,
            )

    @pytest.mark.asyncio
    async def test_update_note_unknown_user(self, db_session, alice_note):
        missing = str(uuid.uuid4())
        with pytest.raises(NotFoundError, match=f"User with id {missing} not found"):
            await self.service.update_note(
                db_session, note_id=str(alice_note.id), user=missing,
                title="Task A", text="x", completed=True,
            )

        note = await self.service.find_note(db_session, alice_note.id)
        assert note.text == "do it"

    @pytest.mark.asyncio
    async def test_update_note_title_too_long(self, db_session, alice, alice_note):
        with pytest.raises(ValidationError, match="Title must be at most 255 characters"):
            await self.service.update_note(
                db_session, note_id=str(alice_note.id), user=str(alice.id),
                title="t" * 256, text="x", completed=False,
            )

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error,expected",
        [
            (
                OperationalError("UPDATE notes", {}, Exception("database is locked")),
                DatabaseError,
            ),
            (
                IntegrityError("UPDATE notes", {}, Exception("UNIQUE constraint failed: notes.title")),
                ConflictError,
            ),
            (
                IntegrityError("UPDATE notes", {}, Exception("FOREIGN KEY constraint failed")),
                NotFoundError,
            ),
        ],
    )
    async def test_update_note_store_failures(self, mock_db_session, error, expected):
        now = datetime.now(timezone.utc)
        note = Note(
            id=uuid.uuid4(), ticket=500, user=uuid.uuid4(), title="Task A", text="t",
            completed=False, created_at=now, updated_at=now,
        )
        owner = MagicMock(spec=User)
        owner.id = uuid.uuid4()
        mock_db_session.execute = AsyncMock(
            side_effect=[result_with(note), result_with(None), result_with(owner)]
        )
        mock_db_session.flush = AsyncMock(side_effect=error)

        with pytest.raises(expected):
            await self.service.update_note(
                mock_db_session, note_id=str(note.id), user=str(owner.id),
                title="Task B", text="t", completed=True,
            )


class TestNoteServiceDelete:
    """Tests for delete_note."""

    def setup_method(self):
        self.service = NoteService()

    @pytest.mark.asyncio
    async def test_delete_note_requires_id(self, db_session):
        with pytest.raises(ValidationError, match="Id is required"):
            await self.service.delete_note(db_session, note_id=None)

    @pytest.mark.asyncio
    async def test_delete_note_unknown(self, db_session):
        with pytest.raises(NotFoundError):
            await self.service.delete_note(db_session, note_id=str(uuid.uuid4()))

    @pytest.mark.asyncio
    async def test_delete_note_success(self, db_session, alice_note):
        note_id = str(alice_note.id)

        result = await self.service.delete_note(db_session, note_id=note_id)

        assert result.message == f"Note 'Task A' with id {note_id} deleted"
        assert await count_notes(db_session) == 0

    @pytest.mark.asyncio
    async def test_delete_note_store_failure_is_internal(self, mock_db_session):
        note = MagicMock(spec=Note)
        note.id = uuid.uuid4()
        note.title = "Task A"
        mock_db_session.execute = AsyncMock(return_value=result_with(note))
        mock_db_session.flush = AsyncMock(
            side_effect=OperationalError("DELETE FROM notes", {}, Exception("disk I/O error"))
        )

        with pytest.raises(DatabaseError, match="An issue occurred deleting note from database"):
            await self.service.delete_note(mock_db_session, note_id=str(note.id))
