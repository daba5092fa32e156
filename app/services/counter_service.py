"""
TechNotes Backend - Counter Service
====================================

What:  Hands out values from named, persisted integer sequences.
Who:   NoteService, for the `ticketNums` sequence behind Note.ticket.

How next_value works:
    1. UPDATE counters SET seq = seq + 1 WHERE id = :name RETURNING seq
       A single statement, so two concurrent requests can never read the
       same value: the row lock serializes them.
    2. If no row was updated the sequence has never been used; insert it
       with seq = start and return start.

    The increment runs inside the caller's transaction. If the note insert
    that follows fails, the whole transaction rolls back and the value was
    never visible to anyone. Deleting a note never touches the counter, so
    ticket numbers are not reused.
"""

import logging

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.counter import Counter

logger = logging.getLogger(__name__)


class CounterService:
    """Stateless access to the `counters` table."""

    async def next_value(self, db: AsyncSession, name: str, start: int) -> int:
        """
        Atomically increment the named counter and return the new value.

        Args:
            db: Async database session (the caller's transaction)
            name: Sequence name, e.g. "ticketNums"
            start: Value returned by the very first call for this name

        Returns:
            The next value of the sequence
        """
        result = await db.execute(
            update(Counter)
            .where(Counter.id == name)
            .values(seq=Counter.seq + 1)
            .returning(Counter.seq)
            .execution_options(synchronize_session=False)
        )
        value = result.scalar_one_or_none()
        if value is not None:
            return value

        logger.info("Initializing counter '%s' at %d", name, start)
        db.add(Counter(id=name, seq=start))
        await db.flush()
        return start


# Stateless; one shared instance is enough
counter_service = CounterService()
