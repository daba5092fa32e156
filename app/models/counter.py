"""
TechNotes Backend - Counter SQLAlchemy Model
=============================================

What:  Named integer sequences persisted in the `counters` table.
Why:   Note tickets must keep increasing across process restarts and must
       never be handed out twice, so the last issued value lives in the
       database rather than in process memory.
"""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class Counter(Base):
    """One row per sequence; `seq` is the last value handed out."""

    __tablename__ = "counters"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    seq: Mapped[int] = mapped_column(Integer, nullable=False)

    def __repr__(self) -> str:
        return f"<Counter(id='{self.id}', seq={self.seq})>"
