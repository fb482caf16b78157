"""
ListBoard Backend: List Row SQLAlchemy Model
===============================================

What:  ORM model for the `list` table in the relational store.
How:   Inherits from the shared DeclarativeBase; Alembic reads it for migrations.
Who:   Read by ListService for GET /relational. The API never writes to it.

Table Design:
    - Integer primary key (the relational copy keeps its own sequence)
    - text: same meaning as the List record's `text` field
    - created_at / updated_at: UTC timestamps with time zone, filled by the server
"""

from datetime import datetime, timezone

from sqlalchemy import Integer, Text
from sqlalchemy import text as sql_text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import TIMESTAMP

from listboard.database import Base


class ListRow(Base):
    """A row of the relational `list` table."""

    __tablename__ = "list"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    text: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Free-form list item text",
    )

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=sql_text("CURRENT_TIMESTAMP"),
    )

    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        server_default=sql_text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<ListRow(id={self.id}, text='{self.text[:20]}')>"
