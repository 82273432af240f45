"""Slot ORM: one row per durable slot (collection name -> encoded sequence).

Invariants:
    - key is the collection name and the primary key
    - value always holds an encoded JSON array written by the Collection Store

Design Decisions:
    - LargeBinary over JSON column: the engine stores opaque bytes, the codec
      owns the format, so any KeyValueEngine can hold the same payload
"""

from datetime import datetime, timezone

from sqlalchemy import String, LargeBinary, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from itemdb.db.base import Base


class Slot(Base):
    """Durable slot row."""
    __tablename__ = "slots"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
