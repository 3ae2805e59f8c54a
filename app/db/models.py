"""
==============================================================================
SQLAlchemy ORM Models Module
==============================================================================

ORM model for the Snapshot Store.

The Snapshot Store keeps whole serialized documents under fixed keys. The
catalog lives under the key ``root``; every save overwrites the entire
document, so there is no per-product table.

Database Schema:
---------------

    ┌─────────────────────────────────────────────────────────────────┐
    │                       catalog_snapshots                          │
    ├─────────────────────────────────────────────────────────────────┤
    │ key (VARCHAR, PK)                                               │
    │ payload (TEXT, NOT NULL)  - JSON document                       │
    │ updated_at (DATETIME, AUTO UPDATE)                              │
    └─────────────────────────────────────────────────────────────────┘

==============================================================================
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, DateTime, String, Text, func

from app.db.database import Base


class CatalogSnapshot(Base):
    """
    A serialized document stored under a fixed key.

    Attributes:
        key: Document key (``root`` for the catalog)
        payload: JSON text of the document
        updated_at: Time of the last write
    """

    __tablename__ = "catalog_snapshots"

    key: str = Column(
        String(64),
        primary_key=True,
        doc="Document key"
    )

    payload: str = Column(
        Text,
        nullable=False,
        doc="JSON-serialized document"
    )

    updated_at: datetime = Column(
        DateTime,
        default=func.now(),
        onupdate=func.now(),
        nullable=False,
        doc="Last write timestamp"
    )

    def __repr__(self) -> str:
        """Detailed string representation for debugging."""
        return (
            f"CatalogSnapshot(key={self.key!r}, "
            f"size={len(self.payload or '')}, "
            f"updated_at={self.updated_at!r})"
        )
