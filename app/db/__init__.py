"""
==============================================================================
Database Package
==============================================================================

SQLAlchemy infrastructure behind the Snapshot Store.

Architecture:
------------
├── database.py   - DatabaseManager class, session factory
└── models.py     - CatalogSnapshot ORM model

Usage:
------
    from app.db import DatabaseManager, CatalogSnapshot

    db_manager = DatabaseManager("sqlite://")
    db_manager.create_tables()
    with db_manager.session_scope() as session:
        snapshot = session.get(CatalogSnapshot, "root")

==============================================================================
"""

from .database import Base, DatabaseManager
from .models import CatalogSnapshot

__all__ = [
    "Base",
    "DatabaseManager",
    "CatalogSnapshot",
]
