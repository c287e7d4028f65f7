"""
Album API — Application Package
================================

What: JSON-over-HTTP CRUD service for album records stored in PostgreSQL.

Architecture:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │     Services (AlbumStore / SQL)     │  ← one statement per operation
    ├─────────────────────────────────────┤
    │        Database (Engine + Pool)     │  ← async SQLAlchemy + asyncpg
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
