"""Database Infrastructure: SQLAlchemy declarative base for the slot table.

Invariants:
    - Single async engine per SqlAlchemyEngine instance
    - All sessions are async (AsyncSession)

Design Decisions:
    - aiosqlite driver by default: a local file needs no server process
"""
