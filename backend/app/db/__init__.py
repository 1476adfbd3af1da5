"""Database Metadata — the SQLAlchemy declarative Base shared by every model.

Invariants:
    - Engine and sessions live in infrastructure/database.py, never here

Design Decisions:
    - asyncpg driver for PostgreSQL: native async, no thread pool overhead
"""
