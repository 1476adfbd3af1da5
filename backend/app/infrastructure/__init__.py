"""Infrastructure Layer — database sessions, repositories and logging setup.

Invariants:
    - Database exceptions are mapped to core/errors.py types at this boundary
    - Repositories implement the Protocols in core/repository_protocols.py

Design Decisions:
    - Repositories hold an AsyncSession but never commit: the service owns the transaction
"""
