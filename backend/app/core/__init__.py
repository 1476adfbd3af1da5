"""Core Layer — pure domain logic, no DB, no async beyond Protocol signatures.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, models/ or db/
    - Functions are deterministic given their inputs (token issuance takes an injectable `now`)

Design Decisions:
    - Functional core separated from imperative shell: services orchestrate IO around it
"""
