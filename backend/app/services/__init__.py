"""Services Layer — cart lifecycle and auth-token assembly.

Invariants:
    - Services own transactions (commit/rollback); repositories never commit
    - Every failure surfaces as a KartError subclass

Design Decisions:
    - One file per vertical: cart_service.py and auth_tokens.py never call each other
"""
