"""Infrastructure Layer — persistence, server clock, and logging setup.

Invariants:
    - Infrastructure imports nothing from core/ except the error hierarchy and domain types
    - Every store failure surfaces as StoreUnavailableError (no raw SQLAlchemy errors leak)

Design Decisions:
    - Thin wrappers over SQLAlchemy: services talk to EntityStore, not to sessions
"""
