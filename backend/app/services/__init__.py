"""Services Layer — imperative shell around the pure core.

Invariants:
    - Every service is constructed with (db, clock) and talks to the store through EntityStore
    - Services raise typed PlanningPokerError subclasses; they never return error dicts

Design Decisions:
    - One service per component (rooms, membership, canvas, timer, voting, maintenance)
      so routes import only what they delegate to
"""
