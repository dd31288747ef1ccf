"""Planning Canvas Application Package — room sync, canvas nodes, timer and vote analysis.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)

Design Decisions:
    - Empty __init__.py: explicit imports only, no star exports
"""
