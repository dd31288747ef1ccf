"""Shared route dependencies.

Invariants:
    - Routes never read the clock directly; get_clock is overridable in tests
"""

from app.infrastructure.clock import Clock, server_now_ms


def get_clock() -> Clock:
    return server_now_ms
