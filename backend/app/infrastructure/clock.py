"""Server Clock — the single time source for timers, activity and presence.

Invariants:
    - Returns integer epoch milliseconds (UTC)
    - Every timestamp persisted by services comes from here (or an injected replacement)

Design Decisions:
    - Plain function, injected into services as `clock`: tests pass a controllable fake
"""

import time
from typing import Callable

from app.core.domain_types import EpochMs

Clock = Callable[[], EpochMs]


def server_now_ms() -> EpochMs:
    return EpochMs(int(time.time() * 1000))
