"""Clock abstraction shared by the cache and the rate limiter.

A clock is any zero-argument callable returning seconds as a float. The
default is time.monotonic so expiry and refill are immune to wall-clock jumps;
tests inject a manual clock instead of patching the time module.
"""

from __future__ import annotations

import time
from typing import Callable

Clock = Callable[[], float]


def system_clock() -> float:
    return time.monotonic()
