from __future__ import annotations

import time


def wait_until(predicate, timeout: float, interval: float = 0.2):
    """Polls ``predicate`` until it returns a truthy value or ``timeout`` elapses.

    A non-positive timeout evaluates the predicate exactly once.
    """

    result = predicate()
    if result or timeout <= 0:
        return result
    deadline = time.monotonic() + timeout
    while not result and time.monotonic() < deadline:
        time.sleep(max(min(interval, deadline - time.monotonic()), 0))
        result = predicate()
    return result
