"""
Test Helpers
============

Utility functions shared by the test suites.
"""

import time
from typing import Callable


def wait_for_condition(
    condition: Callable[[], bool], timeout: float = 30.0, interval: float = 0.5
) -> bool:
    """Poll ``condition`` until it holds or ``timeout`` seconds pass."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        try:
            if condition():
                return True
        except Exception:
            pass
        time.sleep(interval)
    return False
