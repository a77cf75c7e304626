# SPDX-FileCopyrightText: 2026 DevGrid Developers
# SPDX-License-Identifier: Apache-2.0

"""Bounded polling with an optional overall deadline."""


# type annotations
from __future__ import annotations
from typing import Callable, Optional

# standard libs
import time

# public interface
__all__ = ['Deadline', 'wait_for', 'bounded', ]


class Deadline:
    """An absolute point in (monotonic) time shared by a batch of operations."""

    at: float = None

    def __init__(self, seconds: float) -> None:
        """Deadline `seconds` from now."""
        self.at = time.monotonic() + float(seconds)

    @property
    def remaining(self) -> float:
        """Seconds left (never negative)."""
        return max(0.0, self.at - time.monotonic())

    @property
    def expired(self) -> bool:
        return self.remaining <= 0

    def limit(self, timeout: float) -> float:
        """The smaller of `timeout` and the time remaining."""
        return min(float(timeout), self.remaining)

    def __repr__(self) -> str:
        return f'<Deadline(remaining={self.remaining:.2f})>'


def bounded(timeout: float, deadline: Optional[Deadline] = None) -> float:
    """Apply `deadline` (if any) to `timeout`."""
    return float(timeout) if deadline is None else deadline.limit(timeout)


def wait_for(predicate: Callable[[], bool], timeout: float, interval: float = 0.25) -> bool:
    """
    Call `predicate` until it returns True or `timeout` seconds elapse.

    The predicate is always called at least once. Exceptions raised by
    the predicate propagate immediately.

    Returns:
        True if the predicate passed, False on timeout.
    """
    stop = time.monotonic() + timeout
    while True:
        if predicate():
            return True
        remaining = stop - time.monotonic()
        if remaining <= 0:
            return False
        time.sleep(min(interval, remaining))
