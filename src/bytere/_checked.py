"""Overflow-checked counter arithmetic."""

from typing import Callable


def checked_add(value: int, delta: int, limit: int, on_overflow: Callable[[], Exception]) -> int:
    """Return ``value + delta``, raising ``on_overflow()`` if it exceeds ``limit``."""
    result = value + delta
    if result > limit:
        raise on_overflow()
    return result
