"""Clamped current/maximum accumulator used for health and move uses."""
from __future__ import annotations

from pokebattle.core.errors import ValidationError


class BoundedPool:
    """Integer pair keeping ``0 <= current <= maximum`` after every operation."""

    __slots__ = ("_current", "_maximum")

    def __init__(self, maximum: int, current: int | None = None):
        maximum = int(maximum)
        if maximum < 0:
            raise ValidationError(f"Pool maximum must be non-negative, got {maximum}")
        self._maximum = maximum
        self._current = maximum
        if current is not None:
            self.set_current(current)

    @property
    def current(self) -> int:
        return self._current

    @property
    def maximum(self) -> int:
        return self._maximum

    @property
    def empty(self) -> bool:
        return self._current == 0

    @property
    def full(self) -> bool:
        return self._current == self._maximum

    def add(self, n: int) -> int:
        """Raise current by ``n`` (clamped). Returns the amount actually added."""
        before = self._current
        self._current = max(0, min(self._maximum, self._current + int(n)))
        return self._current - before

    def subtract(self, n: int) -> int:
        """Lower current by ``n`` (clamped). Returns the amount actually removed."""
        before = self._current
        self._current = max(0, min(self._maximum, self._current - int(n)))
        return before - self._current

    def set_current(self, n: int) -> None:
        self._current = max(0, min(self._maximum, int(n)))

    def set_maximum(self, n: int) -> None:
        n = int(n)
        if n < 0:
            raise ValidationError(f"Pool maximum must be non-negative, got {n}")
        self._maximum = n
        if self._current > n:
            self._current = n

    def refill(self) -> None:
        self._current = self._maximum

    def copy(self) -> "BoundedPool":
        return BoundedPool(self._maximum, self._current)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BoundedPool):
            return NotImplemented
        return (self._current, self._maximum) == (other._current, other._maximum)

    def __repr__(self) -> str:
        return f"BoundedPool({self._current}/{self._maximum})"

    def __str__(self) -> str:
        return f"{self._current}/{self._maximum}"


__all__ = ["BoundedPool"]
