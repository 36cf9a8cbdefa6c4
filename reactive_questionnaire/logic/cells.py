"""Dependency-tracked reactive cells.

Every derived value of a live questionnaire is built from two primitives:

- ``Cell`` holds a mutable value. ``set`` suppresses no-op writes using an
  equality callable; a real change marks every registered dependent stale.
- ``Computed`` wraps a zero-argument function. It recomputes lazily on the
  first read after going stale and records, per recomputation, exactly which
  cells were read while its function ran.

Recomputation is pull-based: writes never evaluate anything, they only mark
dependents stale. Dependency tracking is per thread. Cells themselves are not
synchronized; callers sharing one graph across threads must serialize access
(see ``FormStore.checkout``).
"""

from __future__ import annotations

import operator
import threading
from typing import Any, Callable, Generic, List, Optional, Set, TypeVar

T = TypeVar("T")


class CyclicDependencyError(RuntimeError):
    """Raised when a computed cell is read while it is being recomputed."""


class _Tracking(threading.local):
    """Computed cells currently evaluating on this thread, innermost last."""

    def __init__(self) -> None:
        self.active: List["Computed[Any]"] = []


# Reads are recorded against the innermost evaluating cell of the reading
# thread only.
_TRACKING = _Tracking()


def _track(source: "_Source") -> None:
    active = _TRACKING.active
    if active:
        active[-1]._record(source)


class _Source:
    """Anything a computed cell can depend on."""

    def __init__(self) -> None:
        self._dependents: Set["Computed[Any]"] = set()

    @property
    def dependents(self) -> Set["Computed[Any]"]:
        return set(self._dependents)

    def _invalidate_dependents(self) -> None:
        for dependent in list(self._dependents):
            dependent._mark_stale()


class Cell(_Source, Generic[T]):
    """Mutable value holder with change suppression."""

    def __init__(self, value: T, equals: Optional[Callable[[T, T], bool]] = None) -> None:
        super().__init__()
        self._value = value
        self._equals = equals or operator.eq

    def get(self) -> T:
        _track(self)
        return self._value

    def set(self, value: T) -> None:
        """Store ``value`` and invalidate dependents unless it equals the current value."""
        if self._equals(self._value, value):
            return
        self._value = value
        self._invalidate_dependents()

    def __repr__(self) -> str:
        return f"Cell({self._value!r})"


class Computed(_Source, Generic[T]):
    """Memoized pure function of other cells.

    The function runs on the first ``get`` and again on the first ``get``
    after any cell it read has changed. If the function raises, the exception
    reaches the reader, the cell stays stale and the next read retries.
    """

    def __init__(self, fn: Callable[[], T]) -> None:
        super().__init__()
        self._fn = fn
        self._value: Optional[T] = None
        self._stale = True
        self._computing = False
        self._sources: Set[_Source] = set()

    @property
    def stale(self) -> bool:
        return self._stale

    @property
    def sources(self) -> Set[_Source]:
        return set(self._sources)

    def get(self) -> T:
        if self._computing:
            raise CyclicDependencyError(f"cyclic read of computed cell {self._fn!r}")
        _track(self)
        if self._stale:
            self._recompute()
        return self._value  # type: ignore[return-value]

    def _recompute(self) -> None:
        for source in self._sources:
            source._dependents.discard(self)
        self._sources = set()
        self._computing = True
        active = _TRACKING.active
        active.append(self)
        try:
            value = self._fn()
        finally:
            active.pop()
            self._computing = False
        self._value = value
        self._stale = False

    def _record(self, source: _Source) -> None:
        if source in self._sources:
            return
        self._sources.add(source)
        source._dependents.add(self)

    def _mark_stale(self) -> None:
        self._stale = True
        for dependent in list(self._dependents):
            if not dependent._stale:
                dependent._mark_stale()

    def __repr__(self) -> str:
        state = "stale" if self._stale else repr(self._value)
        return f"Computed({state})"


def constant(value: T) -> Computed[T]:
    """Return a computed cell that always yields ``value``."""
    return Computed(lambda: value)


__all__ = ["Cell", "Computed", "CyclicDependencyError", "constant"]
