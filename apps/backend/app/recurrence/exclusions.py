from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from threading import Lock
from typing import Iterable, Iterator

DateKey = tuple[int, int, int]


class ExclusionResult(str, Enum):
    ADDED = "added"
    ALREADY_EXCLUDED = "already_excluded"


def normalize_date(value: date) -> date:
    """Drop any time-of-day component; ``datetime`` is a subclass of ``date``."""
    if isinstance(value, datetime):
        return value.date()
    return value


def date_key(value: date) -> DateKey:
    value = normalize_date(value)
    return (value.year, value.month, value.day)


class ExclusionSet:
    """Dates at which a template must not produce an occurrence.

    Keys are ``(year, month, day)`` tuples so membership is exact and
    independent of any time component carried by stored values.
    """

    def __init__(self, dates: Iterable[date] = ()) -> None:
        self._keys: set[DateKey] = {date_key(d) for d in dates}
        self._lock = Lock()

    @classmethod
    def from_dates(cls, dates: Iterable[date]) -> "ExclusionSet":
        return cls(dates)

    def contains(self, value: date) -> bool:
        return date_key(value) in self._keys

    def add(self, value: date) -> ExclusionResult:
        """Insert ``value``; report ``ALREADY_EXCLUDED`` instead of a silent no-op."""
        key = date_key(value)
        with self._lock:
            if key in self._keys:
                return ExclusionResult.ALREADY_EXCLUDED
            self._keys.add(key)
        return ExclusionResult.ADDED

    def discard(self, value: date) -> bool:
        key = date_key(value)
        with self._lock:
            if key not in self._keys:
                return False
            self._keys.remove(key)
        return True

    def sorted(self) -> list[date]:
        return [date(*key) for key in sorted(self._keys)]

    def copy(self) -> "ExclusionSet":
        return ExclusionSet(self.sorted())

    def __contains__(self, value: object) -> bool:
        return isinstance(value, date) and self.contains(value)

    def __iter__(self) -> Iterator[date]:
        return iter(self.sorted())

    def __len__(self) -> int:
        return len(self._keys)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ExclusionSet):
            return NotImplemented
        return self._keys == other._keys

    def __repr__(self) -> str:
        return f"ExclusionSet({[d.isoformat() for d in self.sorted()]!r})"
