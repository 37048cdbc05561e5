"""Row predicates produced by the row filter compiler.

A predicate is an opaque, storage-agnostic description of which rows a caller
may see. Storage adapters translate it into their own query language and must
AND it with any caller-supplied filter; in-memory stores can call matches().
"""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class MatchAll:
    """No row restriction."""

    def matches(self, row: dict[str, Any]) -> bool:
        return True


@dataclass(frozen=True)
class MatchNone:
    """Matches zero rows (fail-closed result)."""

    def matches(self, row: dict[str, Any]) -> bool:
        return False


@dataclass(frozen=True)
class ColumnEquals:
    """Rows whose `column` equals `value`.

    Ids arrive from tokens and URLs as strings while rows may hold integers,
    so comparison falls back to string form. None never matches.
    """

    column: str
    value: Any

    def matches(self, row: dict[str, Any]) -> bool:
        actual = row.get(self.column)
        if actual is None or self.value is None:
            return False
        return actual == self.value or str(actual) == str(self.value)


Predicate = MatchAll | MatchNone | ColumnEquals
