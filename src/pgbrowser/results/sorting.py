"""
Type-aware ordering of result records.

Values of the sorted column are compared numerically when both parse as
numbers, chronologically when both look like timestamps, and with a
case-insensitive, digit-aware locale comparison otherwise. NULL is the
greatest value; the sort direction flips the whole result afterwards, so a
descending sort puts NULLs first.

Text collation uses the process LC_COLLATE locale. The command line adopts the
environment locale at startup; library callers select it themselves with
``locale.setlocale``, otherwise the C locale (code point order) applies.
"""
import datetime
import functools
import locale
import math
import re
from enum import Enum
from typing import Callable, Iterable, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict

from pgbrowser.results.models import Record, TabularValue

_NUMERIC_RE = re.compile(
    r"[+-]?(?:inf(?:inity)?|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)",
    re.IGNORECASE,
)

_TIMESTAMP_PATTERNS = (
    # ISO8601
    re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}"),
    # PostgreSQL timestamp
    re.compile(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}"),
    # Date only
    re.compile(r"^\d{4}-\d{2}-\d{2}$"),
)

# PostgreSQL renders whole-hour offsets as "+05"
_SHORT_OFFSET_RE = re.compile(r"([+-]\d{2})$")

_DIGIT_RUN_RE = re.compile(r"(\d+)")


class SortDirection(str, Enum):
    ASCENDING = "asc"
    DESCENDING = "desc"


def _sign(value) -> int:
    return (value > 0) - (value < 0)


def _cmp(a, b) -> int:
    return (a > b) - (a < b)


def parse_number(value: str) -> Optional[float]:
    if not _NUMERIC_RE.fullmatch(value):
        return None
    number = float(value)
    return None if math.isnan(number) else number


def looks_like_timestamp(value: str) -> bool:
    return any(pattern.search(value) for pattern in _TIMESTAMP_PATTERNS)


def parse_timestamp(value: str) -> Optional[datetime.datetime]:
    """Parses ISO8601 or PostgreSQL textual timestamps; naive values are taken as UTC."""
    candidates = [value]
    if _SHORT_OFFSET_RE.search(value) and len(value) > 10:
        candidates.append(value + ":00")
    for candidate in candidates:
        try:
            parsed = datetime.datetime.fromisoformat(candidate)
        except ValueError:
            continue
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=datetime.timezone.utc)
        return parsed
    return None


def _collation_key(value: str) -> list:
    parts = _DIGIT_RUN_RE.split(value.casefold())
    # split() alternates text/digits starting with text, so positions line up
    return [int(part) if index % 2 else locale.strxfrm(part.replace("\x00", "")) for index, part in enumerate(parts)]


def standard_compare(a: str, b: str) -> int:
    """Locale-aware, case-insensitive comparison that orders digit runs by value.

    Strings that collate equal fall back to a code point comparison so the
    result stays deterministic.
    """
    result = _cmp(_collation_key(a), _collation_key(b))
    return result if result else _cmp(a, b)


def compare_values(a: TabularValue, b: TabularValue) -> int:
    """Ascending comparison of two cells; returns -1, 0 or 1."""
    if a is None and b is None:
        return 0
    if a is None:
        return 1
    if b is None:
        return -1

    number_a, number_b = parse_number(a), parse_number(b)
    if number_a is not None and number_b is not None:
        return _cmp(number_a, number_b)

    if looks_like_timestamp(a) and looks_like_timestamp(b):
        time_a, time_b = parse_timestamp(a), parse_timestamp(b)
        if time_a is not None and time_b is not None:
            return _cmp(time_a, time_b)

    return standard_compare(a, b)


def compare_records(
    a: Record,
    b: Record,
    column: str,
    direction: SortDirection = SortDirection.ASCENDING,
) -> int:
    """Compares two records on one column; DESCENDING reverses the result, NULL placement included."""
    result = compare_values(a.get(column), b.get(column))
    return -result if direction == SortDirection.DESCENDING else result


class SortDescriptor(BaseModel):
    """One sort key: a column and a direction."""

    column: str
    direction: SortDirection = SortDirection.ASCENDING

    model_config = ConfigDict(frozen=True)

    @classmethod
    def parse(cls, text: str) -> "SortDescriptor":
        """Builds a descriptor from ``column`` or ``column:asc|desc``."""
        column, sep, direction = text.rpartition(":")
        if not sep or direction.lower() not in {d.value for d in SortDirection}:
            return cls(column=text)
        return cls(column=column, direction=SortDirection(direction.lower()))

    def compare(self, a: Record, b: Record) -> int:
        return compare_records(a, b, self.column, self.direction)


def chain_comparators(descriptors: Sequence[SortDescriptor]) -> Callable[[Record, Record], int]:
    """Combines descriptors so later keys only break ties of earlier ones."""
    def compare(a: Record, b: Record) -> int:
        for descriptor in descriptors:
            result = descriptor.compare(a, b)
            if result:
                return _sign(result)
        return 0

    return compare


def sort_records(records: Iterable[Record], descriptors: Sequence[SortDescriptor]) -> List[Record]:
    """Stable sort of ``records`` by ``descriptors``; no descriptors keeps the input order."""
    records = list(records)
    if not descriptors:
        return records
    return sorted(records, key=functools.cmp_to_key(chain_comparators(descriptors)))
