from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from pgbrowser.results.sorting import SortDescriptor

# One decoded cell: None is SQL NULL, otherwise the best-effort display string.
TabularValue = Optional[str]


class Record(BaseModel):
    """One decoded row, keyed by column name.

    The generated ``id`` only tracks UI selection; it does not take part in
    equality.
    """

    id: UUID = Field(default_factory=uuid4)
    values: Dict[str, TabularValue] = Field(default_factory=dict)

    def get(self, column: str) -> TabularValue:
        return self.values.get(column)

    def __getitem__(self, column: str) -> TabularValue:
        return self.values[column]

    def __contains__(self, column: str) -> bool:
        return column in self.values

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Record):
            return NotImplemented
        return self.values == other.values


class ResultSet(BaseModel):
    """Ordered records of one query together with the ordered header."""

    header: List[str] = Field(default_factory=list)
    records: List[Record] = Field(default_factory=list)
    rows_affected: Optional[int] = None
    execution_time_ms: Optional[float] = None

    @property
    def row_count(self) -> int:
        return len(self.records)

    @property
    def is_empty(self) -> bool:
        return not self.records

    @property
    def has_header(self) -> bool:
        """False when column names could not be resolved for an empty result."""
        return bool(self.header)

    def to_rows(self) -> List[List[TabularValue]]:
        """Positional values in header order, for rendering."""
        return [[record.get(name) for name in self.header] for record in self.records]

    def sorted_by(self, descriptors: Sequence["SortDescriptor"]) -> "ResultSet":
        """Returns a copy whose records are ordered by the given sort keys.

        Later descriptors only break ties left by earlier ones.
        """
        from pgbrowser.results.sorting import sort_records

        return self.model_copy(update={"records": sort_records(self.records, descriptors)})
