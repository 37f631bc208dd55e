from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterator, List, Mapping, Optional, Protocol, Sequence, runtime_checkable

if TYPE_CHECKING:
    from pgbrowser.session.models import ConnectionParams


@runtime_checkable
class ResultCursor(Protocol):
    """Single-pass sequence of positional rows produced by one statement."""

    @property
    def rowcount(self) -> int:
        """Rows affected as reported by the driver (-1 when unknown)."""
        ...

    def column_names(self) -> Optional[List[str]]:
        """
        Ordered column names from the result description.

        Returns:
            Optional[List[str]]: The names, or None when the statement
            produced no row description at all.
        """
        ...

    def __iter__(self) -> Iterator[Sequence[Any]]:
        ...

    def close(self) -> None:
        ...


@runtime_checkable
class DriverConnection(Protocol):
    """One live database connection together with its transport resources."""

    def execute(self, sql: str, parameters: Optional[Mapping[str, Any]] = None) -> ResultCursor:
        """
        Execute a statement.

        Parameterized statements use ``:name`` placeholders and escape literal
        colons as ``\\:``. Without parameters the text is sent verbatim.
        """
        ...

    def close(self) -> None:
        """Close the connection and release every transport resource it owns."""
        ...


@runtime_checkable
class Driver(Protocol):
    """Factory for driver connections."""

    def open(self, params: "ConnectionParams") -> DriverConnection:
        """
        Open a connection. Any resource created before a failure must be
        released before the error propagates.
        """
        ...
