from __future__ import annotations

from typing import Any, List, Optional, Sequence

from pgbrowser.common.logger import get_logger
from pgbrowser.driver.interfaces import DriverConnection, ResultCursor

logger = get_logger(__name__)

METADATA_CTE_NAME = "_metadata_cte"

# Only these statement shapes are safe to re-run inside a CTE probe.
_CTE_PROBE_KEYWORDS = {"SELECT", "WITH", "VALUES", "TABLE"}

# These stay valid with a trailing LIMIT 0 and would run again.
_NO_LIMIT_PROBE_KEYWORDS = {"CREATE", "ALTER", "INSERT"}


def synthesize_column_names(width: int) -> List[str]:
    """Positional names ``col_0 .. col_{n-1}`` for rows without usable metadata."""
    return [f"col_{index}" for index in range(width)]


def normalize_statement(sql: str) -> str:
    """Trims whitespace and trailing semicolons so the statement can be embedded."""
    statement = sql.strip()
    while statement.endswith(";"):
        statement = statement[:-1].rstrip()
    return statement


def _leading_keyword(statement: str) -> str:
    head = statement.lstrip("(").split(None, 1)
    return head[0].upper() if head else ""


class ColumnNameResolver:
    """
    Determines the ordered header of a query result.

    Column names come from the cursor's own metadata whenever the driver
    reports it. When a statement yields neither rows nor metadata, bounded
    probe queries derived from the original statement are issued on the same
    connection; probe failures degrade to an empty header instead of raising.
    """

    def __init__(self, connection: DriverConnection):
        self.connection = connection

    def resolve(
        self,
        cursor: ResultCursor,
        sql: str,
        first_row: Optional[Sequence[Any]] = None,
    ) -> List[str]:
        """
        Resolves the header for ``cursor``.

        Args:
            cursor: The cursor returned for ``sql``.
            sql: The original statement text, used to build probe queries.
            first_row: The first row pulled from ``cursor``, or None if the
                result is empty.

        Returns:
            The ordered column names, possibly empty.
        """
        names = cursor.column_names()
        if names:
            return list(names)

        if first_row is not None:
            if names is not None:
                # Zero-column row description
                return []
            logger.warning(
                f"No column metadata for a non-empty result; using positional names for {len(first_row)} columns"
            )
            return synthesize_column_names(len(first_row))

        if names is not None:
            return []

        return self.probe(sql)

    def probe(self, sql: str) -> List[str]:
        """Recovers column names for an empty result via zero-row probe queries."""
        statement = normalize_statement(sql)
        if not statement:
            return []

        keyword = _leading_keyword(statement)
        if keyword in _CTE_PROBE_KEYWORDS:
            names = self._probe_once(
                f"WITH {METADATA_CTE_NAME} AS ({statement}) SELECT * FROM {METADATA_CTE_NAME} LIMIT 0"
            )
            if names:
                logger.debug(f"Column names from CTE probe: {', '.join(names)}")
                return names

        if keyword in _NO_LIMIT_PROBE_KEYWORDS:
            logger.debug(f"Skipping LIMIT 0 probe for {keyword} statement")
            return []

        names = self._probe_once(f"{statement} LIMIT 0")
        if names:
            logger.debug(f"Column names from LIMIT 0 probe: {', '.join(names)}")
            return names

        logger.warning("Could not extract column metadata from empty result")
        return []

    def _probe_once(self, probe_sql: str) -> List[str]:
        try:
            cursor = self.connection.execute(probe_sql)
        except Exception as e:
            logger.warning(f"Column metadata probe failed: {e}")
            return []
        try:
            return list(cursor.column_names() or [])
        except Exception as e:
            logger.warning(f"Column metadata probe returned no usable metadata: {e}")
            return []
        finally:
            try:
                cursor.close()
            except Exception as e:
                logger.warning(f"Ignoring error while closing probe cursor: {e}")
