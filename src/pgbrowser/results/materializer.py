from typing import Any, Iterable, List, Sequence

from pgbrowser.results.decoder import decode_cell
from pgbrowser.results.models import Record, ResultSet


def materialize_row(row: Sequence[Any], header: Sequence[str]) -> Record:
    """Decodes one positional row into a Record.

    Extraction stops at ``min(len(header), len(row))``: surplus cells are
    dropped and missing cells are simply absent from the record.
    """
    values = {}
    for index, name in enumerate(header):
        if index >= len(row):
            break
        values[name] = decode_cell(row[index])
    return Record(values=values)


def materialize(rows: Iterable[Sequence[Any]], header: Sequence[str]) -> ResultSet:
    """Pulls every row from ``rows`` and buffers the decoded result in memory."""
    records: List[Record] = [materialize_row(row, header) for row in rows]
    return ResultSet(header=list(header), records=records)
