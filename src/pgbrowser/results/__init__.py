"""Result materialization: cell decoding, header resolution, row records and ordering."""
from pgbrowser.results.models import Record, ResultSet, TabularValue
from pgbrowser.results.decoder import decode_cell
from pgbrowser.results.columns import ColumnNameResolver
from pgbrowser.results.materializer import materialize
from pgbrowser.results.sorting import (
    SortDescriptor,
    SortDirection,
    compare_records,
    compare_values,
    sort_records,
)

__all__ = [
    "Record",
    "ResultSet",
    "TabularValue",
    "decode_cell",
    "ColumnNameResolver",
    "materialize",
    "SortDescriptor",
    "SortDirection",
    "compare_records",
    "compare_values",
    "sort_records",
]
