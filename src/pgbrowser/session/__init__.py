"""Connection session management."""
from pgbrowser.session.models import (
    ColumnInfo,
    ConnectionParams,
    DatabaseInfo,
    SessionState,
    TableInfo,
)
from pgbrowser.session.session import Session

__all__ = [
    "Session",
    "SessionState",
    "ConnectionParams",
    "DatabaseInfo",
    "TableInfo",
    "ColumnInfo",
]
