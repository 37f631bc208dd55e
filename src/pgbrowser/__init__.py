# pgbrowser package

from .session import Session, SessionState, ConnectionParams, DatabaseInfo, TableInfo, ColumnInfo
from .results import Record, ResultSet, SortDescriptor, SortDirection

from .common.errors import (
    ErrorCode,
    SessionError,
    InvalidHostError,
    InvalidPortError,
    AuthenticationFailedError,
    DatabaseNotFoundError,
    ConnectionTimeoutError,
    NetworkUnreachableError,
    NotConnectedError,
    UnknownConnectionError,
)

__all__ = [
    "Session",
    "SessionState",
    "ConnectionParams",
    "DatabaseInfo",
    "TableInfo",
    "ColumnInfo",
    "Record",
    "ResultSet",
    "SortDescriptor",
    "SortDirection",
    "ErrorCode",
    "SessionError",
    "InvalidHostError",
    "InvalidPortError",
    "AuthenticationFailedError",
    "DatabaseNotFoundError",
    "ConnectionTimeoutError",
    "NetworkUnreachableError",
    "NotConnectedError",
    "UnknownConnectionError",
]
