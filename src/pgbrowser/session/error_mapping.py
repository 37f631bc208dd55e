"""
Translation of driver connect failures into the session error taxonomy.

The exception chain is searched for SQLSTATE codes first, then OS error
numbers, then libpq's message text, since libpq reports most connection-time
failures as plain text without a SQLSTATE.
"""
import errno
import socket
from typing import Iterator, Optional

from pgbrowser.common.logger import get_logger
from pgbrowser.common.errors import (
    AuthenticationFailedError,
    ConnectionTimeoutError,
    DatabaseNotFoundError,
    InvalidHostError,
    InvalidPortError,
    NetworkUnreachableError,
    SessionError,
    UnknownConnectionError,
)

logger = get_logger(__name__)

AUTH_SQLSTATES = {"28P01", "28000"}  # invalid_password, invalid_authorization_specification
MISSING_DATABASE_SQLSTATE = "3D000"  # invalid_catalog_name

TIMEOUT_ERRNOS = {errno.ETIMEDOUT}
UNREACHABLE_ERRNOS = {
    errno.ENETUNREACH,
    errno.EHOSTUNREACH,
    errno.ECONNREFUSED,
    errno.EPERM,  # sandboxed processes see EPERM instead of a refused socket
}

_AUTH_MESSAGES = (
    "password authentication failed",
    "authentication failed",
    "no password supplied",
    "password is required",
)
_HOST_MESSAGES = (
    "could not translate host name",
    "name or service not known",
    "nodename nor servname provided",
    "temporary failure in name resolution",
)
_TIMEOUT_MESSAGES = ("timeout expired", "timed out")
_UNREACHABLE_MESSAGES = (
    "network is unreachable",
    "no route to host",
    "connection refused",
    "operation not permitted",
)


def iter_exception_chain(exc: BaseException) -> Iterator[BaseException]:
    """Yields ``exc`` and everything it wraps (DBAPI ``orig``, cause, context)."""
    seen = set()
    pending = [exc]
    while pending:
        current = pending.pop(0)
        if current is None or id(current) in seen:
            continue
        seen.add(id(current))
        yield current
        pending.extend([getattr(current, "orig", None), current.__cause__, current.__context__])


def _sqlstate(exc: BaseException) -> Optional[str]:
    return getattr(exc, "pgcode", None) or getattr(exc, "sqlstate", None)


def _from_sqlstate(exc: BaseException, database: str) -> Optional[SessionError]:
    code = _sqlstate(exc)
    if code in AUTH_SQLSTATES:
        return AuthenticationFailedError()
    if code == MISSING_DATABASE_SQLSTATE:
        return DatabaseNotFoundError(database)
    return None


def _from_os_error(exc: BaseException, host: str) -> Optional[SessionError]:
    if isinstance(exc, socket.gaierror):
        return InvalidHostError(host)
    if isinstance(exc, OSError):
        if exc.errno in TIMEOUT_ERRNOS or isinstance(exc, TimeoutError):
            return ConnectionTimeoutError()
        if exc.errno in UNREACHABLE_ERRNOS:
            return NetworkUnreachableError()
    return None


def _from_message(exc: BaseException, host: str, database: str) -> Optional[SessionError]:
    message = str(exc).lower()
    if not message:
        return None
    if f'database "{database.lower()}" does not exist' in message:
        return DatabaseNotFoundError(database)
    if any(text in message for text in _AUTH_MESSAGES):
        return AuthenticationFailedError()
    if "role" in message and "does not exist" in message:
        return AuthenticationFailedError()
    if any(text in message for text in _HOST_MESSAGES):
        return InvalidHostError(host)
    if "invalid port number" in message:
        return InvalidPortError()
    if any(text in message for text in _TIMEOUT_MESSAGES):
        return ConnectionTimeoutError()
    if any(text in message for text in _UNREACHABLE_MESSAGES):
        return NetworkUnreachableError()
    return None


def map_connect_error(exc: BaseException, host: str, database: str) -> SessionError:
    """Maps an exception raised while opening a connection to a SessionError.

    Args:
        exc: The driver or OS exception.
        host: Host that was being connected to.
        database: Database that was being connected to.

    Returns:
        SessionError: The matching domain error, or UnknownConnectionError
        wrapping ``exc``.
    """
    if isinstance(exc, SessionError):
        return exc

    chain = list(iter_exception_chain(exc))
    for strategy in (
        lambda e: _from_sqlstate(e, database),
        lambda e: _from_os_error(e, host),
        lambda e: _from_message(e, host, database),
    ):
        for current in chain:
            mapped = strategy(current)
            if mapped is not None:
                return mapped

    logger.debug(f"Unmapped connect error {type(exc).__name__}: {exc}")
    return UnknownConnectionError(exc)
