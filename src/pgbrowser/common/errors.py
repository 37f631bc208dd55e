from enum import Enum
from typing import Optional


class ErrorCode(str, Enum):
    """Standardized error codes for session and connection failures."""
    INVALID_HOST = "INVALID_HOST"
    INVALID_PORT = "INVALID_PORT"
    AUTHENTICATION_FAILED = "AUTHENTICATION_FAILED"
    DATABASE_NOT_FOUND = "DATABASE_NOT_FOUND"
    TIMEOUT = "TIMEOUT"
    NETWORK_UNREACHABLE = "NETWORK_UNREACHABLE"
    NOT_CONNECTED = "NOT_CONNECTED"
    UNKNOWN = "UNKNOWN"


RECOVERY_SUGGESTIONS = {
    ErrorCode.INVALID_HOST: "Please enter a valid hostname or IP address.",
    ErrorCode.INVALID_PORT: "Port must be between 1 and 65535.",
    ErrorCode.AUTHENTICATION_FAILED: (
        "Verify your username and password are correct. "
        "For localhost, try passwordless authentication first."
    ),
    ErrorCode.DATABASE_NOT_FOUND: "Make sure the database exists and you have permission to access it.",
    ErrorCode.TIMEOUT: "Check that PostgreSQL is running and the host/port are correct.",
    ErrorCode.NETWORK_UNREACHABLE: "Verify your network connection and firewall settings.",
    ErrorCode.NOT_CONNECTED: "Please connect to a database first.",
    ErrorCode.UNKNOWN: "Please try again or check the server logs for more details.",
}


class SessionError(Exception):
    """Base class for domain errors raised by a database session.

    Attributes:
        code (ErrorCode): The standardized error code.
        description (str): A human-readable description of the failure.
    """

    code: ErrorCode = ErrorCode.UNKNOWN
    default_description: str = "An unknown error occurred."

    def __init__(self, description: Optional[str] = None):
        self.description = description or self.default_description
        super().__init__(self.description)

    @property
    def recovery_suggestion(self) -> str:
        """Returns the recovery hint paired with this error's code."""
        return RECOVERY_SUGGESTIONS[self.code]


class InvalidHostError(SessionError):
    code = ErrorCode.INVALID_HOST

    def __init__(self, host: str):
        self.host = host
        super().__init__(f"Invalid host: {host}")


class InvalidPortError(SessionError):
    code = ErrorCode.INVALID_PORT
    default_description = "Invalid port number"


class AuthenticationFailedError(SessionError):
    code = ErrorCode.AUTHENTICATION_FAILED
    default_description = "Authentication failed. Please check your username and password."


class DatabaseNotFoundError(SessionError):
    code = ErrorCode.DATABASE_NOT_FOUND

    def __init__(self, database: str):
        self.database = database
        super().__init__(f"Database '{database}' not found.")


class ConnectionTimeoutError(SessionError):
    code = ErrorCode.TIMEOUT
    default_description = "Connection timeout. Please check your network connection."


class NetworkUnreachableError(SessionError):
    code = ErrorCode.NETWORK_UNREACHABLE
    default_description = "Network unreachable. Please check your connection settings."


class NotConnectedError(SessionError):
    code = ErrorCode.NOT_CONNECTED
    default_description = "Not connected to database."


class UnknownConnectionError(SessionError):
    code = ErrorCode.UNKNOWN

    def __init__(self, cause: BaseException):
        self.cause = cause
        super().__init__(f"An error occurred: {cause}")


class SecretStoreError(Exception):
    """Raised when a secret backend fails for a reason other than a missing entry."""
