from typing import Optional, Protocol, runtime_checkable
from uuid import UUID


@runtime_checkable
class SecretStore(Protocol):
    """Protocol for storing connection passwords keyed by connection id."""

    def save_password(self, connection_id: UUID, password: str) -> None:
        """Store ``password`` for ``connection_id``, replacing any existing entry."""
        ...

    def get_password(self, connection_id: UUID) -> Optional[str]:
        """
        Retrieve the password for a connection.

        Args:
            connection_id (UUID): The saved connection's identifier.

        Returns:
            Optional[str]: The password, or None if no entry exists.
        """
        ...

    def delete_password(self, connection_id: UUID) -> None:
        """Remove the entry for ``connection_id``. A missing entry is not an error."""
        ...
