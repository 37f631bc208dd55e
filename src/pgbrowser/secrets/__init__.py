import logging
from uuid import UUID

from .interfaces import SecretStore
from .memory import InMemorySecretStore
from .env import EnvironmentSecretStore

logger = logging.getLogger(__name__)


def resolve_password(store: SecretStore, connection_id: UUID) -> str:
    """Returns the stored password, treating a missing entry as an empty password."""
    password = store.get_password(connection_id)
    if password is None:
        logger.debug(f"No stored password for connection {connection_id}; using empty password")
        return ""
    return password


__all__ = ["SecretStore", "InMemorySecretStore", "EnvironmentSecretStore", "resolve_password"]
