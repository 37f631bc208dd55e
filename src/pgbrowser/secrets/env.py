import os
from typing import Optional
from uuid import UUID

from pgbrowser.common.errors import SecretStoreError
from pgbrowser.common.settings import settings


class EnvironmentSecretStore:
    """Reads and writes passwords as environment variables named ``<prefix><CONNECTION-ID-HEX>``."""

    def __init__(self, prefix: Optional[str] = None):
        self.prefix = prefix if prefix is not None else settings.secret_env_prefix

    def key_for(self, connection_id: UUID) -> str:
        return f"{self.prefix}{connection_id.hex.upper()}"

    def save_password(self, connection_id: UUID, password: str) -> None:
        if "\0" in password:
            raise SecretStoreError("Password contains a NUL character and cannot be stored in the environment")
        os.environ[self.key_for(connection_id)] = password

    def get_password(self, connection_id: UUID) -> Optional[str]:
        return os.environ.get(self.key_for(connection_id))

    def delete_password(self, connection_id: UUID) -> None:
        os.environ.pop(self.key_for(connection_id), None)
