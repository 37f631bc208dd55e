from typing import Dict, Optional
from uuid import UUID


class InMemorySecretStore:
    """Keeps passwords for the lifetime of the process."""

    def __init__(self):
        self._passwords: Dict[UUID, str] = {}

    def save_password(self, connection_id: UUID, password: str) -> None:
        self._passwords[connection_id] = password

    def get_password(self, connection_id: UUID) -> Optional[str]:
        return self._passwords.get(connection_id)

    def delete_password(self, connection_id: UUID) -> None:
        self._passwords.pop(connection_id, None)
