from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from pgbrowser.common.settings import settings
from pgbrowser.session.models import ConnectionParams


class ConnectionProfile(BaseModel):
    """A saved connection. The password lives in a SecretStore, never here."""

    id: UUID = Field(default_factory=uuid4)
    name: str
    host: str
    port: int = 5432
    username: str
    database: str = "postgres"
    last_used: Optional[datetime] = None
    is_favorite: bool = False

    model_config = ConfigDict(extra="ignore")

    @classmethod
    def localhost(cls) -> "ConnectionProfile":
        """Creates a default localhost connection profile."""
        return cls(
            name="localhost",
            host="localhost",
            port=settings.default_port,
            username=settings.default_username,
            database=settings.default_database,
        )

    def to_params(self, password: str = "", database: Optional[str] = None) -> ConnectionParams:
        return ConnectionParams(
            host=self.host,
            port=self.port,
            username=self.username,
            password=password,
            database=database or self.database,
        )
