from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr


class SessionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class ConnectionParams(BaseModel):
    """Connection details passed by value into connect operations.

    Range checks on host and port happen in the session, so invalid values
    surface as domain errors rather than validation errors.
    """

    host: str
    port: int = 5432
    username: str = ""
    password: SecretStr = Field(default=SecretStr(""))
    database: str = "postgres"

    model_config = ConfigDict(frozen=True)

    def with_database(self, database: str) -> "ConnectionParams":
        """Returns a copy of these credentials targeting another database."""
        return self.model_copy(update={"database": database})


class DatabaseInfo(BaseModel):
    name: str
    size_in_bytes: Optional[int] = None

    @property
    def id(self) -> str:
        return self.name


class TableInfo(BaseModel):
    name: str
    schema_name: str = "public"

    @property
    def id(self) -> str:
        return f"{self.schema_name}.{self.name}"


class ColumnInfo(BaseModel):
    name: str
    data_type: str
    is_nullable: bool = True
    default_value: Optional[str] = None
    is_primary_key: bool = False
    is_unique: bool = False
    is_foreign_key: bool = False
