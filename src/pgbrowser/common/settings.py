from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

# Load environment variables from .env into os.environ
load_dotenv()


class Settings(BaseSettings):
    """Application configuration settings backed by environment variables."""

    profiles_path: str = Field(
        default="~/.pgbrowser/connections.yaml",
        validation_alias="PGBROWSER_PROFILES",
        description="Path to the YAML file holding saved connection profiles."
    )
    admin_database: str = Field(
        default="postgres",
        validation_alias="PGBROWSER_ADMIN_DATABASE",
        description="Database reconnected to when dropping the currently connected database."
    )
    sqlalchemy_driver: str = Field(
        default="postgresql+psycopg2",
        validation_alias="PGBROWSER_DRIVER",
        description="SQLAlchemy dialect+driver name used to open connections."
    )

    default_host: str = Field(default="localhost", validation_alias="PGBROWSER_DEFAULT_HOST")
    default_port: int = Field(default=5432, validation_alias="PGBROWSER_DEFAULT_PORT")
    default_username: str = Field(default="postgres", validation_alias="PGBROWSER_DEFAULT_USER")
    default_database: str = Field(default="postgres", validation_alias="PGBROWSER_DEFAULT_DATABASE")

    rows_per_page: int = Field(
        default=100,
        validation_alias="PGBROWSER_ROWS_PER_PAGE",
        description="Default page size when browsing table rows."
    )
    min_rows_per_page: int = Field(default=10, validation_alias="PGBROWSER_MIN_ROWS_PER_PAGE")
    max_rows_per_page: int = Field(default=1000, validation_alias="PGBROWSER_MAX_ROWS_PER_PAGE")

    secret_env_prefix: str = Field(
        default="PGBROWSER_PASSWORD_",
        validation_alias="PGBROWSER_SECRET_PREFIX",
        description="Environment variable prefix for passwords keyed by connection id."
    )

    log_level: str = Field(default="WARNING", validation_alias="PGBROWSER_LOG_LEVEL")
    log_json: bool = Field(
        default=False,
        validation_alias="PGBROWSER_LOG_JSON",
        description="Emit structured JSON log lines instead of plain text."
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    def clamp_page_size(self, page_size: int) -> int:
        """Clamps a requested page size into the configured pagination bounds."""
        return max(self.min_rows_per_page, min(self.max_rows_per_page, page_size))


settings = Settings()

# Configure logging during import
from pgbrowser.common.logger import configure_logging
configure_logging(
    level=settings.log_level,
    json_format=settings.log_json
)
