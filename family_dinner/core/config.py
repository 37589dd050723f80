"""
Settings for the local store and logging.

Values come from `FAMILY_DINNER_*` environment variables or a `.env` file in the
working directory. `Settings.database` and `Settings.logging` give the grouped
views the rest of the package consumes.
"""

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

MEMORY_DATABASE = ":memory:"


class DatabaseConfig(BaseModel):
    """Local SQLite database configuration."""

    path: str = Field(
        default="dinner_db.sqlite3",
        alias="FAMILY_DINNER_DATABASE_PATH",
        description="Path of the SQLite database file",
    )
    echo: bool = Field(
        default=False,
        alias="FAMILY_DINNER_DATABASE_ECHO",
        description="Echo SQL statements emitted by the engine",
    )

    model_config = {"populate_by_name": True}

    @property
    def url(self) -> str:
        """Async SQLAlchemy URL for the configured database path."""
        if self.path == MEMORY_DATABASE:
            return "sqlite+aiosqlite:///:memory:"
        return f"sqlite+aiosqlite:///{self.path}"


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", alias="FAMILY_DINNER_LOG_LEVEL", description="Console log level")
    format: str = Field(
        default="detailed", alias="FAMILY_DINNER_LOG_FORMAT", description="Log format (simple, detailed or json)"
    )
    file_dir: str = Field(default="logs", alias="FAMILY_DINNER_LOG_FILE_DIR", description="Directory for log files")
    enable_file: bool = Field(
        default=False, alias="FAMILY_DINNER_ENABLE_FILE_LOGGING", description="Write DEBUG logs to a file as well"
    )

    model_config = {"populate_by_name": True}


class Settings(BaseSettings):
    """Flat, env-bound settings. Field names double as constructor keywords."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
        populate_by_name=True,
    )

    # Database
    database_path: str = Field(
        default="dinner_db.sqlite3",
        description="Path of the SQLite database file (':memory:' for a throwaway database)",
        alias="FAMILY_DINNER_DATABASE_PATH",
    )
    database_echo: bool = Field(
        default=False,
        description="Echo SQL statements emitted by the engine",
        alias="FAMILY_DINNER_DATABASE_ECHO",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        alias="FAMILY_DINNER_LOG_LEVEL",
    )
    log_format: str = Field(
        default="detailed",
        description="Log format (simple, detailed, json)",
        alias="FAMILY_DINNER_LOG_FORMAT",
    )
    log_file_dir: str = Field(
        default="logs",
        description="Directory for the log file when file logging is enabled",
        alias="FAMILY_DINNER_LOG_FILE_DIR",
    )
    enable_file_logging: bool = Field(
        default=False,
        description="Enable the DEBUG file handler",
        alias="FAMILY_DINNER_ENABLE_FILE_LOGGING",
    )

    @property
    def database(self) -> DatabaseConfig:
        """Database settings as a DatabaseConfig."""
        return DatabaseConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def logging(self) -> LoggingConfig:
        """Logging settings as a LoggingConfig, in the shape setup_logging takes."""
        return LoggingConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def database_url(self) -> str:
        return self.database.url


settings = Settings()
