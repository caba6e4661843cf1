"""Application configuration loading and validation."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

DEFAULT_STORE_PATH = "~/.prompt2sql/credentials.json"


class ConfigError(ValueError):
    """Raised when configuration cannot be loaded safely."""


class Settings(BaseModel):
    """Runtime settings loaded from environment variables."""

    model_config = ConfigDict(frozen=True)

    store_path: Path = Path(DEFAULT_STORE_PATH).expanduser()
    database_url: str = ""
    user_id: str = Field(default="local", min_length=1)
    log_level: str = "WARNING"
    log_file: Path | None = None

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, value: str) -> str:
        normalized = value.strip()
        if normalized and not normalized.startswith(("postgresql://", "postgres://")):
            raise ValueError(
                "DATABASE_URL must start with 'postgresql://' or 'postgres://'."
            )
        return normalized

    @field_validator("user_id", "log_level")
    @classmethod
    def validate_non_empty(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("value cannot be empty.")
        return normalized

    @field_validator("store_path", mode="before")
    @classmethod
    def validate_store_path(cls, value: str | Path) -> Path:
        path = Path(value).expanduser() if isinstance(value, str) else value
        if not str(path):
            raise ValueError("PROMPT2SQL_STORE_PATH cannot be empty.")
        return path

    @field_validator("log_file", mode="before")
    @classmethod
    def validate_log_file(cls, value: str | Path | None) -> Path | None:
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        return Path(value).expanduser() if isinstance(value, str) else value

    @property
    def record_store_enabled(self) -> bool:
        return bool(self.database_url)

    def validate_record_store_requirements(self) -> None:
        """Fail with a friendly message when the record store is required."""
        if not self.record_store_enabled:
            raise ConfigError(
                "DATABASE_URL is required for saving and listing queries and schemas."
            )


def _env_value(name: str, default: str | None = None) -> str | None:
    import os

    value = os.getenv(name, default)
    if value is None:
        return None
    return value.strip()


def load_settings() -> Settings:
    """Load settings from environment variables."""
    payload = {
        "store_path": _env_value("PROMPT2SQL_STORE_PATH", DEFAULT_STORE_PATH),
        "database_url": _env_value("DATABASE_URL", ""),
        "user_id": _env_value("PROMPT2SQL_USER_ID", "local"),
        "log_level": _env_value("PROMPT2SQL_LOG_LEVEL", "WARNING"),
        "log_file": _env_value("PROMPT2SQL_LOG_FILE"),
    }

    try:
        return Settings.model_validate(payload)
    except ValidationError as exc:
        messages = []
        for err in exc.errors():
            field = ".".join(str(item) for item in err["loc"])
            messages.append(f"- {field}: {err['msg']}")
        raise ConfigError(
            "Invalid configuration values:\n" + "\n".join(messages)
        ) from exc
