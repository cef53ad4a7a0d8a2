"""Agent configuration — loaded from app.toml, overridden by environment / .env."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any

from pydantic import field_validator
from pydantic_settings import (
    BaseSettings,
    NoDecode,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

DEFAULT_CONFIG_PATH = "app.toml"
DEFAULT_MANAGER_TIMEOUT = 5


def parse_manager_urls(value: str) -> list[str]:
    """Split a comma-separated URL list, dropping blanks."""
    return [u.strip() for u in value.split(",") if u.strip()]


class AgentSettings(BaseSettings):
    """Central configuration.

    Priority: init kwargs > environment > .env > TOML file > defaults.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        toml_file=DEFAULT_CONFIG_PATH,
    )

    # Service
    service_name: str = "liveness-agent"
    service_env: str = "local"  # "prod" switches logging to INFO

    # HTTP server
    app_host: str = "0.0.0.0"
    app_port: int = 8080

    # Database (SQLite file)
    db_path: str = "data/agent.db"

    # Manager services
    manager_urls: Annotated[list[str], NoDecode] = []
    manager_timeout: int = DEFAULT_MANAGER_TIMEOUT  # seconds per probe request

    # TLS for the agent's own listener
    tls_enabled: bool = False
    tls_cert_file: str = ""
    tls_key_file: str = ""
    tls_ca_file: str = ""

    # Logging (empty = derive from service_env)
    log_level: str = ""

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            TomlConfigSettingsSource(settings_cls),
        )

    @field_validator("manager_urls", mode="before")
    @classmethod
    def _split_urls(cls, value: Any) -> Any:
        if isinstance(value, str):
            return parse_manager_urls(value)
        if isinstance(value, (list, tuple)):
            return [str(u).strip() for u in value if str(u).strip()]
        return value

    @field_validator("manager_timeout", mode="after")
    @classmethod
    def _default_timeout(cls, value: int) -> int:
        return value if value > 0 else DEFAULT_MANAGER_TIMEOUT

    @property
    def effective_log_level(self) -> str:
        if self.log_level:
            return self.log_level.upper()
        return "INFO" if self.service_env == "prod" else "DEBUG"

    @property
    def database_path(self) -> Path:
        path = Path(self.db_path)
        return path if path.is_absolute() else Path.cwd() / path


def load_settings(config_path: str | Path = DEFAULT_CONFIG_PATH, **overrides: Any) -> AgentSettings:
    """Build settings reading the given TOML file. A missing file is not an error."""

    class _FileSettings(AgentSettings):
        model_config = SettingsConfigDict(toml_file=str(config_path))

    return _FileSettings(**overrides)
