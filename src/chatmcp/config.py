"""Server configuration — storage backend, HTTP binding, CORS, telemetry.

Settings are assembled from (lowest to highest precedence) model defaults,
an optional YAML file, and environment variables.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

DEFAULT_ALLOWED_ORIGINS = ["https://chat.openai.com", "https://chatgpt.com"]

# Environment variable -> settings field.
_ENV_FIELDS: dict[str, str] = {
    "SUPABASE_URL": "supabase_url",
    "SUPABASE_ANON_KEY": "supabase_anon_key",
    "CHATMCP_STORAGE": "storage",
    "CHATMCP_MEMORY_TABLE": "memory_table",
    "CHATMCP_ALLOWED_ORIGINS": "allowed_origins",
    "CHATMCP_HOST": "host",
    "CHATMCP_PORT": "port",
    "LOG_LEVEL": "log_level",
    "OTEL_EXPORTER_OTLP_ENDPOINT": "otlp_endpoint",
}


class ConfigError(Exception):
    """Raised when a configuration file or environment fails parsing or validation."""


class ServerSettings(BaseModel):
    """Process-wide settings for the MCP server."""

    storage: Literal["postgrest", "memory"] = "postgrest"
    supabase_url: str | None = None
    supabase_anon_key: str | None = None
    memory_table: str = "memories"
    storage_timeout: float = Field(default=10.0, gt=0)

    host: str = "127.0.0.1"
    port: int = Field(default=8000, ge=0, le=65535)
    allowed_origins: list[str] = Field(default_factory=lambda: list(DEFAULT_ALLOWED_ORIGINS))

    log_level: str = "INFO"
    otlp_endpoint: str | None = None

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()


def load_settings(
    path: str | Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> ServerSettings:
    """Build :class:`ServerSettings` from an optional YAML file and the environment.

    Environment variables in the form ``${VAR}`` or ``$VAR`` inside the YAML
    file are expanded before parsing.

    Raises:
        ConfigError: On unreadable files, YAML parse errors, or invalid values.
    """
    env = os.environ if environ is None else environ
    data: dict[str, Any] = {}

    if path is not None:
        data.update(_read_yaml(Path(path)))

    for var, field in _ENV_FIELDS.items():
        value = env.get(var)
        if value:
            data[field] = value

    try:
        return ServerSettings.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read {path}: {exc}") from exc

    try:
        data: Any = yaml.safe_load(os.path.expandvars(raw))
    except yaml.YAMLError as exc:
        raise ConfigError(f"YAML parse error: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("Config YAML must be a mapping")
    return data
