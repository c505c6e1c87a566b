"""Settings for Teskilat: .env, environment and config.toml, in that order."""

from pathlib import Path
from typing import Any

import tomllib
from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

CONFIG_TOML = Path("config.toml")

# (section, key) in config.toml -> Settings field
_TOML_FIELDS: dict[tuple[str, str], str] = {
    ("app", "env"): "env",
    ("app", "port"): "app_port",
    ("database", "url"): "database_url",
    ("features", "simulation"): "features_simulation",
    ("features", "wipe"): "features_wipe",
    ("storage", "endpoint"): "minio_endpoint",
    ("storage", "port"): "minio_port",
    ("storage", "use_ssl"): "minio_use_ssl",
    ("storage", "bucket"): "minio_bucket",
    ("logging", "level"): "logging_level",
    ("logging", "file_path"): "logging_file_path",
    ("logging", "max_bytes"): "logging_max_bytes",
    ("logging", "backup_count"): "logging_backup_count",
    ("ops", "metrics_endpoint_enabled"): "metrics_endpoint_enabled",
}


def _handler_level(value: Any, overall: str) -> str:
    # Strings name a level (or NONE); booleans switch the handler on/off
    if isinstance(value, str):
        return value.upper()
    if isinstance(value, bool):
        return overall if value else "NONE"
    return overall


def _toml_settings_source() -> dict[str, Any]:
    """Read config.toml into Settings field names; absent keys are left out.

    Lowest-priority source apart from file secrets, so env and .env win.
    """
    if not CONFIG_TOML.exists():
        return {}
    with CONFIG_TOML.open("rb") as f:
        t = tomllib.load(f)

    out: dict[str, Any] = {}
    for (section, key), field in _TOML_FIELDS.items():
        value = (t.get(section) or {}).get(key)
        if value is not None:
            out[field] = value

    log_cfg = t.get("logging") or {}
    overall = str(log_cfg.get("level", "INFO")).upper()
    out["logging_console"] = _handler_level(log_cfg.get("console"), overall)
    out["logging_file"] = _handler_level(log_cfg.get("to_file"), overall)
    return out


class Settings(BaseSettings):
    env: str = Field(default="dev")
    database_url: str = Field(default="sqlite+aiosqlite:///./teskilat.sqlite3")
    app_port: int = 18000

    # --- Attachment storage (MinIO) ---
    minio_endpoint: str = "localhost"
    minio_port: int = 9000
    minio_use_ssl: bool = False
    minio_root_user: str = ""
    minio_root_password: SecretStr = SecretStr("")
    minio_bucket: str = "teskilat-files"

    # --- Feature gates ---
    features_simulation: bool = True
    features_wipe: bool = True

    # --- Logging ---
    logging_level: str = "INFO"
    logging_console: str = "INFO"
    logging_file: str = "INFO"
    logging_file_path: str = "logs/teskilat.jsonl"
    logging_max_bytes: int = 5_000_000
    logging_backup_count: int = 5

    # --- Ops ---
    metrics_endpoint_enabled: bool = False

    model_config = SettingsConfigDict(
        env_prefix="",
        case_sensitive=False,
        env_file=".env",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # init > .env > OS env > config.toml > secrets dir
        return (
            init_settings,
            dotenv_settings,
            env_settings,
            _toml_settings_source,
            file_secret_settings,
        )


def load_settings() -> Settings:
    return Settings()
