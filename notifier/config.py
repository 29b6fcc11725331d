from __future__ import annotations

from dataclasses import dataclass
import os
import re
from typing import Any

from sqlalchemy.engine import URL
import yaml


DEFAULT_DATABASE_NAME = "codeclarity"
DEFAULT_QUEUE_NAME = "service_notifier"
LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

# a whole-value ${VAR} placeholder left behind by os.path.expandvars
_UNEXPANDED = re.compile(r"\$\{\w+\}")


@dataclass
class DatabaseConfig:
    host: str
    port: int
    user: str
    password: str
    name: str
    connect_timeout_seconds: int
    pool_size: int
    override_url: str | None = None

    def url(self) -> URL | str:
        if self.override_url:
            return self.override_url
        return URL.create(
            "postgresql+psycopg2",
            username=self.user,
            password=self.password,
            host=self.host,
            port=self.port,
            database=self.name,
        )


@dataclass
class QueueConfig:
    name: str


@dataclass
class Settings:
    log_level: str


@dataclass
class Config:
    database: DatabaseConfig
    queue: QueueConfig
    settings: Settings


def _expand_env(value: Any) -> Any:
    if isinstance(value, str):
        return os.path.expandvars(value)
    if isinstance(value, list):
        return [_expand_env(item) for item in value]
    if isinstance(value, dict):
        return {key: _expand_env(val) for key, val in value.items()}
    return value


def _require_dict(value: Any, name: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{name} must be a mapping")
    return value


def load_config(path: str) -> Config:
    if not os.path.exists(path):
        return config_from_env()

    with open(path, "r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}

    data = _expand_env(raw)
    if not isinstance(data, dict):
        raise ValueError("Config root must be a mapping")

    return Config(
        database=_load_database(_require_dict(data.get("database"), "database")),
        queue=_load_queue(_require_dict(data.get("queue"), "queue")),
        settings=_load_settings(_require_dict(data.get("settings"), "settings")),
    )


def config_from_env(environ: dict[str, str] | None = None) -> Config:
    """Build the config from the PG_DB_* variables when no config file is present."""
    env = os.environ if environ is None else environ
    values: dict[str, str] = {}
    for field_name, variable in (
        ("host", "PG_DB_HOST"),
        ("port", "PG_DB_PORT"),
        ("user", "PG_DB_USER"),
        ("password", "PG_DB_PASSWORD"),
    ):
        value = env.get(variable, "")
        if not value:
            raise ValueError(f"{variable} is not set")
        values[field_name] = value

    raw = dict(values)
    raw["name"] = env.get("PG_DB_NAME") or DEFAULT_DATABASE_NAME
    return Config(
        database=_load_database(raw),
        queue=QueueConfig(name=DEFAULT_QUEUE_NAME),
        settings=Settings(log_level="INFO"),
    )


def _load_database(raw: dict[str, Any]) -> DatabaseConfig:
    override_url = _optional_str(raw.get("url"))
    host = _optional_str(raw.get("host"))
    if not override_url and not host:
        raise ValueError("database.host or database.url is required")

    connect_timeout = _int(raw.get("connect_timeout_seconds", 50), "database.connect_timeout_seconds")
    if connect_timeout < 1:
        raise ValueError("database.connect_timeout_seconds must be >= 1")
    pool_size = _int(raw.get("pool_size", 5), "database.pool_size")
    if pool_size < 1:
        raise ValueError("database.pool_size must be >= 1")

    return DatabaseConfig(
        host=host or "",
        port=_int(raw.get("port", 5432), "database.port"),
        user=_optional_str(raw.get("user")) or "",
        password=_optional_str(raw.get("password")) or "",
        name=str(raw.get("name") or DEFAULT_DATABASE_NAME),
        connect_timeout_seconds=connect_timeout,
        pool_size=pool_size,
        override_url=override_url,
    )


def _load_queue(raw: dict[str, Any]) -> QueueConfig:
    return QueueConfig(name=str(raw.get("name") or DEFAULT_QUEUE_NAME))


def _load_settings(raw: dict[str, Any]) -> Settings:
    level = str(raw.get("log_level", "INFO")).upper()
    if level not in LOG_LEVELS:
        raise ValueError(f"settings.log_level must be one of {', '.join(sorted(LOG_LEVELS))}")
    return Settings(log_level=level)


def _optional_str(value: Any) -> str | None:
    if not value or not isinstance(value, str):
        return None
    if _UNEXPANDED.fullmatch(value):
        return None
    return value


def _int(value: Any, name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be an integer")
