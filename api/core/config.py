"""
Process configuration read from the environment.

Database connectivity can be given either as a single `DATABASE_URL` or as
discrete `DB_HOST` / `DB_NAME` / `DB_USER` / `DB_PASSWORD` variables.
Values missing from the process environment are read from a `.env` file.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from dotenv import dotenv_values

from .errors import ConfigError

REQUIRED_DB_VARS = ("DB_HOST", "DB_NAME", "DB_USER", "DB_PASSWORD")
DEFAULT_ENV_FILE = ".env"


@dataclass(frozen=True)
class Settings:
    db_host: str = ""
    db_name: str = ""
    db_user: str = ""
    db_password: str = ""
    db_port: int = 5432
    db_ssl: bool = False
    database_url: str | None = None
    connect_timeout: int = 30
    command_timeout: int = 30
    pool_min_size: int = 1
    pool_max_size: int = 5
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"
    cors_origins: tuple[str, ...] = ("http://localhost:3000",)

    def connect_kwargs(self) -> dict:
        """
        Keyword arguments for `asyncpg.create_pool` (connection part only).
        """
        if self.database_url:
            kwargs: dict = {"dsn": self.database_url}
        else:
            kwargs = {
                "host": self.db_host,
                "port": self.db_port,
                "database": self.db_name,
                "user": self.db_user,
                "password": self.db_password,
            }
        if self.db_ssl:
            kwargs["ssl"] = "require"
        return kwargs

    def describe_target(self) -> str:
        if self.database_url:
            parts = urlsplit(self.database_url)
            return f"{parts.hostname or '?'}/{parts.path.lstrip('/') or '?'}"
        return f"{self.db_host}:{self.db_port}/{self.db_name}"


def _sanitize_database_url(url: str) -> str:
    # asyncpg rejects libpq's sslmode query parameter.
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def _env_str(env: Mapping[str, str], name: str, default: str = "") -> str:
    return (env.get(name) or "").strip() or default


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_bool(env: Mapping[str, str], name: str, default: bool = False) -> bool:
    raw = (env.get(name) or "").strip().lower()
    if not raw:
        return default
    return raw in {"1", "true", "yes", "on"}


def _environment(
    environ: Mapping[str, str] | None,
    env_file: str | Path | None,
) -> Mapping[str, str]:
    if environ is not None:
        return environ
    # Real environment variables win over the .env file.
    file_values: dict[str, str] = {}
    if env_file is not None and Path(env_file).is_file():
        file_values = {k: v for k, v in dotenv_values(env_file).items() if v is not None}
    return {**file_values, **os.environ}


def cors_origins(
    environ: Mapping[str, str] | None = None,
    env_file: str | Path | None = DEFAULT_ENV_FILE,
) -> tuple[str, ...]:
    env = _environment(environ, env_file)
    raw = _env_str(env, "CORS_ORIGINS", "http://localhost:3000")
    return tuple(origin.strip() for origin in raw.split(",") if origin.strip())


def load_settings(
    environ: Mapping[str, str] | None = None,
    env_file: str | Path | None = DEFAULT_ENV_FILE,
) -> Settings:
    """
    Build `Settings` from the environment, falling back to `env_file`
    (default `.env` in the working directory) for unset variables.

    Raises `ConfigError` when no database configuration is available.
    """
    env = _environment(environ, env_file)

    database_url = _env_str(env, "DATABASE_URL") or None
    if database_url is None:
        missing = [name for name in REQUIRED_DB_VARS if not _env_str(env, name)]
        if missing:
            raise ConfigError(f"Missing database configuration: {', '.join(missing)}.")
    else:
        database_url = _sanitize_database_url(database_url)

    return Settings(
        db_host=_env_str(env, "DB_HOST"),
        db_name=_env_str(env, "DB_NAME"),
        db_user=_env_str(env, "DB_USER"),
        db_password=env.get("DB_PASSWORD") or "",
        db_port=_env_int(env, "DB_PORT", 5432),
        db_ssl=_env_bool(env, "DB_SSL"),
        database_url=database_url,
        connect_timeout=_env_int(env, "DB_CONNECT_TIMEOUT", 30),
        command_timeout=_env_int(env, "DB_COMMAND_TIMEOUT", 30),
        pool_min_size=_env_int(env, "DB_POOL_MIN_SIZE", 1),
        pool_max_size=_env_int(env, "DB_POOL_MAX_SIZE", 5),
        host=_env_str(env, "HOST", "0.0.0.0"),
        port=_env_int(env, "PORT", 3000),
        log_level=_env_str(env, "LOG_LEVEL", "INFO").upper(),
        cors_origins=cors_origins(env),
    )
