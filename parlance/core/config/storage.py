from __future__ import annotations

import typing as t
from pathlib import Path

from .base import BaseSettings


class RedisSettings(BaseSettings):
    """Redis connection settings.

    Supports either Unix socket or TCP connection.
    If socket_path is set, it takes precedence over host/port.
    """

    socket_path: Path | None = None
    host: str = "localhost"
    port: int = 6379
    database: int = 0
    prefix: str = "parlance"


class StorageSettings(BaseSettings):
    backend: t.Literal["memory", "redis"] = "memory"
    redis: RedisSettings | None = None
