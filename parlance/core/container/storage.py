from __future__ import annotations

import pydantic as p
import redis.asyncio as aioredis
from dependency_injector.containers import DeclarativeContainer
from dependency_injector.providers import Configuration, Object, Provider, Resource, Singleton

from parlance.storage.session import InMemorySessionStore, RedisSessionStore, SessionStore

from ..config.storage import RedisSettings, StorageSettings
from ..provider import LoggingProvider, TimestampProvider


def provide_redis_client(config: RedisSettings, password: p.Secret[str] | None) -> aioredis.Redis:  # type: ignore[type-arg]
    """Create an async Redis client.

    Uses Unix socket if configured, otherwise TCP connection.
    """
    secret = password.get_secret_value() if password else None
    if config.socket_path:
        return aioredis.Redis(
            unix_socket_path=str(config.socket_path),
            db=config.database,
            password=secret,
            decode_responses=False,
        )

    return aioredis.Redis(
        host=config.host,
        port=config.port,
        db=config.database,
        password=secret,
        decode_responses=False,
    )


def provide_session_store(
    config: StorageSettings,
    password: p.Secret[str] | None,
    clock: TimestampProvider,
    logging: LoggingProvider,
) -> SessionStore:
    """Select the session store implementation named by `storage.backend`."""
    logger = logging.get_logger()
    match config.backend:
        case "memory":
            store: SessionStore = InMemorySessionStore(clock=clock)
        case "redis":
            redis = config.redis or RedisSettings()
            client = provide_redis_client(redis, password)
            store = RedisSessionStore(client, prefix=redis.prefix, clock=clock)
            logger.info(
                "initialized Redis session store",
                extra={
                    "host": redis.host,
                    "port": redis.port,
                    "socket_path": redis.socket_path,
                    "database": redis.database,
                    "prefix": redis.prefix,
                },
            )
    return store


class StorageContainer(DeclarativeContainer):
    config = Configuration()
    secrets = Configuration()
    logging: Provider[LoggingProvider] = Resource()
    clock: Provider[TimestampProvider] = Object()

    settings: Provider[StorageSettings] = Singleton(StorageSettings, config)
    session: Provider[SessionStore] = Singleton(
        provide_session_store,
        config=settings,
        password=secrets.redis.password,
        clock=clock,
        logging=logging,
    )
