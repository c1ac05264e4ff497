__all__ = [
    "InMemorySessionStore",
    "RedisSessionStore",
    "SessionStore",
    "StoreStats",
]

from .memory import InMemorySessionStore
from .redis import RedisSessionStore
from .store import SessionStore, StoreStats
