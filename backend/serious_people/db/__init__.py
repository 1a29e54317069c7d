"""Database package: engine and session factory, plus the shared Redis client."""

from serious_people.db.base import Base, close_db, get_session_factory, init_db, make_engine, ping_db
from serious_people.db.redis import close_redis, get_redis, init_redis, ping_redis

__all__ = [
    "Base",
    "close_db",
    "close_redis",
    "get_redis",
    "get_session_factory",
    "init_db",
    "init_redis",
    "make_engine",
    "ping_db",
    "ping_redis",
]
