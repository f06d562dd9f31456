"""FastAPI dependency injection for the registry API.

This module owns the process-wide resources and hands out adapter
instances to the endpoints.

Lifecycle Management:
- Database pool: Initialized at startup, shared across requests
- MQTT channel: Initialized at startup, shared across requests
- Both are closed at application shutdown

Tests swap any of the get_* functions through app.dependency_overrides.
"""

import logging
from typing import Optional

import asyncpg

from ...common.database import close_pool, create_pool, ensure_schema
from ...config import SensorSyncConfig
from ..adapters import (
    BcryptPasswordHasher,
    MqttNotificationChannel,
    PostgresUserRepository,
)
from ..domain.ports import INotificationChannel, IPasswordHasher, IUserRepository

logger = logging.getLogger(__name__)

# ========== Global State ==========

_config: Optional[SensorSyncConfig] = None
_db_pool: Optional[asyncpg.Pool] = None
_channel: Optional[MqttNotificationChannel] = None


def get_config() -> SensorSyncConfig:
    """Get the process configuration (loaded from the environment once)."""
    global _config
    if _config is None:
        _config = SensorSyncConfig.from_env()
    return _config


async def init_db_pool(config: SensorSyncConfig) -> None:
    """Create the database pool and make sure the schema exists.

    Should be called on application startup.
    """
    global _db_pool

    _db_pool = await create_pool(config.require_database_url())
    await ensure_schema(_db_pool)


def init_notification_channel(config: SensorSyncConfig) -> None:
    """Create the MQTT channel and start its network loop.

    Should be called on application startup.
    """
    global _channel

    _channel = MqttNotificationChannel(
        host=config.mqtt_host,
        port=config.mqtt_port,
        client_id=config.mqtt_client_id,
        publish_timeout=config.mqtt_publish_timeout,
    )
    _channel.start()


async def close_db_pool() -> None:
    """Close the database connection pool.

    Should be called on application shutdown.
    """
    global _db_pool
    if _db_pool:
        await close_pool(_db_pool)
        _db_pool = None


def close_notification_channel() -> None:
    """Stop the MQTT channel.

    Should be called on application shutdown.
    """
    global _channel
    if _channel:
        _channel.stop()
        _channel = None


def get_db_pool() -> asyncpg.Pool:
    """Get the database connection pool."""
    if _db_pool is None:
        raise RuntimeError("Database pool not initialized. Call init_db_pool() first.")
    return _db_pool


def get_db_pool_or_none() -> Optional[asyncpg.Pool]:
    """Get the pool without failing (used by health checks)."""
    return _db_pool


def get_notification_channel_or_none() -> Optional[INotificationChannel]:
    """Get the channel without failing (used by health checks)."""
    return _channel


# ========== Dependency Functions ==========


def get_user_repo() -> IUserRepository:
    """Get a user repository instance."""
    return PostgresUserRepository(get_db_pool())


def get_notification_channel() -> INotificationChannel:
    """Get the shared notification channel."""
    if _channel is None:
        raise RuntimeError(
            "Notification channel not initialized. Call init_notification_channel() first."
        )
    return _channel


def get_password_hasher() -> IPasswordHasher:
    """Get a password hasher using the configured cost factor."""
    return BcryptPasswordHasher(rounds=get_config().bcrypt_rounds)
