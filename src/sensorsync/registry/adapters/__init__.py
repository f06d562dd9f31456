"""Adapters layer - Infrastructure implementations for the device registry.

This layer contains concrete implementations of the ports defined in the domain layer:
- PostgresUserRepository: PostgreSQL (JSONB document) implementation of IUserRepository
- MqttNotificationChannel: paho-mqtt implementation of INotificationChannel
- BcryptPasswordHasher: bcrypt implementation of IPasswordHasher
"""

from .bcrypt_hasher import BcryptPasswordHasher
from .mqtt_notifier import MqttNotificationChannel
from .postgres_user_repo import PostgresUserRepository

__all__ = [
    "BcryptPasswordHasher",
    "MqttNotificationChannel",
    "PostgresUserRepository",
]
