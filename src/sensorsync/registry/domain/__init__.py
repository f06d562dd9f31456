"""Domain layer - Pure domain entities and port interfaces.

This layer contains:
- Entities: User, Device and the Notification value object
- Ports: Abstract interfaces for the user store, the notification
  channel and the password hasher

No infrastructure dependencies allowed in this layer.
"""

from .entities import (
    BATTERY_LIFETIME_DAYS,
    HUMIDITY_TOPIC,
    NEW_DEVICE_TOPIC,
    Device,
    DeviceMutationResult,
    Notification,
    User,
)
from .ports import INotificationChannel, IPasswordHasher, IUserRepository

__all__ = [
    # Entities
    "Device",
    "DeviceMutationResult",
    "Notification",
    "User",
    # Constants
    "BATTERY_LIFETIME_DAYS",
    "HUMIDITY_TOPIC",
    "NEW_DEVICE_TOPIC",
    # Ports
    "INotificationChannel",
    "IPasswordHasher",
    "IUserRepository",
]
