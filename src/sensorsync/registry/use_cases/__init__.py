"""Use cases layer - Business logic orchestration for the device registry.

This layer contains use case classes that:
- Load and mutate user documents (via IUserRepository)
- Hash and verify passwords (via IPasswordHasher)
- Announce committed changes (via INotificationChannel)

Use cases depend only on ports, not concrete implementations.
"""

from .credentials import LoginUseCase, SignupUseCase
from .devices import AddDeviceUseCase, ListDevicesUseCase, UpdateHumidityUseCase
from .publish_humidity import PublishHumidityUseCase
from .users import GetUserUseCase, ListUsersUseCase

__all__ = [
    "AddDeviceUseCase",
    "GetUserUseCase",
    "ListDevicesUseCase",
    "ListUsersUseCase",
    "LoginUseCase",
    "PublishHumidityUseCase",
    "SignupUseCase",
    "UpdateHumidityUseCase",
]
