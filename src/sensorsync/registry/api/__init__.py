"""API layer for the device registry.

Contains:
- FastAPI router with endpoints
- Pydantic schemas for request/response validation
"""

from .router import router
from .schemas import (
    AddDeviceRequest,
    AuthResponse,
    CredentialsRequest,
    DeviceDTO,
    ErrorResponse,
    MessageResponse,
    PublishHumidityRequest,
    UpdateHumidityRequest,
    UserDTO,
)

__all__ = [
    "router",
    "AddDeviceRequest",
    "AuthResponse",
    "CredentialsRequest",
    "DeviceDTO",
    "ErrorResponse",
    "MessageResponse",
    "PublishHumidityRequest",
    "UpdateHumidityRequest",
    "UserDTO",
]
