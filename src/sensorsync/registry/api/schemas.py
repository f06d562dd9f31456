"""Pydantic schemas for API request/response validation.

JSON keys are camelCase (userId, deviceId, createdAt) to match what the
web client sends and expects; Python attributes stay snake_case.
"""

from datetime import datetime
from typing import Annotated, Any, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model exchanging camelCase JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def _humidity_to_str(value: Any) -> Any:
    # Readings are stored as strings; accept JSON numbers too (40.0 -> "40")
    if isinstance(value, bool):
        return value
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    return value


HumidityStr = Annotated[str, BeforeValidator(_humidity_to_str)]


# ========== Credentials ==========


class CredentialsRequest(CamelModel):
    """Body of /signup and /login."""

    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

    model_config = ConfigDict(
        json_schema_extra={"example": {"username": "alice", "password": "pw1"}},
    )


class AuthResponse(CamelModel):
    """Returned by /signup and /login."""

    user_id: str
    message: str


# ========== Devices ==========


class DeviceDTO(CamelModel):
    """A device in a user's registry."""

    device_id: str
    humidity: str
    created_at: datetime

    # Client view fields, only filled when requested
    days_since_created: Optional[int] = None
    battery_percentage: Optional[float] = None


class AddDeviceRequest(CamelModel):
    """Body of POST /users/{userId}/devices."""

    device_id: str = Field(..., min_length=1)
    humidity: HumidityStr


class UpdateHumidityRequest(CamelModel):
    """Body of PUT /users/{userId}/devices/{deviceId}."""

    humidity: HumidityStr


class PublishHumidityRequest(CamelModel):
    """Body of POST /publish-humidity."""

    device_id: str = Field(..., min_length=1)
    humidity: HumidityStr


# ========== Users ==========


class UserDTO(CamelModel):
    """A user with their devices. The password hash is never exposed."""

    user_id: str
    username: str
    devices: list[DeviceDTO] = Field(default_factory=list)


# ========== Generic ==========


class MessageResponse(CamelModel):
    """Plain confirmation message."""

    message: str


class ErrorResponse(BaseModel):
    """Error body returned with 4xx/5xx statuses."""

    detail: str
