"""FastAPI router for credential, user and device endpoints.

Domain errors raised by the use cases are translated to HTTP statuses by
the exception handlers registered in app.py.
"""

import logging
from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse

from ...common.exceptions import NotificationError
from ..domain.entities import Device, User
from ..domain.ports import INotificationChannel, IPasswordHasher, IUserRepository
from ..use_cases import (
    AddDeviceUseCase,
    GetUserUseCase,
    ListDevicesUseCase,
    ListUsersUseCase,
    LoginUseCase,
    PublishHumidityUseCase,
    SignupUseCase,
    UpdateHumidityUseCase,
)
from .dependencies import (
    get_notification_channel,
    get_password_hasher,
    get_user_repo,
)
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

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Device Registry"])


def _device_dto(device: Device, include_status: bool = False) -> DeviceDTO:
    dto = DeviceDTO(
        device_id=device.device_id,
        humidity=device.humidity,
        created_at=device.created_at,
    )
    if include_status:
        now = datetime.now(timezone.utc)
        dto.days_since_created = device.days_since_created(now)
        dto.battery_percentage = device.battery_percentage(now)
    return dto


def _user_dto(user: User) -> UserDTO:
    return UserDTO(
        user_id=user.user_id,
        username=user.username,
        devices=[_device_dto(d) for d in user.devices],
    )


# ========== Credentials ==========


@router.post(
    "/signup",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}},
)
async def signup(
    body: CredentialsRequest,
    user_repo: IUserRepository = Depends(get_user_repo),
    hasher: IPasswordHasher = Depends(get_password_hasher),
):
    """Create a user with an empty device registry."""
    use_case = SignupUseCase(user_repo=user_repo, hasher=hasher)
    user_id = await use_case.execute(body.username, body.password)
    return AuthResponse(user_id=user_id, message="User created successfully.")


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def login(
    body: CredentialsRequest,
    user_repo: IUserRepository = Depends(get_user_repo),
    hasher: IPasswordHasher = Depends(get_password_hasher),
):
    """Check credentials and return the user id."""
    use_case = LoginUseCase(user_repo=user_repo, hasher=hasher)
    user_id = await use_case.execute(body.username, body.password)
    return AuthResponse(user_id=user_id, message="Login successful.")


# ========== Users ==========


@router.get(
    "/users",
    response_model=list[UserDTO],
    response_model_exclude_none=True,
)
async def list_users(user_repo: IUserRepository = Depends(get_user_repo)):
    """List every user with their devices."""
    users = await ListUsersUseCase(user_repo=user_repo).execute()
    return [_user_dto(u) for u in users]


@router.get(
    "/users/{user_id}",
    response_model=UserDTO,
    response_model_exclude_none=True,
    responses={404: {"model": ErrorResponse}},
)
async def get_user(
    user_id: str,
    user_repo: IUserRepository = Depends(get_user_repo),
):
    """Get one user with their devices."""
    user = await GetUserUseCase(user_repo=user_repo).execute(user_id)
    return _user_dto(user)


# ========== Devices ==========


@router.get(
    "/users/{user_id}/devices",
    response_model=list[DeviceDTO],
    response_model_exclude_none=True,
    responses={404: {"model": ErrorResponse}},
)
async def list_devices(
    user_id: str,
    include_status: Annotated[
        bool,
        Query(
            alias="includeStatus",
            description="Add daysSinceCreated and batteryPercentage to each device",
        ),
    ] = False,
    user_repo: IUserRepository = Depends(get_user_repo),
):
    """List a user's devices in registry order."""
    devices = await ListDevicesUseCase(user_repo=user_repo).execute(user_id)
    return [_device_dto(d, include_status) for d in devices]


@router.post(
    "/users/{user_id}/devices",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def add_device(
    user_id: str,
    body: AddDeviceRequest,
    user_repo: IUserRepository = Depends(get_user_repo),
    channel: INotificationChannel = Depends(get_notification_channel),
):
    """Register a device and announce it on the newDevice topic.

    The response does not depend on whether the announcement got through.
    """
    use_case = AddDeviceUseCase(user_repo=user_repo, channel=channel)
    await use_case.execute(user_id, body.device_id, body.humidity)
    return MessageResponse(message="Device created successfully.")


@router.put(
    "/users/{user_id}/devices/{device_id}",
    response_model=MessageResponse,
    responses={404: {"model": ErrorResponse}},
)
async def update_device_humidity(
    user_id: str,
    device_id: str,
    body: UpdateHumidityRequest,
    user_repo: IUserRepository = Depends(get_user_repo),
    channel: INotificationChannel = Depends(get_notification_channel),
):
    """Set a device's humidity and announce it on the newHumidity topic."""
    use_case = UpdateHumidityUseCase(user_repo=user_repo, channel=channel)
    await use_case.execute(user_id, device_id, body.humidity)
    return MessageResponse(message="Device humidity updated successfully.")


# ========== Publishing ==========


@router.post(
    "/publish-humidity",
    response_model=MessageResponse,
    responses={500: {"description": "Publish failed"}},
)
async def publish_humidity(
    body: PublishHumidityRequest,
    channel: INotificationChannel = Depends(get_notification_channel),
):
    """Publish a humidity reading without changing any stored device."""
    use_case = PublishHumidityUseCase(channel=channel)
    try:
        await use_case.execute(body.device_id, body.humidity)
    except NotificationError as e:
        logger.error(f"Publish humidity failed for device {body.device_id}: {e}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Failed to publish humidity"},
        )
    return MessageResponse(message="Humidity published successfully")
