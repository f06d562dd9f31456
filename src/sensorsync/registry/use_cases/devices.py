"""Device registry use cases - commit first, then notify.

Workflow for every mutation:
1. Open a read-modify-write unit of work on the owning user (IUserRepository)
2. Apply the change through the User entity, which enforces the registry
   invariant (device ids unique per user)
3. Leave the unit of work, which persists the whole user document
4. Publish the notification (INotificationChannel), best effort

A failed publish is only logged: the mutation is already durable and the
caller sees the same outcome either way.
"""

import logging

from ...common.exceptions import NotFoundError
from ..domain.entities import Device, DeviceMutationResult, Notification
from ..domain.ports import INotificationChannel, IUserRepository

logger = logging.getLogger(__name__)


async def _send(channel: INotificationChannel, notification: Notification) -> bool:
    try:
        notified = await channel.notify(notification.topic, notification.payload)
    except Exception as e:
        logger.error(f"Notification channel failed on {notification.topic}: {e}")
        notified = False

    if not notified:
        logger.warning(
            f"Notification on {notification.topic} was not delivered; "
            f"registry change is kept"
        )
    return notified


class ListDevicesUseCase:
    """Return a user's devices in registry order."""

    def __init__(self, user_repo: IUserRepository):
        self.repo = user_repo

    async def execute(self, user_id: str) -> list[Device]:
        user = await self.repo.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User")
        return list(user.devices)


class AddDeviceUseCase:
    """Register a new device for a user and announce it.

    Example:
        use_case = AddDeviceUseCase(user_repo=repo, channel=mqtt_channel)
        result = await use_case.execute(user_id, "sensor-1", "40")
    """

    def __init__(self, user_repo: IUserRepository, channel: INotificationChannel):
        self.repo = user_repo
        self.channel = channel

    async def execute(self, user_id: str, device_id: str, humidity: str) -> DeviceMutationResult:
        """Add a device.

        Raises:
            ValidationError: device_id is empty
            NotFoundError: unknown user
            ConflictError: device_id already registered for this user
        """
        async with self.repo.modify(user_id) as user:
            if user is None:
                raise NotFoundError("User")
            device = user.add_device(device_id, humidity)

        logger.info(f"User {user_id} added device {device_id}")

        notified = await _send(self.channel, Notification.new_device(device_id))
        return DeviceMutationResult(device=device, notified=notified)


class UpdateHumidityUseCase:
    """Overwrite the humidity of an existing device and announce it."""

    def __init__(self, user_repo: IUserRepository, channel: INotificationChannel):
        self.repo = user_repo
        self.channel = channel

    async def execute(self, user_id: str, device_id: str, humidity: str) -> DeviceMutationResult:
        """Update a device's humidity.

        Raises:
            NotFoundError: unknown user or unknown device for this user
        """
        async with self.repo.modify(user_id) as user:
            if user is None:
                raise NotFoundError("User")
            device = user.update_humidity(device_id, humidity)

        logger.info(f"User {user_id} set humidity of {device_id}")

        notified = await _send(
            self.channel, Notification.humidity_changed(device_id, humidity)
        )
        return DeviceMutationResult(device=device, notified=notified)
