"""Publish a humidity reading without touching the registry.

Here the publish is the whole operation, so a failed attempt is reported
to the caller instead of being absorbed.
"""

import logging

from ...common.exceptions import NotificationError, ValidationError
from ..domain.entities import Notification
from ..domain.ports import INotificationChannel

logger = logging.getLogger(__name__)


class PublishHumidityUseCase:
    """Forward a humidity value for a device onto the humidity topic."""

    def __init__(self, channel: INotificationChannel):
        self.channel = channel

    async def execute(self, device_id: str, humidity: str) -> Notification:
        """Publish `deviceId:humidity`.

        Raises:
            ValidationError: device_id is empty
            NotificationError: the broker did not accept the message
        """
        if not device_id:
            raise ValidationError("Device ID is required.", field="deviceId")

        notification = Notification.humidity_changed(device_id, humidity)
        if not await self.channel.notify(notification.topic, notification.payload):
            raise NotificationError(
                "Failed to publish humidity",
                topic=notification.topic,
            )

        logger.info(f"Humidity for device {device_id} published")
        return notification
