"""Domain entities for the device registry.

These are pure data structures with no infrastructure dependencies.
A User owns an ordered registry of Devices; the registry invariant
(device ids unique per user) is enforced here and nowhere else.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from ...common.exceptions import ConflictError, NotFoundError, ValidationError

# Topics on the notification channel
NEW_DEVICE_TOPIC = "project/newDevice"
HUMIDITY_TOPIC = "project/newHumidity"

# Display heuristic used by the client view: a device "battery" lasts 28 days
BATTERY_LIFETIME_DAYS = 28


@dataclass
class Device:
    """A humidity sensor registered by exactly one user.

    `created_at` is set once when the device is added and never changes.
    """

    device_id: str
    humidity: str
    created_at: datetime

    def days_since_created(self, now: Optional[datetime] = None) -> int:
        """Whole days elapsed since the device was registered."""
        now = now or datetime.now(timezone.utc)
        elapsed = now - self.created_at
        return math.floor(elapsed.total_seconds() / 86400)

    def battery_percentage(self, now: Optional[datetime] = None) -> float:
        """Estimated remaining battery, linear over BATTERY_LIFETIME_DAYS.

        Not a measurement; the value only feeds the client view.
        """
        days = self.days_since_created(now)
        remaining = (BATTERY_LIFETIME_DAYS - days) / BATTERY_LIFETIME_DAYS * 100
        return round(max(0.0, remaining), 2)


@dataclass
class User:
    """A registered user and the devices they own.

    The password hash is opaque to the domain; only the credential
    hasher interprets it.
    """

    user_id: str
    username: str
    password_hash: str
    devices: list[Device] = field(default_factory=list)

    def find_device(self, device_id: str) -> Optional[Device]:
        """Return the device with this id, or None."""
        for device in self.devices:
            if device.device_id == device_id:
                return device
        return None

    def add_device(
        self,
        device_id: str,
        humidity: str,
        created_at: Optional[datetime] = None,
    ) -> Device:
        """Append a new device to the registry.

        Raises:
            ValidationError: device_id is empty
            ConflictError: device_id is already registered for this user
        """
        if not device_id:
            raise ValidationError("Device ID is required.", field="deviceId")
        if self.find_device(device_id) is not None:
            raise ConflictError("Device", device_id)

        device = Device(
            device_id=device_id,
            humidity=humidity,
            created_at=created_at or datetime.now(timezone.utc),
        )
        self.devices.append(device)
        return device

    def update_humidity(self, device_id: str, humidity: str) -> Device:
        """Overwrite the humidity of an existing device in place.

        Raises:
            NotFoundError: no device with this id in the registry
        """
        device = self.find_device(device_id)
        if device is None:
            raise NotFoundError("Device", device_id)
        device.humidity = humidity
        return device


@dataclass(frozen=True)
class Notification:
    """A plain-text message for external listeners."""

    topic: str
    payload: str

    @classmethod
    def new_device(cls, device_id: str) -> "Notification":
        return cls(topic=NEW_DEVICE_TOPIC, payload=f"id:{device_id}")

    @classmethod
    def humidity_changed(cls, device_id: str, humidity: str) -> "Notification":
        return cls(topic=HUMIDITY_TOPIC, payload=f"{device_id}:{humidity}")


@dataclass
class DeviceMutationResult:
    """Outcome of a committed registry mutation.

    `notified` reports whether the follow-up notification reached the
    broker; it never affects the HTTP status of the mutation.
    """

    device: Device
    notified: bool
