"""MQTT adapter for the notification channel.

Implements INotificationChannel with paho-mqtt. One client is created per
process at startup; its network loop runs in paho's background thread and
reconnects on its own. Each notify() makes one publish attempt, waits at
most `publish_timeout` seconds for the hand-off to the broker, and reports
the outcome without raising.
"""

import asyncio
import logging
from typing import Optional

import paho.mqtt.client as mqtt

from ..domain.ports import INotificationChannel

logger = logging.getLogger(__name__)


class MqttNotificationChannel(INotificationChannel):
    """paho-mqtt implementation of INotificationChannel.

    Usage:
        channel = MqttNotificationChannel("test.mosquitto.org", 1883)
        channel.start()
        ok = await channel.notify("project/newDevice", "id:sensor-1")
        channel.stop()
    """

    def __init__(
        self,
        host: str,
        port: int = 1883,
        client_id: str = "",
        publish_timeout: float = 5.0,
        keepalive: int = 60,
        client: Optional[mqtt.Client] = None,
    ):
        """Initialize the channel.

        Args:
            host: Broker host name
            port: Broker TCP port
            client_id: MQTT client id (empty lets the broker assign one)
            publish_timeout: Upper bound in seconds for one publish attempt
            keepalive: MQTT keepalive interval in seconds
            client: Preconfigured paho client (mainly for tests)
        """
        self.host = host
        self.port = port
        self.publish_timeout = publish_timeout
        self.keepalive = keepalive

        self._client = client or mqtt.Client(
            mqtt.CallbackAPIVersion.VERSION2,
            client_id=client_id,
        )
        self._client.on_connect = self._on_connect
        self._client.on_disconnect = self._on_disconnect

    def start(self) -> None:
        """Begin connecting and start the background network loop.

        The connection is established asynchronously; failures are logged
        and retried by paho, never raised to the caller.
        """
        try:
            self._client.connect_async(self.host, self.port, keepalive=self.keepalive)
        except (OSError, ValueError) as e:
            logger.warning(f"MQTT connect to {self.host}:{self.port} failed: {e}")
        self._client.loop_start()
        logger.info(f"MQTT network loop started for {self.host}:{self.port}")

    def stop(self) -> None:
        """Disconnect and stop the background network loop."""
        self._client.disconnect()
        self._client.loop_stop()
        logger.info("MQTT client stopped")

    def is_connected(self) -> bool:
        return self._client.is_connected()

    async def notify(self, topic: str, payload: str) -> bool:
        """Publish off the event loop, since waiting for the broker blocks."""
        return await asyncio.to_thread(self._publish, topic, payload)

    def _publish(self, topic: str, payload: str) -> bool:
        try:
            info = self._client.publish(topic, payload)
            if info.rc != mqtt.MQTT_ERR_SUCCESS:
                logger.warning(
                    f"Failed to publish on {topic}: {mqtt.error_string(info.rc)}"
                )
                return False
            info.wait_for_publish(timeout=self.publish_timeout)
        except (RuntimeError, ValueError) as e:
            logger.warning(f"Failed to publish on {topic}: {e}")
            return False

        if not info.is_published():
            logger.warning(
                f"Publish on {topic} not confirmed within {self.publish_timeout}s"
            )
            return False

        logger.info(f"Published {payload!r} on {topic}")
        return True

    def _on_connect(self, client, userdata, flags, reason_code, properties) -> None:
        if reason_code.is_failure:
            logger.warning(f"MQTT broker refused connection: {reason_code}")
        else:
            logger.info(f"Connected to MQTT broker {self.host}:{self.port}")

    def _on_disconnect(self, client, userdata, flags, reason_code, properties) -> None:
        logger.warning(f"Disconnected from MQTT broker: {reason_code}")
