"""Tests for MqttNotificationChannel with a mocked paho client."""

from unittest.mock import MagicMock

import paho.mqtt.client as mqtt
import pytest

from src.sensorsync.registry.adapters.mqtt_notifier import MqttNotificationChannel


def make_info(rc=mqtt.MQTT_ERR_SUCCESS, published=True, wait_error=None):
    info = MagicMock()
    info.rc = rc
    info.is_published.return_value = published
    if wait_error:
        info.wait_for_publish.side_effect = wait_error
    return info


@pytest.fixture
def paho_client():
    return MagicMock()


@pytest.fixture
def channel(paho_client):
    return MqttNotificationChannel(
        "broker.test", 1883, publish_timeout=0.5, client=paho_client
    )


class TestNotify:
    """Tests for one bounded publish attempt."""

    @pytest.mark.asyncio
    async def test_published(self, channel, paho_client):
        info = make_info()
        paho_client.publish.return_value = info

        assert await channel.notify("project/newDevice", "id:sensor-1") is True

        paho_client.publish.assert_called_once_with("project/newDevice", "id:sensor-1")
        info.wait_for_publish.assert_called_once_with(timeout=0.5)

    @pytest.mark.asyncio
    async def test_not_connected(self, channel, paho_client):
        paho_client.publish.return_value = make_info(rc=mqtt.MQTT_ERR_NO_CONN)

        assert await channel.notify("project/newHumidity", "sensor-1:40") is False

    @pytest.mark.asyncio
    async def test_timeout(self, channel, paho_client):
        paho_client.publish.return_value = make_info(published=False)

        assert await channel.notify("project/newHumidity", "sensor-1:40") is False

    @pytest.mark.asyncio
    async def test_wait_error_is_absorbed(self, channel, paho_client):
        paho_client.publish.return_value = make_info(
            wait_error=RuntimeError("Message publish failed")
        )

        assert await channel.notify("project/newHumidity", "sensor-1:40") is False


class TestLifecycle:
    """Tests for start/stop and connection callbacks."""

    def test_start_connects_in_background(self, channel, paho_client):
        channel.start()

        paho_client.connect_async.assert_called_once_with(
            "broker.test", 1883, keepalive=60
        )
        paho_client.loop_start.assert_called_once()

    def test_start_survives_bad_host(self, channel, paho_client):
        paho_client.connect_async.side_effect = OSError("name resolution failed")

        channel.start()

        paho_client.loop_start.assert_called_once()

    def test_stop(self, channel, paho_client):
        channel.stop()

        paho_client.disconnect.assert_called_once()
        paho_client.loop_stop.assert_called_once()

    def test_callbacks_installed(self, channel, paho_client):
        assert paho_client.on_connect == channel._on_connect
        assert paho_client.on_disconnect == channel._on_disconnect

    def test_is_connected_delegates(self, channel, paho_client):
        paho_client.is_connected.return_value = False
        assert channel.is_connected() is False
