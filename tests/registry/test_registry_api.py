"""HTTP-level tests for the device registry API.

The app's dependencies are overridden with in-memory fakes so the requests
run through routing, validation and exception handlers without PostgreSQL
or an MQTT broker. The lifespan is not started.
"""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
import pytest_asyncio

from src.sensorsync.common.exceptions import DatabaseError
from src.sensorsync.registry.api.dependencies import (
    get_notification_channel,
    get_password_hasher,
    get_user_repo,
)
from src.sensorsync.registry.app import app


@pytest_asyncio.fixture
async def client(user_repo, channel, hasher):
    app.dependency_overrides[get_user_repo] = lambda: user_repo
    app.dependency_overrides[get_notification_channel] = lambda: channel
    app.dependency_overrides[get_password_hasher] = lambda: hasher

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()


async def create_user(client, username="alice", password="pw1") -> str:
    response = await client.post(
        "/signup", json={"username": username, "password": password}
    )
    assert response.status_code == 201
    return response.json()["userId"]


class TestCredentialsEndpoints:
    """Tests for /signup and /login."""

    @pytest.mark.asyncio
    async def test_signup_then_login(self, client):
        user_id = await create_user(client)

        response = await client.post(
            "/login", json={"username": "alice", "password": "pw1"}
        )

        assert response.status_code == 200
        assert response.json()["userId"] == user_id
        assert "message" in response.json()

    @pytest.mark.asyncio
    async def test_duplicate_signup(self, client):
        await create_user(client)

        response = await client.post(
            "/signup", json={"username": "alice", "password": "other"}
        )

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_signup_missing_password(self, client):
        response = await client.post("/signup", json={"username": "alice"})
        assert response.status_code == 400
        assert "detail" in response.json()

    @pytest.mark.asyncio
    async def test_signup_empty_username(self, client):
        response = await client.post("/signup", json={"username": "", "password": "x"})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, client):
        await create_user(client)

        response = await client.post(
            "/login", json={"username": "alice", "password": "nope"}
        )

        assert response.status_code == 401
        assert response.json() == {"detail": "Invalid credentials"}

    @pytest.mark.asyncio
    async def test_login_unknown_user(self, client):
        response = await client.post(
            "/login", json={"username": "ghost", "password": "pw1"}
        )
        assert response.status_code == 404


class TestDeviceEndpoints:
    """Tests for the per-user device registry endpoints."""

    @pytest.mark.asyncio
    async def test_add_update_list(self, client, channel):
        user_id = await create_user(client)

        response = await client.post(
            f"/users/{user_id}/devices",
            json={"deviceId": "sensor-1", "humidity": "40"},
        )
        assert response.status_code == 201

        response = await client.put(
            f"/users/{user_id}/devices/sensor-1", json={"humidity": "62"}
        )
        assert response.status_code == 200

        response = await client.get(f"/users/{user_id}/devices")
        assert response.status_code == 200
        devices = response.json()
        assert len(devices) == 1
        assert devices[0]["deviceId"] == "sensor-1"
        assert devices[0]["humidity"] == "62"
        assert "createdAt" in devices[0]
        assert "batteryPercentage" not in devices[0]

        assert channel.sent == [
            ("project/newDevice", "id:sensor-1"),
            ("project/newHumidity", "sensor-1:62"),
        ]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "humidity,stored", [(40, "40"), (40.0, "40"), (40.5, "40.5"), ("40.0", "40.0")]
    )
    async def test_numeric_humidity_is_stored_as_text(self, client, humidity, stored):
        user_id = await create_user(client)

        await client.post(
            f"/users/{user_id}/devices",
            json={"deviceId": "sensor-1", "humidity": humidity},
        )

        response = await client.get(f"/users/{user_id}/devices")
        assert response.json()[0]["humidity"] == stored

    @pytest.mark.asyncio
    async def test_duplicate_device(self, client):
        user_id = await create_user(client)
        body = {"deviceId": "sensor-1", "humidity": "40"}
        await client.post(f"/users/{user_id}/devices", json=body)

        response = await client.post(
            f"/users/{user_id}/devices", json={"deviceId": "sensor-1", "humidity": "99"}
        )

        assert response.status_code == 409
        listed = (await client.get(f"/users/{user_id}/devices")).json()
        assert [d["humidity"] for d in listed] == ["40"]

    @pytest.mark.asyncio
    async def test_add_device_missing_fields(self, client):
        user_id = await create_user(client)

        response = await client.post(f"/users/{user_id}/devices", json={"humidity": "40"})
        assert response.status_code == 400

        response = await client.post(
            f"/users/{user_id}/devices", json={"deviceId": "sensor-1"}
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_add_device_unknown_user(self, client):
        response = await client.post(
            "/users/00000000-0000-0000-0000-000000000000/devices",
            json={"deviceId": "sensor-1", "humidity": "40"},
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_update_unknown_device(self, client, channel):
        user_id = await create_user(client)

        response = await client.put(
            f"/users/{user_id}/devices/sensor-9", json={"humidity": "10"}
        )

        assert response.status_code == 404
        assert channel.sent == []

    @pytest.mark.asyncio
    async def test_list_devices_unknown_user(self, client):
        response = await client.get("/users/not-a-user/devices")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_list_devices_with_status(self, client):
        user_id = await create_user(client)
        await client.post(
            f"/users/{user_id}/devices", json={"deviceId": "sensor-1", "humidity": "40"}
        )

        response = await client.get(
            f"/users/{user_id}/devices", params={"includeStatus": "true"}
        )

        device = response.json()[0]
        assert device["daysSinceCreated"] == 0
        assert device["batteryPercentage"] == 100.0

    @pytest.mark.asyncio
    async def test_broker_down_does_not_fail_mutation(self, client, make_channel):
        app.dependency_overrides[get_notification_channel] = lambda: make_channel(
            delivered=False
        )
        user_id = await create_user(client)

        response = await client.post(
            f"/users/{user_id}/devices", json={"deviceId": "sensor-1", "humidity": "40"}
        )

        assert response.status_code == 201
        listed = (await client.get(f"/users/{user_id}/devices")).json()
        assert [d["deviceId"] for d in listed] == ["sensor-1"]


class TestUserEndpoints:
    """Tests for /users and /users/{userId}."""

    @pytest.mark.asyncio
    async def test_list_users_hides_password(self, client):
        await create_user(client, "alice")
        await create_user(client, "bob")

        response = await client.get("/users")

        assert response.status_code == 200
        users = response.json()
        assert [u["username"] for u in users] == ["alice", "bob"]
        for user in users:
            assert set(user) == {"userId", "username", "devices"}

    @pytest.mark.asyncio
    async def test_get_user(self, client):
        user_id = await create_user(client)

        response = await client.get(f"/users/{user_id}")

        assert response.status_code == 200
        assert response.json()["username"] == "alice"
        assert response.json()["devices"] == []

    @pytest.mark.asyncio
    async def test_user_devices_have_no_status_fields(self, client):
        user_id = await create_user(client)
        await client.post(
            f"/users/{user_id}/devices", json={"deviceId": "sensor-1", "humidity": "40"}
        )

        listed = (await client.get("/users")).json()[0]["devices"]
        single = (await client.get(f"/users/{user_id}")).json()["devices"]

        for devices in (listed, single):
            assert len(devices) == 1
            assert set(devices[0]) == {"deviceId", "humidity", "createdAt"}

    @pytest.mark.asyncio
    async def test_get_unknown_user(self, client):
        response = await client.get("/users/missing")
        assert response.status_code == 404


class TestErrorResponses:
    """Client errors carry the domain message, server errors are sanitized."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("device_id", ["192.168.1.10", "secret:abc"])
    async def test_conflict_detail_is_verbatim(self, client, device_id):
        user_id = await create_user(client)
        body = {"deviceId": device_id, "humidity": "40"}
        await client.post(f"/users/{user_id}/devices", json=body)

        response = await client.post(f"/users/{user_id}/devices", json=body)

        assert response.status_code == 409
        assert response.json() == {"detail": f"Device '{device_id}' already exists"}

    @pytest.mark.asyncio
    async def test_not_found_detail_is_verbatim(self, client):
        user_id = await create_user(client)

        response = await client.put(
            f"/users/{user_id}/devices/10.0.0.7", json={"humidity": "10"}
        )

        assert response.status_code == 404
        assert response.json() == {"detail": "Device '10.0.0.7' not found"}

    @pytest.mark.asyncio
    async def test_server_error_detail_is_sanitized(self, client):
        failing_repo = MagicMock()
        failing_repo.list_all = AsyncMock(
            side_effect=DatabaseError("Database operation failed: postgresql://u:p@h/db")
        )
        app.dependency_overrides[get_user_repo] = lambda: failing_repo

        response = await client.get("/users")

        assert response.status_code == 500
        detail = response.json()["detail"]
        assert "[DATABASE_URL]" in detail
        assert "u:p" not in detail


class TestPublishHumidityEndpoint:
    """Tests for /publish-humidity."""

    @pytest.mark.asyncio
    async def test_publish(self, client, channel):
        response = await client.post(
            "/publish-humidity", json={"deviceId": "sensor-1", "humidity": "55"}
        )

        assert response.status_code == 200
        assert channel.sent == [("project/newHumidity", "sensor-1:55")]

    @pytest.mark.asyncio
    async def test_publish_failure(self, client, make_channel):
        app.dependency_overrides[get_notification_channel] = lambda: make_channel(
            delivered=False
        )

        response = await client.post(
            "/publish-humidity", json={"deviceId": "sensor-1", "humidity": "55"}
        )

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to publish humidity"}


class TestServiceEndpoints:
    """Tests for the root, config and health endpoints."""

    @pytest.mark.asyncio
    async def test_root(self, client):
        response = await client.get("/")
        assert response.status_code == 200
        assert response.json()["docs"] == "/docs"

    @pytest.mark.asyncio
    async def test_frontend_config(self, client):
        response = await client.get("/api/config")
        body = response.json()
        assert body["version"] == "1.0.0"
        assert body["backendUrl"]

    @pytest.mark.asyncio
    async def test_health_without_pool(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "unhealthy"
        assert body["database"]["healthy"] is False
