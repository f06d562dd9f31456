"""Shared fakes for the device registry tests.

The fakes implement the domain ports in memory so use cases and endpoints
can be exercised without PostgreSQL or an MQTT broker.
"""

import copy
from contextlib import asynccontextmanager
from typing import Optional

import pytest

from src.sensorsync.common.exceptions import ConflictError
from src.sensorsync.registry.domain.entities import User
from src.sensorsync.registry.domain.ports import (
    INotificationChannel,
    IPasswordHasher,
    IUserRepository,
)


class InMemoryUserRepository(IUserRepository):
    """Dict-backed IUserRepository that copies documents in and out."""

    def __init__(self):
        self.users: dict[str, User] = {}
        self.commits = 0

    async def create(self, user: User) -> User:
        if any(u.username == user.username for u in self.users.values()):
            raise ConflictError("User", user.username)
        self.users[user.user_id] = copy.deepcopy(user)
        return copy.deepcopy(user)

    async def get_by_id(self, user_id: str) -> Optional[User]:
        user = self.users.get(user_id)
        return copy.deepcopy(user) if user else None

    async def get_by_username(self, username: str) -> Optional[User]:
        for user in self.users.values():
            if user.username == username:
                return copy.deepcopy(user)
        return None

    async def list_all(self) -> list[User]:
        return [copy.deepcopy(u) for u in self.users.values()]

    @asynccontextmanager
    async def modify(self, user_id: str):
        user = await self.get_by_id(user_id)
        yield user
        # Only reached when the block did not raise
        if user is not None:
            self.users[user_id] = user
            self.commits += 1


class FakeNotificationChannel(INotificationChannel):
    """Records publishes and answers with a configurable outcome."""

    def __init__(self, delivered: bool = True, raise_error: Optional[Exception] = None):
        self.delivered = delivered
        self.raise_error = raise_error
        self.sent: list[tuple[str, str]] = []

    async def notify(self, topic: str, payload: str) -> bool:
        self.sent.append((topic, payload))
        if self.raise_error:
            raise self.raise_error
        return self.delivered

    def is_connected(self) -> bool:
        return self.delivered


class FakePasswordHasher(IPasswordHasher):
    """Reversible stand-in so tests stay fast."""

    def hash(self, password: str) -> str:
        return f"hashed:{password}"

    def verify(self, password: str, password_hash: str) -> bool:
        return password_hash == f"hashed:{password}"


@pytest.fixture
def user_repo():
    return InMemoryUserRepository()


@pytest.fixture
def channel():
    return FakeNotificationChannel()


@pytest.fixture
def hasher():
    return FakePasswordHasher()


@pytest.fixture
def make_channel():
    """Build channels with a specific outcome (e.g. delivered=False)."""
    return FakeNotificationChannel
