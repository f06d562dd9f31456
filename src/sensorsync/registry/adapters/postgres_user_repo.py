"""PostgreSQL repository adapter for user documents.

This adapter implements IUserRepository with asyncpg. Each user is one row
whose `devices` column holds the embedded device registry as a JSONB
array, so a user is always read and written as a whole document.

modify() locks the user row (SELECT ... FOR UPDATE) for the duration of the
read-modify-write, which serialises concurrent mutations of the same user.
"""

import json
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import TYPE_CHECKING, Any, AsyncIterator, Optional
from uuid import UUID

import asyncpg

from ...common.database import database_connection, database_transaction
from ...common.exceptions import ConflictError
from ..domain.entities import Device, User
from ..domain.ports import IUserRepository

if TYPE_CHECKING:
    from asyncpg import Record

logger = logging.getLogger(__name__)

_USER_COLUMNS = "id, username, password_hash, devices"


def _parse_user_id(user_id: str) -> Optional[UUID]:
    """Return the UUID for a user id, or None if it is malformed."""
    try:
        return UUID(str(user_id))
    except ValueError:
        return None


class PostgresUserRepository(IUserRepository):
    """PostgreSQL implementation of IUserRepository.

    Table layout is defined in db/schema.sql.
    """

    def __init__(self, pool: asyncpg.Pool):
        """Initialize the repository.

        Args:
            pool: asyncpg connection pool for database operations
        """
        self.pool = pool

    async def create(self, user: User) -> User:
        """Insert a user document; the unique index on username guards races."""
        async with database_connection(self.pool) as conn:
            try:
                await conn.execute(
                    """
                    INSERT INTO users (id, username, password_hash, devices)
                    VALUES ($1, $2, $3, $4::jsonb)
                    """,
                    UUID(user.user_id),
                    user.username,
                    user.password_hash,
                    self._devices_to_json(user.devices),
                )
            except asyncpg.UniqueViolationError as e:
                raise ConflictError("User", user.username, cause=e)

        return user

    async def get_by_id(self, user_id: str) -> Optional[User]:
        uid = _parse_user_id(user_id)
        if uid is None:
            return None

        async with database_connection(self.pool) as conn:
            row = await conn.fetchrow(
                f"SELECT {_USER_COLUMNS} FROM users WHERE id = $1",
                uid,
            )

        return self._row_to_user(row) if row else None

    async def get_by_username(self, username: str) -> Optional[User]:
        async with database_connection(self.pool) as conn:
            row = await conn.fetchrow(
                f"SELECT {_USER_COLUMNS} FROM users WHERE username = $1",
                username,
            )

        return self._row_to_user(row) if row else None

    async def list_all(self) -> list[User]:
        async with database_connection(self.pool) as conn:
            rows = await conn.fetch(
                f"SELECT {_USER_COLUMNS} FROM users ORDER BY created_at, id"
            )

        return [self._row_to_user(row) for row in rows]

    @asynccontextmanager
    async def modify(self, user_id: str) -> AsyncIterator[Optional[User]]:
        """Lock, load, yield and save one user document in a transaction."""
        uid = _parse_user_id(user_id)
        if uid is None:
            yield None
            return

        async with database_transaction(self.pool) as conn:
            row = await conn.fetchrow(
                f"SELECT {_USER_COLUMNS} FROM users WHERE id = $1 FOR UPDATE",
                uid,
            )
            if row is None:
                yield None
                return

            user = self._row_to_user(row)
            yield user

            await conn.execute(
                "UPDATE users SET devices = $2::jsonb WHERE id = $1",
                uid,
                self._devices_to_json(user.devices),
            )
            logger.debug(f"Saved user document {user_id} ({len(user.devices)} devices)")

    def _row_to_user(self, row: "Record") -> User:
        """Convert a users row to a User entity."""
        raw_devices = row["devices"]
        if isinstance(raw_devices, str):
            raw_devices = json.loads(raw_devices)

        return User(
            user_id=str(row["id"]),
            username=row["username"],
            password_hash=row["password_hash"],
            devices=[self._device_from_dict(d) for d in raw_devices or []],
        )

    @staticmethod
    def _device_from_dict(data: dict[str, Any]) -> Device:
        return Device(
            device_id=data["deviceId"],
            humidity=data.get("humidity", ""),
            created_at=datetime.fromisoformat(data["createdAt"]),
        )

    @staticmethod
    def _devices_to_json(devices: list[Device]) -> str:
        return json.dumps([
            {
                "deviceId": d.device_id,
                "humidity": d.humidity,
                "createdAt": d.created_at.isoformat(),
            }
            for d in devices
        ])
