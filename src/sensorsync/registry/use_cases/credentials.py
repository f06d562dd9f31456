"""Signup and login use cases.

Password hashing is delegated to the IPasswordHasher port and runs in a
worker thread, since bcrypt is deliberately slow.
"""

import asyncio
import logging
from uuid import uuid4

from ...common.exceptions import (
    ConflictError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from ..domain.entities import User
from ..domain.ports import IPasswordHasher, IUserRepository

logger = logging.getLogger(__name__)


def _require_credentials(username: str, password: str) -> None:
    if not username or not password:
        raise ValidationError("Username and password are required.")


class SignupUseCase:
    """Create a user with an empty device registry.

    Example:
        use_case = SignupUseCase(user_repo=repo, hasher=BcryptPasswordHasher())
        user_id = await use_case.execute("alice", "pw1")
    """

    def __init__(self, user_repo: IUserRepository, hasher: IPasswordHasher):
        self.repo = user_repo
        self.hasher = hasher

    async def execute(self, username: str, password: str) -> str:
        """Register a new user.

        Returns:
            The new user's id

        Raises:
            ValidationError: username or password missing
            ConflictError: username already taken
        """
        _require_credentials(username, password)

        if await self.repo.get_by_username(username) is not None:
            raise ConflictError("User", username)

        password_hash = await asyncio.to_thread(self.hasher.hash, password)
        user = User(
            user_id=str(uuid4()),
            username=username,
            password_hash=password_hash,
        )

        # The store's unique index still guards against a concurrent signup
        stored = await self.repo.create(user)
        logger.info(f"Created user {stored.user_id}")
        return stored.user_id


class LoginUseCase:
    """Check credentials and hand back the user id (no session is issued)."""

    def __init__(self, user_repo: IUserRepository, hasher: IPasswordHasher):
        self.repo = user_repo
        self.hasher = hasher

    async def execute(self, username: str, password: str) -> str:
        """Verify a username/password pair.

        Raises:
            ValidationError: username or password missing
            NotFoundError: unknown username
            UnauthorizedError: password does not match
        """
        _require_credentials(username, password)

        user = await self.repo.get_by_username(username)
        if user is None:
            raise NotFoundError("User")

        matches = await asyncio.to_thread(
            self.hasher.verify, password, user.password_hash
        )
        if not matches:
            logger.info(f"Rejected login for user {user.user_id}")
            raise UnauthorizedError()

        return user.user_id
