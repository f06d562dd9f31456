"""Port interfaces for the device registry.

Ports define the contracts between the use cases and the infrastructure.
These are abstract base classes that adapters must implement.

Following the Hexagonal Architecture (Ports and Adapters) pattern:
- Ports are interfaces defined in the domain layer
- Adapters implement these ports in the adapters layer
- Use cases depend only on ports, not concrete implementations
"""

from abc import ABC, abstractmethod
from typing import AsyncContextManager, Optional

from .entities import User


class IUserRepository(ABC):
    """Port for user document persistence.

    Each user is stored and loaded as one whole document, devices included.
    """

    @abstractmethod
    async def create(self, user: User) -> User:
        """Insert a new user document.

        Args:
            user: User with an empty device registry

        Returns:
            The stored user

        Raises:
            ConflictError: If the username is already taken
        """
        ...

    @abstractmethod
    async def get_by_id(self, user_id: str) -> Optional[User]:
        """Load a user by id.

        Args:
            user_id: Opaque user identifier (malformed ids resolve to None)

        Returns:
            User if found, None otherwise
        """
        ...

    @abstractmethod
    async def get_by_username(self, username: str) -> Optional[User]:
        """Load a user by username.

        Returns:
            User if found, None otherwise
        """
        ...

    @abstractmethod
    async def list_all(self) -> list[User]:
        """Load every user in creation order."""
        ...

    @abstractmethod
    def modify(self, user_id: str) -> AsyncContextManager[Optional[User]]:
        """Read-modify-write unit of work over one user document.

        Yields the loaded user (or None if it does not exist). Changes made
        to the yielded user are persisted when the block exits cleanly and
        discarded when it raises.

        Example:
            async with repo.modify(user_id) as user:
                user.add_device("sensor-1", "40")
            # committed here
        """
        ...


class INotificationChannel(ABC):
    """Port for the outbound publish/subscribe channel.

    Implementations make one bounded attempt and never raise: a failed
    publish is logged and reported through the return value.
    """

    @abstractmethod
    async def notify(self, topic: str, payload: str) -> bool:
        """Publish a plain-text payload to a topic.

        Args:
            topic: Destination topic
            payload: Message body

        Returns:
            True if the broker accepted the message within the time bound
        """
        ...

    def is_connected(self) -> bool:
        """Whether the channel currently holds a broker connection."""
        return True


class IPasswordHasher(ABC):
    """Port for salted, slow password hashing."""

    @abstractmethod
    def hash(self, password: str) -> str:
        """Hash a plaintext password with a fresh salt."""
        ...

    @abstractmethod
    def verify(self, password: str, password_hash: str) -> bool:
        """Check a plaintext password against a stored hash."""
        ...
