"""Read-only user lookups."""

from ...common.exceptions import NotFoundError
from ..domain.entities import User
from ..domain.ports import IUserRepository


class ListUsersUseCase:
    """Return every registered user."""

    def __init__(self, user_repo: IUserRepository):
        self.repo = user_repo

    async def execute(self) -> list[User]:
        return await self.repo.list_all()


class GetUserUseCase:
    """Return one user by id."""

    def __init__(self, user_repo: IUserRepository):
        self.repo = user_repo

    async def execute(self, user_id: str) -> User:
        user = await self.repo.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User")
        return user
