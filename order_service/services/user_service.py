"""User account management."""

from typing import List

from ..domain.entities import PageRequest, User
from ..domain.exceptions import UserNotFoundException
from ..logging_config import get_logger
from ..repositories.interfaces import IUserRepository

logger = get_logger(__name__)


class UserService:
    """CRUD operations over user accounts."""

    def __init__(self, user_repo: IUserRepository):
        self.user_repo = user_repo

    async def list_users(self, page: PageRequest) -> List[User]:
        return await self.user_repo.list(page)

    async def get_user(self, user_id: str) -> User:
        user = await self.user_repo.find_by_id(user_id)
        if user is None:
            raise UserNotFoundException(user_id)
        return user

    async def create_user(self, data: dict) -> User:
        user = await self.user_repo.create(data)
        logger.info("User created", user_id=user.id)
        return user

    async def update_user(self, user_id: str, changes: dict) -> User:
        """
        Apply a partial update.

        An empty change set returns the user unchanged.

        Raises:
            UserNotFoundException: If no user has this id
        """
        if not changes:
            return await self.get_user(user_id)

        user = await self.user_repo.update(user_id, changes)
        if user is None:
            raise UserNotFoundException(user_id)
        logger.info("User updated", user_id=user_id, fields=sorted(changes))
        return user

    async def delete_user(self, user_id: str) -> None:
        if not await self.user_repo.delete(user_id):
            raise UserNotFoundException(user_id)
        logger.info("User deleted", user_id=user_id)
