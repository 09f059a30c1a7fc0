"""
User directory: registration and lookup of users by email.
"""

from datetime import datetime, timezone

from eventhub.core.logging import get_logger
from eventhub.domain import User, UserId
from eventhub.domain.errors import UserAlreadyExistsError, UserNotFoundError
from eventhub.schemas.user import UserCreate
from eventhub.stores.interfaces import UserStore

logger = get_logger(__name__)


class UserDirectory:
    def __init__(self, store: UserStore) -> None:
        self._store = store

    async def register(self, user_data: UserCreate) -> User:
        """
        Register a new user.
        Raises UserAlreadyExistsError if the email is taken.
        """
        user = User(
            id=UserId.new(),
            email=user_data.email,
            name=user_data.name,
            photo_url=user_data.photo_url,
            created_at=datetime.now(timezone.utc),
        )
        if not await self._store.insert_user(user):
            logger.warning("registration_failed", reason="email_exists", email=user_data.email)
            raise UserAlreadyExistsError()

        logger.info("user_registered", user_id=str(user.id), email=user.email)
        return user

    async def list_users(self) -> list[User]:
        return await self._store.list_users()

    async def get(self, email: str) -> User:
        user = await self._store.get_user_by_email(email)
        if user is None:
            raise UserNotFoundError()
        return user

    async def delete(self, user_id: str) -> None:
        if not await self._store.delete_user(UserId.from_string(user_id)):
            raise UserNotFoundError()
        logger.info("user_deleted", user_id=user_id)
