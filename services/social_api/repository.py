"""
Repository for users, thoughts and reactions in the Social API Service.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple, Type

from pydantic import BaseModel, ValidationError

from shared.utils.exceptions import RecordValidationError, StoreError, describe_validation_error
from shared.utils.json_utils import loads, dumps
from shared.utils.object_id import is_object_id
from shared.utils.redis_manager import RedisManager
from services.social_api.models.thought import Reaction, Thought, ThoughtResponse
from services.social_api.models.user import User, UserDetailResponse, UserResponse

logger = logging.getLogger(__name__)


class SocialRepository:
    """Repository for users and their thoughts.

    Missing records are reported by returning ``None``. Invalid input raises
    ``RecordValidationError`` and store failures raise ``StoreError``.
    """

    USER_UPDATABLE_FIELDS = ("username", "email")
    THOUGHT_UPDATABLE_FIELDS = ("thought_text", "username")

    def __init__(self, redis_manager: Optional[RedisManager] = None):
        """Initialize the repository.

        Args:
            redis_manager: Optional Redis manager. A new one will be created if not provided.
        """
        self.redis_manager = redis_manager or RedisManager()
        self.user_store = None
        self.thought_store = None

    async def initialize(self) -> None:
        """Initialize the repository.

        Raises:
            StoreError: If Redis cannot be reached.
        """
        if not self.redis_manager.is_connected:
            if not await self.redis_manager.connect():
                raise StoreError("Could not connect to Redis")

        self.user_store = self.redis_manager.users
        self.thought_store = self.redis_manager.thoughts
        logger.info("Social repository initialized")

    async def _ensure_initialized(self) -> None:
        if not self.user_store or not self.thought_store:
            await self.initialize()

    @staticmethod
    def _build(model: Type[BaseModel], entity: str, **fields: Any) -> Any:
        """Validate fields into a record, dropping fields that were not supplied."""
        try:
            return model(**{k: v for k, v in fields.items() if v is not None})
        except ValidationError as e:
            raise RecordValidationError(describe_validation_error(entity, e.errors())) from e

    @staticmethod
    def _document(record: BaseModel, exclude: Optional[set] = None) -> Dict[str, Any]:
        """Serialize a record into the camelCase document kept in Redis."""
        return loads(dumps(record.model_dump(by_alias=True, exclude=exclude)))

    @staticmethod
    def _aliased(model: Type[BaseModel], fields: Dict[str, Any], allowed) -> Dict[str, Any]:
        """Keep the allowed fields and key them by their document (alias) name."""
        return {
            model.model_fields[name].alias or name: value
            for name, value in fields.items()
            if name in allowed
        }

    # Users

    async def _expand_user(self, user_data: Dict[str, Any]) -> UserDetailResponse:
        """Resolve a user's thought and friend ids into records."""
        user = User(**user_data)
        thoughts = await self.thought_store.get_thoughts(user.thoughts)
        friends = await self.user_store.get_users(user.friends)

        return UserDetailResponse(
            id=user.id,
            username=user.username,
            email=user.email,
            thoughts=[ThoughtResponse.from_thought(Thought(**t)) for t in thoughts],
            friends=[UserResponse.from_user(User(**f)) for f in friends],
            friend_count=len(friends)
        )

    async def list_users(self) -> List[UserDetailResponse]:
        """List all users with thoughts and friends expanded.

        Returns:
            List[UserDetailResponse]: Users in creation order.
        """
        await self._ensure_initialized()

        users = []
        for user_data in await self.user_store.get_users(await self.user_store.list_users()):
            users.append(await self._expand_user(user_data))

        logger.info(f"Retrieved {len(users)} users")
        return users

    async def get_user(self, user_id: str) -> Optional[UserDetailResponse]:
        """Get a user with thoughts and friends expanded.

        Args:
            user_id: The ID of the user to get.

        Returns:
            Optional[UserDetailResponse]: The user, or None if not found.
        """
        await self._ensure_initialized()

        if not is_object_id(user_id):
            return None

        user_data = await self.user_store.get_user(user_id)
        if not user_data:
            logger.warning(f"User {user_id} not found")
            return None

        return await self._expand_user(user_data)

    async def create_user(self, username: Optional[str], email: Optional[str]) -> User:
        """Create a new user with no thoughts and no friends.

        Args:
            username: Unique username.
            email: Unique email address.

        Returns:
            User: The created user.

        Raises:
            RecordValidationError: If a field is missing, malformed or already taken.
        """
        await self._ensure_initialized()

        user = self._build(User, "User", username=username, email=email)
        await self.user_store.store_user(self._document(user, exclude={"thoughts", "friends"}))

        logger.info(f"Created user {user.id}")
        return user

    async def update_user(self, user_id: str, fields: Dict[str, Any]) -> Optional[User]:
        """Update a user's username and/or email.

        Args:
            user_id: The ID of the user to update.
            fields: Field values keyed by attribute name; other keys are ignored.

        Returns:
            Optional[User]: The updated user, or None if not found.

        Raises:
            RecordValidationError: If a new value is malformed or already taken.
        """
        await self._ensure_initialized()

        if not is_object_id(user_id):
            return None

        current = await self.user_store.get_user(user_id)
        if not current:
            logger.warning(f"User {user_id} not found")
            return None

        changes = self._aliased(User, fields, self.USER_UPDATABLE_FIELDS)
        try:
            user = User(**{**current, **changes})
        except ValidationError as e:
            raise RecordValidationError(describe_validation_error("User", e.errors())) from e

        document = self._document(user, exclude={"thoughts", "friends"})
        updated = await self.user_store.update_user(
            user_id, {field: document[field] for field in changes}
        )
        if not updated:
            logger.warning(f"User {user_id} disappeared during update")
            return None

        return User(**updated)

    async def delete_user(self, user_id: str) -> Optional[bool]:
        """Delete a user. Thoughts and other users' friend lists are not touched.

        Args:
            user_id: The ID of the user to delete.

        Returns:
            Optional[bool]: True if deleted, or None if not found.
        """
        await self._ensure_initialized()

        if not is_object_id(user_id) or not await self.user_store.delete_user(user_id):
            logger.warning(f"User {user_id} not found")
            return None
        return True

    async def add_friend(self, user_id: str, friend_id: str) -> Optional[User]:
        """Add a friend reference to a user. Adding an existing friend is a no-op.

        Args:
            user_id: The ID of the user to update.
            friend_id: The ID of the friend. Its existence is not checked.

        Returns:
            Optional[User]: The updated user, or None if the user was not found.

        Raises:
            RecordValidationError: If the friend ID is malformed.
        """
        await self._ensure_initialized()

        self._check_friend_id(friend_id)
        if not is_object_id(user_id) or not await self.user_store.add_friend(user_id, friend_id):
            logger.warning(f"User {user_id} not found")
            return None

        return await self._get_user_record(user_id)

    async def remove_friend(self, user_id: str, friend_id: str) -> Optional[User]:
        """Remove a friend reference from a user. Removing an absent friend is a no-op.

        Args:
            user_id: The ID of the user to update.
            friend_id: The ID of the friend.

        Returns:
            Optional[User]: The updated user, or None if the user was not found.

        Raises:
            RecordValidationError: If the friend ID is malformed.
        """
        await self._ensure_initialized()

        self._check_friend_id(friend_id)
        if not is_object_id(user_id) or not await self.user_store.remove_friend(user_id, friend_id):
            logger.warning(f"User {user_id} not found")
            return None

        return await self._get_user_record(user_id)

    @staticmethod
    def _check_friend_id(friend_id: str) -> None:
        if not is_object_id(friend_id):
            raise RecordValidationError(f"User validation failed: friends: '{friend_id}' is not a valid user id")

    async def _get_user_record(self, user_id: str) -> Optional[User]:
        user_data = await self.user_store.get_user(user_id)
        return User(**user_data) if user_data else None

    # Thoughts

    async def list_thoughts(self) -> List[Thought]:
        """List all thoughts.

        Returns:
            List[Thought]: Thoughts in creation order.
        """
        await self._ensure_initialized()

        thought_ids = await self.thought_store.list_thoughts()
        thoughts = [Thought(**t) for t in await self.thought_store.get_thoughts(thought_ids)]

        logger.info(f"Retrieved {len(thoughts)} thoughts")
        return thoughts

    async def get_thought(self, thought_id: str) -> Optional[Thought]:
        """Get a thought by ID.

        Args:
            thought_id: The ID of the thought to get.

        Returns:
            Optional[Thought]: The thought, or None if not found.
        """
        await self._ensure_initialized()

        if not is_object_id(thought_id):
            return None

        thought_data = await self.thought_store.get_thought(thought_id)
        if not thought_data:
            logger.warning(f"Thought {thought_id} not found")
            return None

        return Thought(**thought_data)

    async def create_thought(
        self,
        thought_text: Optional[str],
        username: Optional[str],
        user_id: Optional[str]
    ) -> Tuple[Thought, bool]:
        """Create a thought and append its id to the owner's thoughts.

        The two writes are independent. If the owner does not exist (or the
        second write fails) the thought stays stored without being referenced
        by any user.

        Args:
            thought_text: Text of the thought, 1 to 280 characters.
            username: Author's username.
            user_id: ID of the owning user.

        Returns:
            Tuple[Thought, bool]: The created thought and whether the owner was found.

        Raises:
            RecordValidationError: If a field is missing or malformed.
        """
        await self._ensure_initialized()

        thought = self._build(
            Thought, "Thought", thought_text=thought_text, username=username, user_id=user_id
        )
        await self.thought_store.store_thought(self._document(thought))
        logger.info(f"Created thought {thought.id}")

        owner_found = await self.user_store.append_thought(thought.user_id, thought.id)
        if not owner_found:
            logger.warning(f"Thought {thought.id} created but user {thought.user_id} not found")

        return thought, owner_found

    async def update_thought(self, thought_id: str, fields: Dict[str, Any]) -> Optional[Thought]:
        """Update a thought's text and/or username. The owner cannot change.

        Args:
            thought_id: The ID of the thought to update.
            fields: Field values keyed by attribute name; other keys are ignored.

        Returns:
            Optional[Thought]: The updated thought, or None if not found.

        Raises:
            RecordValidationError: If a new value is malformed.
        """
        await self._ensure_initialized()

        if not is_object_id(thought_id):
            return None

        current = await self.thought_store.get_thought(thought_id)
        if not current:
            logger.warning(f"Thought {thought_id} not found")
            return None

        changes = self._aliased(Thought, fields, self.THOUGHT_UPDATABLE_FIELDS)
        try:
            thought = Thought(**{**current, **changes})
        except ValidationError as e:
            raise RecordValidationError(describe_validation_error("Thought", e.errors())) from e

        document = self._document(thought, exclude={"reactions"})
        updated = await self.thought_store.update_thought(
            thought_id, {field: value for field, value in document.items() if field != "id"}
        )
        if not updated:
            logger.warning(f"Thought {thought_id} disappeared during update")
            return None

        return Thought(**updated)

    async def delete_thought(self, thought_id: str) -> Optional[bool]:
        """Delete a thought. The owner's thoughts list keeps the id.

        Args:
            thought_id: The ID of the thought to delete.

        Returns:
            Optional[bool]: True if deleted, or None if not found.
        """
        await self._ensure_initialized()

        if not is_object_id(thought_id) or not await self.thought_store.delete_thought(thought_id):
            logger.warning(f"Thought {thought_id} not found")
            return None
        return True

    # Reactions

    async def add_reaction(
        self,
        thought_id: str,
        reaction_body: Optional[str],
        username: Optional[str]
    ) -> Optional[Thought]:
        """Append a new reaction to a thought.

        Args:
            thought_id: The ID of the thought.
            reaction_body: Reaction text, at most 280 characters.
            username: Name of the reacting user.

        Returns:
            Optional[Thought]: The updated thought, or None if not found.

        Raises:
            RecordValidationError: If a field is missing or too long.
        """
        await self._ensure_initialized()

        reaction = self._build(Reaction, "Reaction", reaction_body=reaction_body, username=username)

        if not is_object_id(thought_id) or not await self.thought_store.add_reaction(
            thought_id, self._document(reaction)
        ):
            logger.warning(f"Thought {thought_id} not found")
            return None

        return await self.get_thought(thought_id)

    async def remove_reaction(self, thought_id: str, reaction_id: str) -> Optional[Thought]:
        """Remove a reaction from a thought. Unknown reaction ids change nothing.

        Args:
            thought_id: The ID of the thought.
            reaction_id: The ID of the reaction to remove.

        Returns:
            Optional[Thought]: The updated thought, or None if not found.
        """
        await self._ensure_initialized()

        if not is_object_id(thought_id) or not await self.thought_store.remove_reaction(
            thought_id, reaction_id
        ):
            logger.warning(f"Thought {thought_id} not found")
            return None

        return await self.get_thought(thought_id)
