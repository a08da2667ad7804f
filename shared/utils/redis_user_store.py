"""
Redis store for user documents and their relationship arrays.

A user is kept as a JSON document plus two native Redis structures so that
the relationship arrays can be mutated atomically:

- ``user:thoughts:{id}`` is a list; appending a thought id is a single RPUSH.
- ``user:friends:{id}`` is a sorted set scored by insertion time; ZADD NX
  suppresses duplicates and ZREM removes without a read-modify-write cycle.

Unique usernames and emails are claimed through HSETNX on an index hash.
"""

import logging
import time
from typing import Any, Dict, List, Optional

from shared.utils.exceptions import DuplicateKeyError
from shared.utils.redis_client import RedisClient

logger = logging.getLogger(__name__)

class RedisUserStore:
    """Redis client for handling user data in Redis."""

    # Redis key prefixes
    USER_KEY_PREFIX = "user:"
    USER_THOUGHTS_KEY_PREFIX = "user:thoughts:"
    USER_FRIENDS_KEY_PREFIX = "user:friends:"
    USERNAME_INDEX_KEY = "users:usernames"
    EMAIL_INDEX_KEY = "users:emails"
    ALL_USERS_KEY = "users:all"

    # Document field -> uniqueness index
    UNIQUE_FIELDS = {
        "username": USERNAME_INDEX_KEY,
        "email": EMAIL_INDEX_KEY,
    }

    def __init__(self, redis_client: Optional[RedisClient] = None):
        """Initialize the Redis user store.

        Args:
            redis_client: Optional Redis client. If not provided, a new one will be created.
        """
        self.redis = redis_client or RedisClient()

    def _user_key(self, user_id: str) -> str:
        return f"{self.USER_KEY_PREFIX}{user_id}"

    def _thoughts_key(self, user_id: str) -> str:
        return f"{self.USER_THOUGHTS_KEY_PREFIX}{user_id}"

    def _friends_key(self, user_id: str) -> str:
        return f"{self.USER_FRIENDS_KEY_PREFIX}{user_id}"

    async def _claim(self, field: str, value: str, user_id: str) -> bool:
        """Claim a unique value for a user.

        Returns:
            bool: True if the value is now (or already was) owned by the user.
        """
        index_key = self.UNIQUE_FIELDS[field]
        if await self.redis.set_hash_field_if_absent(index_key, value, user_id):
            return True
        owner = await self.redis.get_hash_field(index_key, value)
        return owner == user_id

    async def _release(self, field: str, value: str, user_id: str) -> None:
        index_key = self.UNIQUE_FIELDS[field]
        if await self.redis.get_hash_field(index_key, value) == user_id:
            await self.redis.delete_hash_field(index_key, value)

    async def store_user(self, user_data: Dict[str, Any]) -> str:
        """Store a new user document.

        Args:
            user_data: User document with ``id``, ``username`` and ``email``.

        Returns:
            str: User ID.

        Raises:
            DuplicateKeyError: If the username or email is already taken.
        """
        user_id = user_data["id"]
        claimed = []
        written = False

        try:
            for field in self.UNIQUE_FIELDS:
                if not await self._claim(field, user_data[field], user_id):
                    raise DuplicateKeyError(field, user_data[field])
                claimed.append(field)

            written = True
            await self.redis.set_value(self._user_key(user_id), user_data)
            await self.redis.add_to_set(self.ALL_USERS_KEY, user_id)

            logger.info(f"Stored user {user_id}")
            return user_id

        except Exception as e:
            logger.error(f"Failed to store user {user_id}: {e}")
            if written:
                await self.redis.delete_key(self._user_key(user_id))
            for field in claimed:
                await self._release(field, user_data[field], user_id)
            raise

    async def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        """Get a user document with its thought and friend ids.

        Args:
            user_id: User ID.

        Returns:
            Optional[Dict[str, Any]]: User data or None if not found.
        """
        user_data = await self.redis.get_value(self._user_key(user_id))
        if not user_data:
            return None

        user_data["thoughts"] = await self.redis.get_list(self._thoughts_key(user_id))
        user_data["friends"] = await self.redis.get_sorted_set_members(self._friends_key(user_id))
        return user_data

    async def get_users(self, user_ids: List[str]) -> List[Dict[str, Any]]:
        """Get several users, in the given order, skipping ids with no document.

        Args:
            user_ids: User IDs.

        Returns:
            List[Dict[str, Any]]: The users that exist.
        """
        users = []
        for user_id in user_ids:
            user_data = await self.get_user(user_id)
            if user_data:
                users.append(user_data)
        return users

    async def list_users(self) -> List[str]:
        """List all user IDs in creation order.

        Returns:
            List[str]: List of user IDs.
        """
        return sorted(await self.redis.get_set_members(self.ALL_USERS_KEY))

    async def user_exists(self, user_id: str) -> bool:
        """Check whether a user document exists."""
        return await self.redis.key_exists(self._user_key(user_id))

    async def update_user(self, user_id: str, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Update fields of a user document.

        Args:
            user_id: User ID.
            changes: Document fields to overwrite.

        Returns:
            Optional[Dict[str, Any]]: The updated user or None if not found.

        Raises:
            DuplicateKeyError: If a new username or email is already taken.
        """
        user_key = self._user_key(user_id)
        existing_data = await self.redis.get_value(user_key)
        if not existing_data:
            return None

        claimed = []
        try:
            for field in self.UNIQUE_FIELDS:
                if field in changes and changes[field] != existing_data.get(field):
                    if not await self._claim(field, changes[field], user_id):
                        raise DuplicateKeyError(field, changes[field])
                    claimed.append(field)

            previous = dict(existing_data)
            existing_data.update(changes)
            await self.redis.set_value(user_key, existing_data)

        except Exception as e:
            logger.error(f"Failed to update user {user_id}: {e}")
            for field in claimed:
                await self._release(field, changes[field], user_id)
            raise

        for field in claimed:
            await self._release(field, previous[field], user_id)

        logger.info(f"Updated user {user_id}")
        return await self.get_user(user_id)

    async def delete_user(self, user_id: str) -> bool:
        """Delete a user document and its relationship arrays.

        Thoughts written by the user and references to the user in other
        users' friend lists are left in place.

        Args:
            user_id: User ID.

        Returns:
            bool: True if the user existed, False otherwise.
        """
        existing_data = await self.redis.get_value(self._user_key(user_id))
        if not existing_data:
            return False

        await self.redis.delete_key(
            self._user_key(user_id),
            self._thoughts_key(user_id),
            self._friends_key(user_id)
        )
        await self.redis.remove_from_set(self.ALL_USERS_KEY, user_id)
        for field in self.UNIQUE_FIELDS:
            await self._release(field, existing_data[field], user_id)

        logger.info(f"Deleted user {user_id}")
        return True

    async def append_thought(self, user_id: str, thought_id: str) -> bool:
        """Append a thought id to a user's thoughts.

        Args:
            user_id: User ID.
            thought_id: Thought ID.

        Returns:
            bool: True if the user exists, False otherwise.
        """
        if not await self.user_exists(user_id):
            return False

        await self.redis.add_to_list(self._thoughts_key(user_id), thought_id)
        return True

    async def add_friend(self, user_id: str, friend_id: str) -> bool:
        """Add a friend id to a user's friends, ignoring duplicates.

        Args:
            user_id: User ID.
            friend_id: Friend's user ID. Not checked for existence.

        Returns:
            bool: True if the user exists, False otherwise.
        """
        if not await self.user_exists(user_id):
            return False

        added = await self.redis.add_to_sorted_set(self._friends_key(user_id), friend_id, time.time())
        if not added:
            logger.debug(f"User {user_id} already has friend {friend_id}")
        return True

    async def remove_friend(self, user_id: str, friend_id: str) -> bool:
        """Remove a friend id from a user's friends.

        Args:
            user_id: User ID.
            friend_id: Friend's user ID.

        Returns:
            bool: True if the user exists, False otherwise.
        """
        if not await self.user_exists(user_id):
            return False

        await self.redis.remove_from_sorted_set(self._friends_key(user_id), friend_id)
        return True
