"""
Redis client module for handling all interactions with Redis.
Provides functions for storing and retrieving documents, lists, hashes and sets.
"""

import logging
from typing import Any, List, Optional
import os
import redis.asyncio as redis
from redis.exceptions import RedisError

import json
from shared.utils.exceptions import StoreError
from shared.utils.json_utils import dumps, loads

logger = logging.getLogger(__name__)

class RedisClient:
    """Redis client for handling all interactions with Redis."""

    def __init__(
        self,
        host: str = None,
        port: int = None,
        db: int = None,
        password: str = None,
        connection: Optional[Any] = None
    ):
        """Initialize the Redis client.

        Args:
            host: Redis host. Defaults to os.environ.get("REDIS_HOST", "localhost").
            port: Redis port. Defaults to int(os.environ.get("REDIS_PORT", 6379)).
            db: Redis db. Defaults to int(os.environ.get("REDIS_DB", 0)).
            password: Redis password. Defaults to os.environ.get("REDIS_PASSWORD").
            connection: Optional ready-made connection exposing the redis.asyncio API.
        """
        self.host = host or os.environ.get("REDIS_HOST", "localhost")
        self.port = port or int(os.environ.get("REDIS_PORT", 6379))
        self.db = db if db is not None else int(os.environ.get("REDIS_DB", 0))
        self.password = password or os.environ.get("REDIS_PASSWORD")

        self.redis = connection
        if self.redis is None:
            self._connect()

    def _connect(self) -> None:
        """Connect to Redis."""
        try:
            self.redis = redis.Redis(
                host=self.host,
                port=self.port,
                db=self.db,
                password=self.password,
                decode_responses=True
            )
            logger.info(f"Connected to Redis at {self.host}:{self.port}/{self.db}")
        except RedisError as e:
            logger.error(f"Failed to connect to Redis: {e}")
            raise StoreError(f"Failed to connect to Redis: {e}") from e

    @staticmethod
    def _serialize(value: Any) -> str:
        return value if isinstance(value, str) else dumps(value)

    @staticmethod
    def _deserialize(value: str) -> Any:
        try:
            return loads(value)
        except (json.JSONDecodeError, TypeError):
            return value

    async def ping(self) -> bool:
        """Check if Redis is alive.

        Returns:
            bool: True if Redis is alive, False otherwise.
        """
        try:
            return await self.redis.ping()
        except RedisError as e:
            logger.error(f"Failed to ping Redis: {e}")
            return False

    async def set_value(self, key: str, value: Any) -> bool:
        """Set a key-value pair in Redis.

        Args:
            key: The key.
            value: The value (will be JSON-serialized if not a string).

        Returns:
            bool: True if successful.

        Raises:
            StoreError: If Redis rejects the write.
        """
        try:
            value = self._serialize(value)
            return bool(await self.redis.set(key, value))
        except (RedisError, TypeError) as e:
            logger.error(f"Failed to set value for key {key}: {e}")
            raise StoreError(f"Failed to set value for key {key}: {e}") from e

    async def get_value(self, key: str, default: Any = None) -> Any:
        """Get a value from Redis.

        Args:
            key: The key.
            default: Default value if key doesn't exist.

        Returns:
            The value (JSON-deserialized if possible) or default.
        """
        try:
            value = await self.redis.get(key)
        except RedisError as e:
            logger.error(f"Failed to get value for key {key}: {e}")
            raise StoreError(f"Failed to get value for key {key}: {e}") from e

        if value is None:
            return default
        return self._deserialize(value)

    async def delete_key(self, *keys: str) -> bool:
        """Delete one or more keys from Redis.

        Args:
            *keys: The keys to delete.

        Returns:
            bool: True if at least one key was deleted, False otherwise.
        """
        try:
            return await self.redis.delete(*keys) > 0
        except RedisError as e:
            logger.error(f"Failed to delete keys {keys}: {e}")
            raise StoreError(f"Failed to delete keys {keys}: {e}") from e

    async def key_exists(self, key: str) -> bool:
        """Check if a key exists in Redis.

        Args:
            key: The key to check.

        Returns:
            bool: True if key exists, False otherwise.
        """
        try:
            return await self.redis.exists(key) > 0
        except RedisError as e:
            logger.error(f"Failed to check if key {key} exists: {e}")
            raise StoreError(f"Failed to check if key {key} exists: {e}") from e

    async def add_to_list(self, key: str, value: Any) -> int:
        """Append a value to a list in Redis.

        Args:
            key: The list key.
            value: The value to add (will be JSON-serialized if not a string).

        Returns:
            int: Length of the list after the append.
        """
        try:
            return await self.redis.rpush(key, self._serialize(value))
        except (RedisError, TypeError) as e:
            logger.error(f"Failed to add value to list {key}: {e}")
            raise StoreError(f"Failed to add value to list {key}: {e}") from e

    async def get_list(self, key: str, decode: bool = True) -> List[Any]:
        """Get all values from a list in Redis.

        Args:
            key: The list key.
            decode: Whether to JSON-deserialize the values.

        Returns:
            List of values.
        """
        try:
            values = await self.redis.lrange(key, 0, -1)
        except RedisError as e:
            logger.error(f"Failed to get list {key}: {e}")
            raise StoreError(f"Failed to get list {key}: {e}") from e

        if not decode:
            return list(values)
        return [self._deserialize(value) for value in values]

    async def remove_from_list(self, key: str, value: Any, count: int = 1) -> int:
        """Remove occurrences of a value from a list.

        Args:
            key: The list key.
            value: The value to remove, compared against the stored string.
            count: Maximum number of occurrences to remove, head first.

        Returns:
            int: Number of values removed.
        """
        try:
            return await self.redis.lrem(key, count, self._serialize(value))
        except (RedisError, TypeError) as e:
            logger.error(f"Failed to remove value from list {key}: {e}")
            raise StoreError(f"Failed to remove value from list {key}: {e}") from e

    async def set_hash_field_if_absent(self, key: str, field: str, value: Any) -> bool:
        """Set a hash field only when it does not exist yet.

        Args:
            key: The hash key.
            field: The field to set.
            value: The value (will be JSON-serialized if not a string).

        Returns:
            bool: True if the field was set, False if it already existed.
        """
        try:
            return bool(await self.redis.hsetnx(key, field, self._serialize(value)))
        except (RedisError, TypeError) as e:
            logger.error(f"Failed to set field {field} on hash {key}: {e}")
            raise StoreError(f"Failed to set field {field} on hash {key}: {e}") from e

    async def get_hash_field(self, key: str, field: str, default: Any = None) -> Any:
        """Get a single field from a hash.

        Args:
            key: The hash key.
            field: The field to get.
            default: Default value if field doesn't exist.

        Returns:
            The value (JSON-deserialized if possible) or default.
        """
        try:
            value = await self.redis.hget(key, field)
        except RedisError as e:
            logger.error(f"Failed to get field {field} from hash {key}: {e}")
            raise StoreError(f"Failed to get field {field} from hash {key}: {e}") from e

        if value is None:
            return default
        return self._deserialize(value)

    async def delete_hash_field(self, key: str, *fields: str) -> int:
        """Delete fields from a hash.

        Args:
            key: The hash key.
            *fields: The fields to delete.

        Returns:
            int: Number of fields deleted.
        """
        try:
            return await self.redis.hdel(key, *fields)
        except RedisError as e:
            logger.error(f"Failed to delete fields {fields} from hash {key}: {e}")
            raise StoreError(f"Failed to delete fields {fields} from hash {key}: {e}") from e

    async def add_to_set(self, key: str, *values: Any) -> int:
        """Add values to a set.

        Args:
            key: The set key.
            *values: Values to add (will be JSON-serialized if not strings).

        Returns:
            int: Number of values added.
        """
        try:
            return await self.redis.sadd(key, *[self._serialize(value) for value in values])
        except (RedisError, TypeError) as e:
            logger.error(f"Failed to add values to set {key}: {e}")
            raise StoreError(f"Failed to add values to set {key}: {e}") from e

    async def get_set_members(self, key: str) -> List[Any]:
        """Get all members of a set.

        Args:
            key: The set key.

        Returns:
            List of values (JSON-deserialized if possible).
        """
        try:
            values = await self.redis.smembers(key)
        except RedisError as e:
            logger.error(f"Failed to get members of set {key}: {e}")
            raise StoreError(f"Failed to get members of set {key}: {e}") from e

        return [self._deserialize(value) for value in values]

    async def remove_from_set(self, key: str, *values: Any) -> int:
        """Remove values from a set.

        Args:
            key: The set key.
            *values: Values to remove (will be JSON-serialized if not strings).

        Returns:
            int: Number of values removed.
        """
        try:
            return await self.redis.srem(key, *[self._serialize(value) for value in values])
        except (RedisError, TypeError) as e:
            logger.error(f"Failed to remove values from set {key}: {e}")
            raise StoreError(f"Failed to remove values from set {key}: {e}") from e

    async def add_to_sorted_set(self, key: str, member: str, score: float, only_new: bool = True) -> int:
        """Add a member to a sorted set.

        Args:
            key: The sorted set key.
            member: The member to add.
            score: The member's score.
            only_new: Leave existing members (and their scores) untouched.

        Returns:
            int: Number of members added.
        """
        try:
            return await self.redis.zadd(key, {member: score}, nx=only_new)
        except RedisError as e:
            logger.error(f"Failed to add {member} to sorted set {key}: {e}")
            raise StoreError(f"Failed to add {member} to sorted set {key}: {e}") from e

    async def get_sorted_set_members(self, key: str) -> List[str]:
        """Get all members of a sorted set, lowest score first.

        Args:
            key: The sorted set key.

        Returns:
            List[str]: The members.
        """
        try:
            return list(await self.redis.zrange(key, 0, -1))
        except RedisError as e:
            logger.error(f"Failed to get members of sorted set {key}: {e}")
            raise StoreError(f"Failed to get members of sorted set {key}: {e}") from e

    async def remove_from_sorted_set(self, key: str, *members: str) -> int:
        """Remove members from a sorted set.

        Args:
            key: The sorted set key.
            *members: The members to remove.

        Returns:
            int: Number of members removed.
        """
        try:
            return await self.redis.zrem(key, *members)
        except RedisError as e:
            logger.error(f"Failed to remove {members} from sorted set {key}: {e}")
            raise StoreError(f"Failed to remove {members} from sorted set {key}: {e}") from e

    async def close(self) -> None:
        """Close the Redis connection."""
        if self.redis:
            await self.redis.close()
            logger.info("Redis connection closed")
