"""
Redis store for thought documents and their embedded reactions.

Reactions are kept in a list next to the thought document
(``thought:reactions:{id}``) so that adding one is a single RPUSH and
removing one is a single LREM.
"""

import logging
from typing import Any, Dict, List, Optional

from shared.utils.redis_client import RedisClient
from shared.utils.json_utils import loads

logger = logging.getLogger(__name__)

class RedisThoughtStore:
    """Redis client for handling thought data in Redis."""

    # Redis key prefixes
    THOUGHT_KEY_PREFIX = "thought:"
    THOUGHT_REACTIONS_KEY_PREFIX = "thought:reactions:"
    ALL_THOUGHTS_KEY = "thoughts:all"

    def __init__(self, redis_client: Optional[RedisClient] = None):
        """Initialize the Redis thought store.

        Args:
            redis_client: Optional Redis client. If not provided, a new one will be created.
        """
        self.redis = redis_client or RedisClient()

    def _thought_key(self, thought_id: str) -> str:
        return f"{self.THOUGHT_KEY_PREFIX}{thought_id}"

    def _reactions_key(self, thought_id: str) -> str:
        return f"{self.THOUGHT_REACTIONS_KEY_PREFIX}{thought_id}"

    async def store_thought(self, thought_data: Dict[str, Any]) -> str:
        """Store a new thought document.

        Args:
            thought_data: Thought document. Any ``reactions`` are stored in
                the reaction list.

        Returns:
            str: Thought ID.
        """
        thought_id = thought_data["id"]
        document = dict(thought_data)
        reactions = document.pop("reactions", [])

        try:
            await self.redis.set_value(self._thought_key(thought_id), document)
            for reaction in reactions:
                await self.redis.add_to_list(self._reactions_key(thought_id), reaction)
            await self.redis.add_to_set(self.ALL_THOUGHTS_KEY, thought_id)

            logger.info(f"Stored thought {thought_id}")
            return thought_id

        except Exception as e:
            logger.error(f"Failed to store thought {thought_id}: {e}")
            await self.redis.delete_key(self._thought_key(thought_id), self._reactions_key(thought_id))
            raise

    async def get_thought(self, thought_id: str) -> Optional[Dict[str, Any]]:
        """Get a thought document with its reactions.

        Args:
            thought_id: Thought ID.

        Returns:
            Optional[Dict[str, Any]]: Thought data or None if not found.
        """
        thought_data = await self.redis.get_value(self._thought_key(thought_id))
        if not thought_data:
            return None

        thought_data["reactions"] = await self.redis.get_list(self._reactions_key(thought_id))
        return thought_data

    async def get_thoughts(self, thought_ids: List[str]) -> List[Dict[str, Any]]:
        """Get several thoughts, in the given order, skipping ids with no document.

        Args:
            thought_ids: Thought IDs.

        Returns:
            List[Dict[str, Any]]: The thoughts that exist.
        """
        thoughts = []
        for thought_id in thought_ids:
            thought_data = await self.get_thought(thought_id)
            if thought_data:
                thoughts.append(thought_data)
        return thoughts

    async def list_thoughts(self) -> List[str]:
        """List all thought IDs in creation order.

        Returns:
            List[str]: List of thought IDs.
        """
        return sorted(await self.redis.get_set_members(self.ALL_THOUGHTS_KEY))

    async def update_thought(self, thought_id: str, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Update fields of a thought document.

        Args:
            thought_id: Thought ID.
            changes: Document fields to overwrite.

        Returns:
            Optional[Dict[str, Any]]: The updated thought or None if not found.
        """
        thought_key = self._thought_key(thought_id)
        existing_data = await self.redis.get_value(thought_key)
        if not existing_data:
            return None

        existing_data.update(changes)
        await self.redis.set_value(thought_key, existing_data)

        logger.info(f"Updated thought {thought_id}")
        return await self.get_thought(thought_id)

    async def delete_thought(self, thought_id: str) -> bool:
        """Delete a thought and its reactions.

        The owner's list of thought ids is left untouched.

        Args:
            thought_id: Thought ID.

        Returns:
            bool: True if the thought existed, False otherwise.
        """
        deleted = await self.redis.delete_key(
            self._thought_key(thought_id),
            self._reactions_key(thought_id)
        )
        await self.redis.remove_from_set(self.ALL_THOUGHTS_KEY, thought_id)

        if deleted:
            logger.info(f"Deleted thought {thought_id}")
        return deleted

    async def thought_exists(self, thought_id: str) -> bool:
        """Check whether a thought document exists."""
        return await self.redis.key_exists(self._thought_key(thought_id))

    async def add_reaction(self, thought_id: str, reaction_data: Dict[str, Any]) -> bool:
        """Append a reaction to a thought.

        Args:
            thought_id: Thought ID.
            reaction_data: Reaction document.

        Returns:
            bool: True if the thought exists, False otherwise.
        """
        if not await self.thought_exists(thought_id):
            return False

        await self.redis.add_to_list(self._reactions_key(thought_id), reaction_data)
        logger.info(f"Added reaction {reaction_data.get('reactionId')} to thought {thought_id}")
        return True

    async def remove_reaction(self, thought_id: str, reaction_id: str) -> bool:
        """Remove the reaction with the given id from a thought.

        Args:
            thought_id: Thought ID.
            reaction_id: Reaction ID. Unknown ids leave the reactions unchanged.

        Returns:
            bool: True if the thought exists, False otherwise.
        """
        if not await self.thought_exists(thought_id):
            return False

        reactions_key = self._reactions_key(thought_id)
        for raw_reaction in await self.redis.get_list(reactions_key, decode=False):
            if loads(raw_reaction).get("reactionId") == reaction_id:
                await self.redis.remove_from_list(reactions_key, raw_reaction, count=1)
                logger.info(f"Removed reaction {reaction_id} from thought {thought_id}")
                break
        else:
            logger.info(f"Reaction {reaction_id} not found on thought {thought_id}")

        return True
