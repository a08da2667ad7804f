"""
Redis Manager for handling connections and providing access to the user and thought stores.
"""

import logging
import asyncio
from typing import Optional

from shared.utils.redis_client import RedisClient
from shared.utils.redis_user_store import RedisUserStore
from shared.utils.redis_thought_store import RedisThoughtStore

logger = logging.getLogger(__name__)

class RedisManager:
    """Redis Manager for handling connections and providing access to all Redis stores."""

    def __init__(
        self,
        host: str = None,
        port: int = None,
        db: int = None,
        password: str = None,
        redis_client: Optional[RedisClient] = None,
        health_check_interval: Optional[int] = 30,
        max_retries: int = 5,
        retry_delay: float = 1
    ):
        """Initialize the Redis manager.

        Args:
            host: Redis host.
            port: Redis port.
            db: Redis db.
            password: Redis password.
            redis_client: Optional ready-made client, used instead of creating one on connect.
            health_check_interval: Seconds between health checks, or None to disable them.
            max_retries: Connection attempts before giving up.
            retry_delay: Initial delay between attempts in seconds; doubles after each failure.
        """
        self.host = host
        self.port = port
        self.db = db
        self.password = password

        self.redis_client = redis_client
        self.user_store = None
        self.thought_store = None

        self._provided_client = redis_client
        self._max_retries = max_retries
        self._retry_delay = retry_delay
        self._health_check_interval = health_check_interval
        self._health_check_task = None

    async def connect(self) -> bool:
        """Connect to Redis and initialize all stores.

        Returns:
            bool: True if successful, False otherwise.
        """
        delay = self._retry_delay
        for attempt in range(1, self._max_retries + 1):
            try:
                logger.info(f"Attempting to connect to Redis (attempt {attempt}/{self._max_retries})...")

                # Create Redis client
                self.redis_client = self._provided_client or RedisClient(
                    host=self.host,
                    port=self.port,
                    db=self.db,
                    password=self.password
                )

                # Test connection
                if not await self.redis_client.ping():
                    raise ConnectionError("Failed to ping Redis")

                # Initialize stores
                self.user_store = RedisUserStore(self.redis_client)
                self.thought_store = RedisThoughtStore(self.redis_client)

                # Start health check
                self._start_health_check()

                logger.info("Successfully connected to Redis")
                return True

            except Exception as e:
                logger.error(f"Failed to connect to Redis: {e}")

                if attempt < self._max_retries:
                    logger.info(f"Retrying in {delay} seconds...")
                    await asyncio.sleep(delay)
                    # Exponential backoff
                    delay *= 2
                else:
                    logger.error("Max retries reached, failed to connect to Redis")
                    return False

    async def disconnect(self) -> None:
        """Disconnect from Redis."""
        self._stop_health_check()

        if self.redis_client:
            await self.redis_client.close()
            self.redis_client = None
            self.user_store = None
            self.thought_store = None

            logger.info("Disconnected from Redis")

    def _start_health_check(self) -> None:
        """Start Redis health check."""
        if not self._health_check_interval:
            return

        if self._health_check_task:
            self._stop_health_check()

        self._health_check_task = asyncio.create_task(self._health_check_loop())

    def _stop_health_check(self) -> None:
        """Stop Redis health check."""
        if self._health_check_task:
            self._health_check_task.cancel()
            self._health_check_task = None

    async def _health_check_loop(self) -> None:
        """Health check loop."""
        try:
            while True:
                await asyncio.sleep(self._health_check_interval)

                try:
                    if await self.redis_client.ping():
                        logger.debug("Redis health check passed")
                        continue
                    logger.warning("Redis health check failed, attempting to reconnect...")
                except Exception as e:
                    logger.error(f"Error during Redis health check: {e}")
                break
        except asyncio.CancelledError:
            logger.info("Redis health check stopped")
            return

        # connect() starts a fresh health check task on success
        self._health_check_task = None
        await self.connect()

    @property
    def is_connected(self) -> bool:
        """Whether the stores are available."""
        return self.redis_client is not None and self.user_store is not None

    @property
    def users(self) -> Optional[RedisUserStore]:
        """Get the user store.

        Returns:
            Optional[RedisUserStore]: The user store or None if not connected.
        """
        return self.user_store

    @property
    def thoughts(self) -> Optional[RedisThoughtStore]:
        """Get the thought store.

        Returns:
            Optional[RedisThoughtStore]: The thought store or None if not connected.
        """
        return self.thought_store
