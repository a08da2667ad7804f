"""
Shared utility modules.
"""

from shared.utils.redis_client import RedisClient
from shared.utils.redis_user_store import RedisUserStore
from shared.utils.redis_thought_store import RedisThoughtStore
from shared.utils.redis_manager import RedisManager
