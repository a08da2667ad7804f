from redis.exceptions import ConnectionError as RedisConnectionError

from shared.utils.redis_client import RedisClient
from shared.utils.redis_manager import RedisManager


class FakeRedis:
    def __init__(self, *args, **kwargs):
        self.store = {}
    async def ping(self):
        return True
    async def set(self, key, value):
        self.store[key] = value
        return True
    async def get(self, key):
        return self.store.get(key)
    async def delete(self, *keys):
        return sum(1 for key in keys if self.store.pop(key, None) is not None)
    async def exists(self, key):
        return 1 if key in self.store else 0
    async def rpush(self, key, value):
        self.store.setdefault(key, []).append(value)
        return len(self.store[key])
    async def lrange(self, key, start, end):
        lst = self.store.get(key, [])
        if end == -1:
            end = None
        else:
            end += 1
        return lst[start:end]
    async def lrem(self, key, count, value):
        lst = self.store.get(key, [])
        removed = 0
        while value in lst and (count == 0 or removed < count):
            lst.remove(value)
            removed += 1
        return removed
    async def hsetnx(self, key, field, value):
        h = self.store.setdefault(key, {})
        if field in h:
            return 0
        h[field] = value
        return 1
    async def hget(self, key, field):
        return self.store.get(key, {}).get(field)
    async def hdel(self, key, *fields):
        h = self.store.get(key, {})
        return sum(1 for field in fields if h.pop(field, None) is not None)
    async def sadd(self, key, *values):
        s = self.store.setdefault(key, set())
        before = len(s)
        for v in values:
            s.add(v)
        return len(s) - before
    async def smembers(self, key):
        return self.store.get(key, set())
    async def srem(self, key, *values):
        s = self.store.setdefault(key, set())
        removed = 0
        for v in values:
            if v in s:
                s.remove(v)
                removed += 1
        return removed
    async def zadd(self, key, mapping, nx=False):
        z = self.store.setdefault(key, {})
        added = 0
        for member, score in mapping.items():
            if member in z:
                if not nx:
                    z[member] = score
                continue
            z[member] = score
            added += 1
        return added
    async def zrange(self, key, start, end):
        z = self.store.get(key, {})
        members = sorted(z, key=lambda m: (z[m], m))
        return members[start:None if end == -1 else end + 1]
    async def zrem(self, key, *members):
        z = self.store.get(key, {})
        return sum(1 for m in members if z.pop(m, None) is not None)
    async def close(self):
        pass


class BrokenRedis(FakeRedis):
    """A connection whose reads fail, as if the server went away."""

    async def get(self, key):
        raise RedisConnectionError("Connection refused")
    async def smembers(self, key):
        raise RedisConnectionError("Connection refused")
    async def exists(self, key):
        raise RedisConnectionError("Connection refused")
    async def delete(self, *keys):
        raise RedisConnectionError("Connection refused")
    async def hsetnx(self, key, field, value):
        raise RedisConnectionError("Connection refused")


class UnindexedRedis(FakeRedis):
    """A connection that accepts documents but fails to update the index sets."""

    async def sadd(self, key, *values):
        raise RedisConnectionError("Connection reset by peer")


def make_manager(connection=None):
    """Build a RedisManager over an in-memory connection, without health checks."""
    client = RedisClient(connection=connection or FakeRedis())
    return RedisManager(redis_client=client, health_check_interval=None, max_retries=1)
