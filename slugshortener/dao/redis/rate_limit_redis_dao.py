"""Data Access Object (DAO) implementation for fixed-window rate limiting in Redis

Each (purpose, client id) pair owns one counter key, `rate:{purpose}:{client_id}`,
which lives exactly as long as its window. The first hit in a window creates the
key with a TTL equal to the window; later hits increment it; once the TTL runs out
the key disappears and the next hit starts a new window.

Example:
    >>> dao = RateLimitRedisDAO(prefix="app:dev")
    >>> info = dao.hit('redirect', '203.0.113.7', limit=60, window_ms=60_000)
    >>> info.count, info.allowed
    (1, True)
"""

import time

from beartype import beartype

from slugshortener.models import RateLimitInfo
from slugshortener.dao.base import RateLimitBaseDAO
from slugshortener.dao.redis.mixins import RedisClientMixin
from slugshortener.dao.redis.helpers import handle_redis_connection_error


class RateLimitRedisDAO(RedisClientMixin, RateLimitBaseDAO):
    """Redis-based fixed-window rate limit counters"""

    @handle_redis_connection_error
    @beartype
    def hit(self, purpose: str, client_id: str, limit: int, window_ms: int, **kwargs) -> RateLimitInfo:
        """Increment the counter for (purpose, client_id) and report the new state

        NOTE: The SET NX, INCR and PTTL commands are executed as an atomic operation.
              Without the transaction two concurrent requests could both observe an
              expired window and both restart it, or one could increment a key that
              expires before its TTL is read:

              (lambda 1): RateLimitRedisDAO.hit():
                          -> SET <app>:rate:<purpose>:<client> 0 NX PX <window>
                          ... interruption, key expires
              (lambda 2): RateLimitRedisDAO.hit():
                          -> SET <app>:rate:<purpose>:<client> 0 NX PX <window>
                          -> INCR <app>:rate:<purpose>:<client>   => 1
              (lambda 1): RateLimitRedisDAO.hit() continued...:
                          -> INCR <app>:rate:<purpose>:<client>   => 2, no TTL race

              INCR keeps the TTL set by SET NX, so the window is never extended by hits.

        Returns:
            RateLimitInfo: count after this hit, the limit and the window's reset time.

        Raises:
            DataStoreError:
                If Redis connectivity issues occur.
        """
        key = self.keys.rate_limit_key(purpose, client_id)

        with self.redis.pipeline(transaction=True) as pipe:
            pipe.set(key, 0, nx=True, px=window_ms)
            pipe.incr(key)
            pipe.pttl(key)
            _, count, ttl_ms = pipe.execute()

        # A counter without TTL would never reset; restart its window
        if ttl_ms is None or ttl_ms < 0:
            self.redis.pexpire(key, window_ms)
            ttl_ms = window_ms

        now_ms = int(time.time() * 1000)
        return RateLimitInfo(count=int(count), limit=limit, reset_time=now_ms + int(ttl_ms))
