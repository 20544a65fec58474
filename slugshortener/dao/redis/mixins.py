"""Shared Redis connection for the URL record and rate limit DAOs.

One invocation of the router talks to a single Redis database: the URL record
DAO opens the connection from the `redis` section of the application settings,
and the rate limit DAO reuses that client instead of opening its own.

    >>> url_dao = URLRecordRedisDAO(**settings.redis, prefix=settings.prefix)
    >>> rate_limit_dao = RateLimitRedisDAO(redis_client=url_dao.redis, prefix=settings.prefix)

Every DAO pings Redis on construction, so an unreachable backend fails the
request before any handler logic runs.
"""

from typing import Optional

import redis

from slugshortener.dao.redis.redis_key_schema import RedisKeySchema
from slugshortener.dao.exceptions import DataStoreError


def describe_connection(client: redis.Redis) -> str:
    """Return 'host:port/db' for the client's connection, for error messages."""
    info = client.connection_pool.connection_kwargs
    return f'{info.get("host")}:{info.get("port")}/{info.get("db")}'


class RedisClientMixin:
    """Give a DAO its Redis client (`self.redis`) and key schema (`self.keys`).

    Connection keyword arguments mirror the AppConfig `redis` section with a
    `redis_` prefix, e.g. `{"host": "cache", "port": 6379}` becomes
    `redis_host='cache', redis_port=6379`.
    """

    def __init__(
        self,
        redis_host: Optional[str] = 'localhost',
        redis_port: Optional[int] = 6379,
        redis_db: Optional[int] = 0,
        redis_decode_responses: Optional[bool] = True,
        redis_username: Optional[str] = None,
        redis_password: Optional[str] = None,
        redis_ssl: Optional[bool] = False,
        redis_socket_timeout: Optional[float] = 2.0,
        redis_client: Optional[redis.Redis] = None,
        prefix: Optional[str] = None,
    ):
        """Connect (or attach) to Redis and check that it answers

        Args:
            redis_client (Optional[redis.Redis]):
                Client to share with another DAO. When given, every other
                connection argument is ignored.
            redis_socket_timeout (Optional[float]):
                Seconds to wait for a connection or a reply. Keeps a stalled
                Redis from holding the request until the Lambda times out.
            prefix (Optional[str]):
                Key namespace, `{APP_NAME}:{APP_ENV}`.

        Raises:
            DataStoreError:
                If Redis does not answer the PING.
        """
        if redis_client is None:
            redis_client = redis.Redis(
                host=redis_host,
                port=int(redis_port),
                db=int(redis_db),
                decode_responses=redis_decode_responses,
                username=redis_username,
                password=redis_password,
                ssl=bool(redis_ssl),
                socket_timeout=redis_socket_timeout,
                socket_connect_timeout=redis_socket_timeout,
            )

        self.redis = redis_client
        self.keys = RedisKeySchema(prefix=prefix)

        self._healthcheck()

    def _healthcheck(self, raise_error: bool = True) -> bool:
        """PING Redis; return False (or raise DataStoreError) if it is unreachable."""
        try:
            self.redis.ping()
        except (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError) as e:
            if raise_error:
                raise DataStoreError(
                    f"Can't connect to Redis at {describe_connection(self.redis)}. Check the provided configuration parameters."
                ) from e
            return False
        return True
