from slugshortener.dao.redis.redis_key_schema import RedisKeySchema
from slugshortener.dao.redis.mixins import RedisClientMixin
from slugshortener.dao.redis.url_record_redis_dao import URLRecordRedisDAO
from slugshortener.dao.redis.rate_limit_redis_dao import RateLimitRedisDAO


__all__ = [
    'RedisKeySchema',
    'RedisClientMixin',
    'URLRecordRedisDAO',
    'RateLimitRedisDAO',
]
