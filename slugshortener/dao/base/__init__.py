from slugshortener.dao.base.url_record_base_dao import URLRecordBaseDAO
from slugshortener.dao.base.rate_limit_base_dao import RateLimitBaseDAO


__all__ = [
    'URLRecordBaseDAO',
    'RateLimitBaseDAO',
]
