"""Data Access Object (DAO) implementation for managing URL records in Redis

This module provides a Redis-based implementation of URLRecordBaseDAO for CRUD
operations with URLRecordModel instances. Each record is stored as a JSON string
under `urls:{slug}` (namespaced by the application prefix).

Responsibilities:
    - Insert, retrieve, update and delete URL records;
    - List every stored record, newest first, skipping corrupt entries;
    - Translate Redis failures and missing or duplicate records into appropriate DAO exceptions.

Classes:
    URLRecordRedisDAO:
        DAO for storing and retrieving URLRecordModel in a Redis datastore.

Example:
    >>> from slugshortener.models import URLRecordModel
    >>> from slugshortener.dao.redis import URLRecordRedisDAO

    >>> dao = URLRecordRedisDAO(prefix="app:dev")
    >>> record = URLRecordModel.new(url="https://example.com/page", slug="brave-otter")
    >>> dao.insert(record)
    <URLRecordRedisDAO>

    >>> dao.get("brave-otter").url
    'https://example.com/page'
"""

import logging
from typing import Any

from beartype import beartype

from slugshortener.models import URLRecordModel
from slugshortener.dao.base import URLRecordBaseDAO
from slugshortener.dao.redis.mixins import RedisClientMixin
from slugshortener.dao.redis.helpers import handle_redis_connection_error
from slugshortener.dao.exceptions import URLRecordAlreadyExistsError, URLRecordNotFoundError


logger = logging.getLogger(__name__)

# Number of keys requested per SCAN round trip when listing records
SCAN_BATCH_SIZE = 500


class URLRecordRedisDAO(RedisClientMixin, URLRecordBaseDAO):
    """Redis-based Data Access Object (DAO) for managing URL records

    This class implements the URLRecordBaseDAO interface using Redis as a data store.

    Attributes (see RedisClientMixin):
        redis (redis.Redis):
            Redis client used to communicate with the Redis datastore.
        keys (RedisKeySchema):
            Key schema helper for generating namespaced Redis keys.
    """

    @handle_redis_connection_error
    @beartype
    def insert(self, record: URLRecordModel, **kwargs) -> 'URLRecordRedisDAO':
        """Insert a new URL record into Redis

        The write uses SET NX, so Redis itself refuses a second record with the
        same slug. This closes the window between the caller's existence check
        and the write.

        Raises:
            URLRecordAlreadyExistsError:
                If a record with the same slug already exists.
            DataStoreError:
                If a Redis connection issue occurs.
        """
        key = self.keys.url_record_key(record.slug)
        if not self.redis.set(key, record.to_json(), nx=True):
            raise URLRecordAlreadyExistsError(f"URL record with slug '{record.slug}' already exists.")
        return self

    @handle_redis_connection_error
    @beartype
    def put(self, record: URLRecordModel, **kwargs) -> 'URLRecordRedisDAO':
        self.redis.set(self.keys.url_record_key(record.slug), record.to_json())
        return self

    @handle_redis_connection_error
    @beartype
    def get(self, slug: str, **kwargs) -> URLRecordModel | None:
        """Retrieve a stored URL record by slug

        Returns:
            URLRecordModel | None:
                The record, or None if the slug is unknown or its stored value is corrupt.

        Raises:
            DataStoreError:
                If Redis connectivity issues occur.
        """
        raw = self.redis.get(self.keys.url_record_key(slug))
        if raw is None:
            return None

        try:
            return URLRecordModel.from_json(raw)
        except ValueError:
            logger.warning('Skipping malformed URL record.', extra={'slug': slug})
            return None

    @handle_redis_connection_error
    @beartype
    def update(self, slug: str, **fields: Any) -> URLRecordModel:
        """Merge `fields` into an existing record

        `slug` and `created` are never overwritten and `updated` is refreshed.
        The write uses SET XX so a record deleted between the read and the write
        is not resurrected.

        Raises:
            URLRecordNotFoundError:
                If no record exists for `slug`.
            DataStoreError:
                If Redis connectivity issues occur.

        Example:
            >>> dao.update('brave-otter', url='https://example.com/new')
            URLRecordModel(url='https://example.com/new', slug='brave-otter', ...)
        """
        existing = self.get(slug)
        if existing is None:
            raise URLRecordNotFoundError(f"URL record with slug '{slug}' not found.")

        updated = existing.with_changes(**fields)
        if not self.redis.set(self.keys.url_record_key(slug), updated.to_json(), xx=True):
            raise URLRecordNotFoundError(f"URL record with slug '{slug}' not found.")
        return updated

    @handle_redis_connection_error
    @beartype
    def delete(self, slug: str, **kwargs) -> bool:
        """Delete a URL record

        Returns:
            bool: True if a record was removed, False if there was nothing to remove.
        """
        return bool(self.redis.delete(self.keys.url_record_key(slug)))

    @handle_redis_connection_error
    def list_all(self, **kwargs) -> list[URLRecordModel]:
        """List every stored URL record, newest first

        Keys are discovered with SCAN (non-blocking, unlike KEYS) and values are
        fetched with a single MGET. Entries which fail to deserialize are dropped.

        Returns:
            list[URLRecordModel]: records sorted by `created` descending.
        """
        keys = list(self.redis.scan_iter(match=self.keys.url_records_pattern(), count=SCAN_BATCH_SIZE))
        if not keys:
            return []

        records = []
        for key, raw in zip(keys, self.redis.mget(keys)):
            if raw is None:  # expired or deleted between SCAN and MGET
                continue
            try:
                records.append(URLRecordModel.from_json(raw))
            except ValueError:
                logger.warning('Skipping malformed URL record.', extra={'key': key})

        return sorted(records, key=lambda r: r.created, reverse=True)
