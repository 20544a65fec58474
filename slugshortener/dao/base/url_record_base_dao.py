"""Abstract base class for URL record data access objects (DAOs).

This class establishes a consistent contract for all URL record DAO implementations,
regardless of the underlying key-value storage mechanism.

Responsibilities:
    - Provide an interface for inserting, retrieving, updating, deleting and
      listing URLRecordModel objects keyed by slug.
    - Standardize error handling across multiple data store implementations.

NOTE:
    Slug uniqueness is advisory when a backend offers no conditional write.
    Implementations backed by a store with an atomic "set if absent" primitive
    must use it in insert().
"""

from abc import ABC, abstractmethod
from typing import Any

from slugshortener.models import URLRecordModel


class URLRecordBaseDAO(ABC):
    """Interface for URL record data access objects (DAOs).

    Methods:
        insert(record: URLRecordModel, **kwargs) -> URLRecordBaseDAO:
            Persist a new record.
            Raises URLRecordAlreadyExistsError if the slug is taken.

        put(record: URLRecordModel, **kwargs) -> URLRecordBaseDAO:
            Persist a record unconditionally.

        get(slug: str, **kwargs) -> URLRecordModel | None:
            Return the record or None. Never raises on a missing key.

        update(slug: str, **fields) -> URLRecordModel:
            Merge fields into an existing record, preserving slug and created.
            Raises URLRecordNotFoundError if absent.

        delete(slug: str, **kwargs) -> bool:
            Remove a record. Succeeds whether or not it existed.

        list_all(**kwargs) -> list[URLRecordModel]:
            Every record, newest first. Undecodable entries are skipped.

    All methods raise DataStoreError on connection or read/write failure.
    """

    @abstractmethod
    def insert(self, record: URLRecordModel, **kwargs) -> 'URLRecordBaseDAO':
        pass

    @abstractmethod
    def put(self, record: URLRecordModel, **kwargs) -> 'URLRecordBaseDAO':
        pass

    @abstractmethod
    def get(self, slug: str, **kwargs) -> URLRecordModel | None:
        pass

    @abstractmethod
    def update(self, slug: str, **fields: Any) -> URLRecordModel:
        pass

    @abstractmethod
    def delete(self, slug: str, **kwargs) -> bool:
        pass

    @abstractmethod
    def list_all(self, **kwargs) -> list[URLRecordModel]:
        pass

    def exists(self, slug: str, **kwargs) -> bool:
        return self.get(slug, **kwargs) is not None
