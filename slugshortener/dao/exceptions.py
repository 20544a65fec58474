"""Exceptions related to Data Access Objects (DAO) operations.

Classes:
    DAOError:
        Generic base class for DAO-related exceptions.

    URLRecordNotFoundError:
        Raised when a URLRecordModel is not found in the data store.

    URLRecordAlreadyExistsError:
        Raised when attempting to insert a URLRecordModel whose slug is taken.

    DataStoreError:
        Raised when there is an error in the data store (e.g., connection issues, time, OOM, etc.).

Example:
    >>> from slugshortener.dao.exceptions import URLRecordNotFoundError
    >>> raise URLRecordNotFoundError("URL record with slug 'brave-otter' not found.")
    Traceback (most recent call last):
        ...
    slugshortener.dao.exceptions.URLRecordNotFoundError: URL record with slug 'brave-otter' not found.
"""


class DAOError(Exception):
    """Generic base class for DAO-related exceptions."""

    pass


class URLRecordNotFoundError(DAOError):
    """Exception raised when a URLRecordModel is not found in the data store."""

    pass


class URLRecordAlreadyExistsError(DAOError):
    """Exception raised when attempting to insert a URLRecordModel that already exists in the data store."""

    pass


class DataStoreError(DAOError):
    """Exception raised when there is an error in the data store.

    e.g. connection issues, timeouts, OOM, etc.
    """

    pass
