"""Error kinds raised by record stores.

The set is closed: the HTTP layer maps each class to a status code and treats
anything else as a server error.

Classes:
    RecordStoreError:
        Base class for all record store errors.

    InvalidRecordError:
        Raised when a record fails validation (empty short, bad URL, ...).

    UnavailableShortError:
        Raised when a short is already taken by another record.

    IDNotFoundError:
        Raised when no record has the requested ID.

    ShortNotFoundError:
        Raised when no record has the requested short.

    FullNotFoundError:
        Raised when no record points at the requested full URL.

    DataStoreError:
        Raised when the underlying database fails (connection, driver, ...).

Example:
    >>> from shortener.exceptions import IDNotFoundError
    >>> raise IDNotFoundError()
    Traceback (most recent call last):
        ...
    shortener.exceptions.IDNotFoundError: record with the given ID not found
"""

from typing import Optional


class RecordStoreError(Exception):
    """Base class for record store errors."""

    message = "record store error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)


class InvalidRecordError(RecordStoreError):
    """Exception raised when a record does not pass validation."""

    message = "invalid record"


class UnavailableShortError(RecordStoreError):
    """Exception raised when the short is already used by another record."""

    message = "short is not available"


class IDNotFoundError(RecordStoreError):
    """Exception raised when a record with the given ID does not exist."""

    message = "record with the given ID not found"


class ShortNotFoundError(RecordStoreError):
    """Exception raised when a record with the given short does not exist."""

    message = "record with the given short not found"


class FullNotFoundError(RecordStoreError):
    """Exception raised when a record with the given full URL does not exist."""

    message = "record with the given full URL not found"


class DataStoreError(RecordStoreError):
    """Exception raised when there is an error in the database.

    e.g. lost connections, driver errors, timeouts.
    """

    message = "datastore failure"
