"""Error types raised by the storage adapter."""

from __future__ import annotations


class StorageError(Exception):
    """Base class for storage adapter errors."""


class InvalidArgument(StorageError, ValueError):  # noqa: N818
    """Raised when a required argument such as the key is missing."""

    def __init__(self, msg: str = "Key is undefined") -> None:
        super().__init__(msg)


class NotConnected(StorageError, ConnectionError):  # noqa: N818
    """Raised when the adapter has no connection handle."""

    def __init__(self, msg: str = "There is no connection.") -> None:
        super().__init__(msg)


class StoreError(StorageError):
    """Raised when the store reports an error for a command.

    The original client error is kept on ``error`` and its message is used verbatim.
    """

    def __init__(self, error: Exception, command: str | None = None) -> None:
        super().__init__(str(error))
        self.error = error
        self.command = command
