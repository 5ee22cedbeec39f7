"""Shared error types for the storage layer."""


class StorageError(Exception):
    """A storage backend operation failed."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class StorageConfigError(StorageError):
    """Required connection parameters for the storage backend are missing."""
