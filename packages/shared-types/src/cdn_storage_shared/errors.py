"""
Errors raised by storage operations.

Configuration problems are never raised: they degrade to a fallback and are
reported as ConfigurationDegraded events on the resolved configuration.
"""


class StorageError(Exception):
    """Base exception for storage operation errors."""

    def __init__(self, message: str, key: str | None = None):
        super().__init__(message)
        self.key = key


class UploadFailed(StorageError):
    """The object store reported no result for a write."""
    pass


class DeletionFailed(StorageError):
    """The object store reported no result for a delete."""
    pass


class NotFound(StorageError):
    """The object store returned no body for a key."""
    pass


class SigningFailed(StorageError):
    """A download URL could not be signed (missing or unusable credentials)."""
    pass


class InvalidationFailed(StorageError):
    """The CDN rejected an invalidation request. Logged by callers, never surfaced."""

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.path = path
