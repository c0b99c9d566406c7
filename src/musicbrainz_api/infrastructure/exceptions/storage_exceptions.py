"""Exceptions raised by the fixture store."""


class StorageError(Exception):
    """Base exception for all storage-related errors."""

    pass


class FixtureError(StorageError):
    """Exception raised when a fixture file or its directory cannot be used."""

    def __init__(self, operation: str, path: str, reason: Exception) -> None:
        """Initialize the exception.

        Args:
            operation: What was attempted, e.g. "read" or "create directory"
            path: File or directory the operation was applied to
            reason: The underlying error
        """
        self.operation = operation
        self.path = path
        super().__init__(f"Failed to {operation} {path}: {reason}")
