"""Exceptions related to MusicBrainz API operations.

This module provides custom exceptions for the errors the client raises
itself. Transport failures (``aiohttp.ClientError``) and JSON decode
failures (``json.JSONDecodeError``) are not wrapped and reach the caller
unchanged.
"""


class MusicBrainzApiError(Exception):
    """Base exception for all errors reported by the MusicBrainz API."""

    pass


class ApiError(MusicBrainzApiError):
    """Exception raised when the API answers with an error envelope."""

    def __init__(self, message: str, status: int) -> None:
        """Initialize ApiError.

        Args:
            message: Error message supplied by the remote service
            status: HTTP status code of the response
        """
        super().__init__(message)
        self.message = message
        self.status = status

    def __str__(self) -> str:
        return f"{self.message} (HTTP {self.status})"


class InvalidMbidError(AssertionError):
    """Exception raised when a lookup is attempted with a malformed MBID.

    This is a programming error on the caller's side, so it derives from
    ``AssertionError`` rather than from ``MusicBrainzApiError``.
    """

    def __init__(self, mbid: str) -> None:
        """Initialize InvalidMbidError.

        Args:
            mbid: The rejected identifier
        """
        super().__init__(f"{mbid} is not a valid MBID")
        self.mbid = mbid


class InvalidIncludeError(ValueError):
    """Exception raised when include tokens are not allowed for an entity type."""

    def __init__(
        self, message: str, entity_type: str, invalid: list[str] | None = None
    ) -> None:
        """Initialize InvalidIncludeError.

        Args:
            message: Error message
            entity_type: Entity type the includes were requested for
            invalid: The rejected include tokens
        """
        super().__init__(message)
        self.entity_type = entity_type
        self.invalid = invalid or []
