"""Typed asynchronous client for the MusicBrainz web service."""

from ._version import __version__
from .infrastructure.api import MusicBrainzClient
from .infrastructure.exceptions.api_exceptions import (
    ApiError,
    InvalidIncludeError,
    InvalidMbidError,
    MusicBrainzApiError,
)

__all__ = [
    "ApiError",
    "InvalidIncludeError",
    "InvalidMbidError",
    "MusicBrainzApiError",
    "MusicBrainzClient",
    "__version__",
]
