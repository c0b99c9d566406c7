"""API client module for the MusicBrainz web service.

This package provides the asynchronous client and the rate-limit gate that
throttles its requests.
"""

from musicbrainz_api.infrastructure.api.client import (
    MusicBrainzClient,
    Query,
    RawResponse,
    filter_query,
)
from musicbrainz_api.infrastructure.api.rate_limiter import RateLimitGate

__all__ = [
    "MusicBrainzClient",
    "Query",
    "RateLimitGate",
    "RawResponse",
    "filter_query",
]
