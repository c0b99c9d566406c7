"""Entity schema of the MusicBrainz web service."""

from .entities import (
    ENTITY_TYPES,
    MBID,
    EntityBase,
    EntityType,
    ErrorResponse,
    is_error,
    is_valid_mbid,
)
from .includes import INCLUDES, validate_includes

__all__ = [
    "ENTITY_TYPES",
    "INCLUDES",
    "MBID",
    "EntityBase",
    "EntityType",
    "ErrorResponse",
    "is_error",
    "is_valid_mbid",
    "validate_includes",
]
