"""Include vocabularies of the MusicBrainz lookup endpoints.

Each entity type only accepts a specific set of ``inc`` tokens. The
``Literal`` aliases let a type checker reject invalid tokens passed to
``MusicBrainzClient.lookup``; ``validate_includes`` performs the same check
at runtime for input that never saw a type checker, such as CLI arguments.
"""

from collections.abc import Iterable, Mapping
from typing import Literal, get_args

from ..infrastructure.exceptions.api_exceptions import InvalidIncludeError
from .entities import ENTITY_TYPES

RelationshipInclude = Literal[
    "area-rels",
    "artist-rels",
    "event-rels",
    "genre-rels",
    "instrument-rels",
    "label-rels",
    "place-rels",
    "recording-rels",
    "release-rels",
    "release-group-rels",
    "series-rels",
    "url-rels",
    "work-rels",
]

MiscInclude = Literal[
    "aliases",
    "annotation",
    "tags",
    "genres",
    "ratings",
    "user-tags",
    "user-genres",
    "user-ratings",
]

AreaInclude = Literal[RelationshipInclude, MiscInclude]
ArtistInclude = Literal[
    RelationshipInclude,
    MiscInclude,
    "recordings",
    "releases",
    "release-groups",
    "works",
    "various-artists",
    "discids",
    "media",
    "isrcs",
]
CollectionInclude = Literal["user-collections"]
EventInclude = Literal[RelationshipInclude, MiscInclude]
GenreInclude = Literal["aliases"]
InstrumentInclude = Literal[RelationshipInclude, MiscInclude]
LabelInclude = Literal[RelationshipInclude, MiscInclude, "releases", "discids", "media"]
PlaceInclude = Literal[RelationshipInclude, MiscInclude]
RecordingInclude = Literal[
    RelationshipInclude,
    MiscInclude,
    "artists",
    "releases",
    "release-groups",
    "isrcs",
    "artist-credits",
    "discids",
    "media",
]
ReleaseInclude = Literal[
    RelationshipInclude,
    MiscInclude,
    "artists",
    "collections",
    "labels",
    "recordings",
    "release-groups",
    "artist-credits",
    "discids",
    "media",
    "isrcs",
    "recording-level-rels",
    "release-group-level-rels",
    "work-level-rels",
]
ReleaseGroupInclude = Literal[
    RelationshipInclude,
    MiscInclude,
    "artists",
    "releases",
    "artist-credits",
    "discids",
    "media",
]
SeriesInclude = Literal[RelationshipInclude, MiscInclude]
UrlInclude = Literal[RelationshipInclude]
WorkInclude = Literal[RelationshipInclude, MiscInclude]

INCLUDES: Mapping[str, frozenset[str]] = {
    "area": frozenset(get_args(AreaInclude)),
    "artist": frozenset(get_args(ArtistInclude)),
    "collection": frozenset(get_args(CollectionInclude)),
    "event": frozenset(get_args(EventInclude)),
    "genre": frozenset(get_args(GenreInclude)),
    "instrument": frozenset(get_args(InstrumentInclude)),
    "label": frozenset(get_args(LabelInclude)),
    "place": frozenset(get_args(PlaceInclude)),
    "recording": frozenset(get_args(RecordingInclude)),
    "release": frozenset(get_args(ReleaseInclude)),
    "release-group": frozenset(get_args(ReleaseGroupInclude)),
    "series": frozenset(get_args(SeriesInclude)),
    "url": frozenset(get_args(UrlInclude)),
    "work": frozenset(get_args(WorkInclude)),
}


def validate_includes(entity_type: str, includes: Iterable[str] | None) -> list[str]:
    """Check include tokens against the vocabulary of an entity type.

    Args:
        entity_type: The entity type being looked up
        includes: Requested include tokens

    Returns
    -------
        The include tokens as a list, in their original order

    Raises
    ------
        InvalidIncludeError: If the entity type is unknown or a token is not
            allowed for it
    """
    if entity_type not in ENTITY_TYPES:
        raise InvalidIncludeError(
            f"Unknown entity type: {entity_type}", entity_type=entity_type
        )

    requested = list(includes or [])
    allowed = INCLUDES[entity_type]
    invalid = [token for token in requested if token not in allowed]
    if invalid:
        raise InvalidIncludeError(
            f"Includes not allowed for {entity_type}: {', '.join(invalid)}",
            entity_type=entity_type,
            invalid=invalid,
        )
    return requested
