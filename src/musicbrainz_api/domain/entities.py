"""Entity types and response shapes of the MusicBrainz web service.

The shapes below describe the JSON documents returned by lookups. Every key
beyond ``id`` is optional because the service only includes most of them
when the matching include token was requested.
"""

import re
from typing import Any, Literal, TypedDict, TypeGuard, get_args

EntityType = Literal[
    "area",
    "artist",
    "collection",
    "event",
    "genre",
    "instrument",
    "label",
    "place",
    "recording",
    "release",
    "release-group",
    "series",
    "url",
    "work",
]

ENTITY_TYPES: tuple[str, ...] = get_args(EntityType)

# MusicBrainz identifier
MBID = str

_MBID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)
_NIL_MBID = "00000000-0000-0000-0000-000000000000"


def is_valid_mbid(value: object) -> bool:
    """Check whether a value is a syntactically valid MBID.

    Args:
        value: Candidate identifier

    Returns
    -------
        True for a version 1-5 UUID string or the nil UUID
    """
    if not isinstance(value, str):
        return False
    return value == _NIL_MBID or _MBID_PATTERN.match(value) is not None


class ErrorResponse(TypedDict, total=False):
    """Body of a failed request, e.g. {"error": "Not Found", "help": "..."}."""

    error: str
    help: str


def is_error(payload: Any) -> TypeGuard[ErrorResponse]:
    """Check whether a decoded response body is an error envelope."""
    return isinstance(payload, dict) and isinstance(payload.get("error"), str)


LifeSpan = TypedDict(
    "LifeSpan", {"begin": str | None, "end": str | None, "ended": bool}, total=False
)

Alias = TypedDict(
    "Alias",
    {
        "name": str,
        "sort-name": str,
        "locale": str | None,
        "primary": bool | None,
        "type": str | None,
        "type-id": str | None,
        "begin": str | None,
        "end": str | None,
        "ended": bool,
    },
    total=False,
)


class Tag(TypedDict):
    name: str
    count: int


class Genre(TypedDict, total=False):
    id: str
    name: str
    count: int
    disambiguation: str


Rating = TypedDict(
    "Rating", {"value": float | None, "votes-count": int}, total=False
)


Relation = TypedDict(
    "Relation",
    {
        "type": str,
        "type-id": str,
        "direction": Literal["forward", "backward"],
        "target-type": str,
        "target-credit": str,
        "source-credit": str,
        "attributes": list[str],
        "attribute-values": dict[str, str],
        "begin": str | None,
        "end": str | None,
        "ended": bool,
    },
    total=False,
)


class EntityBase(TypedDict):
    """Fields present on every entity document."""

    id: MBID


_CommonFields = TypedDict(
    "_CommonFields",
    {
        "name": str,
        "sort-name": str,
        "disambiguation": str,
        "type": str | None,
        "type-id": str | None,
        "life-span": LifeSpan,
        "aliases": list[Alias],
        "annotation": str | None,
        "tags": list[Tag],
        "genres": list[Genre],
        "rating": Rating,
        "relations": list[Relation],
    },
    total=False,
)


class Area(EntityBase, _CommonFields, total=False):
    pass


class ArtistCredit(TypedDict, total=False):
    name: str
    joinphrase: str
    artist: "Artist"


Artist = TypedDict(
    "Artist",
    {
        "id": MBID,
        "name": str,
        "sort-name": str,
        "disambiguation": str,
        "type": str | None,
        "type-id": str | None,
        "country": str | None,
        "gender": str | None,
        "area": Area | None,
        "begin-area": Area | None,
        "end-area": Area | None,
        "life-span": LifeSpan,
        "ipis": list[str],
        "isnis": list[str],
        "aliases": list[Alias],
        "annotation": str | None,
        "tags": list[Tag],
        "genres": list[Genre],
        "rating": Rating,
        "relations": list[Relation],
        "recordings": list["Recording"],
        "releases": list["Release"],
        "release-groups": list["ReleaseGroup"],
        "works": list["Work"],
    },
    total=False,
)

Collection = TypedDict(
    "Collection",
    {
        "id": MBID,
        "name": str,
        "editor": str,
        "type": str,
        "type-id": str,
        "entity-type": str,
    },
    total=False,
)

MusicEvent = TypedDict(
    "MusicEvent",
    {
        "id": MBID,
        "name": str,
        "disambiguation": str,
        "type": str | None,
        "type-id": str | None,
        "time": str,
        "cancelled": bool,
        "setlist": str,
        "life-span": LifeSpan,
        "aliases": list[Alias],
        "annotation": str | None,
        "tags": list[Tag],
        "genres": list[Genre],
        "rating": Rating,
        "relations": list[Relation],
    },
    total=False,
)


class GenreEntity(EntityBase, total=False):
    name: str
    disambiguation: str
    aliases: list[Alias]


class Instrument(EntityBase, _CommonFields, total=False):
    description: str


Label = TypedDict(
    "Label",
    {
        "id": MBID,
        "name": str,
        "sort-name": str,
        "disambiguation": str,
        "type": str | None,
        "type-id": str | None,
        "label-code": int | None,
        "country": str | None,
        "area": Area | None,
        "life-span": LifeSpan,
        "ipis": list[str],
        "isnis": list[str],
        "aliases": list[Alias],
        "annotation": str | None,
        "tags": list[Tag],
        "genres": list[Genre],
        "rating": Rating,
        "relations": list[Relation],
        "releases": list["Release"],
    },
    total=False,
)


class Coordinates(TypedDict):
    latitude: float
    longitude: float


class Place(EntityBase, _CommonFields, total=False):
    address: str
    area: Area | None
    coordinates: Coordinates | None


Recording = TypedDict(
    "Recording",
    {
        "id": MBID,
        "title": str,
        "disambiguation": str,
        "length": int | None,
        "video": bool,
        "first-release-date": str,
        "artist-credit": list[ArtistCredit],
        "isrcs": list[str],
        "aliases": list[Alias],
        "annotation": str | None,
        "tags": list[Tag],
        "genres": list[Genre],
        "rating": Rating,
        "relations": list[Relation],
        "releases": list["Release"],
    },
    total=False,
)

Track = TypedDict(
    "Track",
    {
        "id": MBID,
        "title": str,
        "number": str,
        "position": int,
        "length": int | None,
        "recording": Recording,
        "artist-credit": list[ArtistCredit],
    },
    total=False,
)

Medium = TypedDict(
    "Medium",
    {
        "title": str,
        "position": int,
        "format": str | None,
        "format-id": str | None,
        "track-count": int,
        "track-offset": int,
        "tracks": list[Track],
        "discs": list[dict[str, Any]],
    },
    total=False,
)

LabelInfo = TypedDict(
    "LabelInfo", {"catalog-number": str | None, "label": Label | None}, total=False
)

ReleaseGroup = TypedDict(
    "ReleaseGroup",
    {
        "id": MBID,
        "title": str,
        "disambiguation": str,
        "primary-type": str | None,
        "primary-type-id": str | None,
        "secondary-types": list[str],
        "secondary-type-ids": list[str],
        "first-release-date": str,
        "artist-credit": list[ArtistCredit],
        "aliases": list[Alias],
        "annotation": str | None,
        "tags": list[Tag],
        "genres": list[Genre],
        "rating": Rating,
        "relations": list[Relation],
        "releases": list["Release"],
    },
    total=False,
)

Release = TypedDict(
    "Release",
    {
        "id": MBID,
        "title": str,
        "disambiguation": str,
        "status": str | None,
        "status-id": str | None,
        "date": str,
        "country": str | None,
        "barcode": str | None,
        "packaging": str | None,
        "quality": str,
        "asin": str | None,
        "text-representation": dict[str, str | None],
        "release-events": list[dict[str, Any]],
        "artist-credit": list[ArtistCredit],
        "label-info": list[LabelInfo],
        "media": list[Medium],
        "release-group": ReleaseGroup,
        "collections": list[Collection],
        "aliases": list[Alias],
        "annotation": str | None,
        "tags": list[Tag],
        "genres": list[Genre],
        "relations": list[Relation],
    },
    total=False,
)


class Series(EntityBase, _CommonFields, total=False):
    pass


class Url(EntityBase, total=False):
    resource: str
    relations: list[Relation]


class Work(EntityBase, total=False):
    title: str
    disambiguation: str
    type: str | None
    languages: list[str]
    iswcs: list[str]
    attributes: list[dict[str, Any]]
    aliases: list[Alias]
    annotation: str | None
    tags: list[Tag]
    genres: list[Genre]
    rating: Rating
    relations: list[Relation]
