"""Client for accessing the MusicBrainz web service (WS2).

This module provides an asynchronous client that performs entity lookups and
generic GET/POST requests. All requests go through a single primitive which
waits for the shared rate-limit gate before sending and inspects the
rate-limit headers of every response.
"""

import json
import logging
import time
from collections.abc import Callable, Coroutine, Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Literal, TypeVar, overload
from urllib.parse import urlencode, urljoin, urlsplit, urlunsplit

import aiohttp

from ...config.settings import resolve_api_url, resolve_user_agent
from ...domain.entities import (
    MBID,
    Area,
    Artist,
    Collection,
    EntityBase,
    EntityType,
    GenreEntity,
    Instrument,
    Label,
    MusicEvent,
    Place,
    Recording,
    Release,
    ReleaseGroup,
    Series,
    Url,
    Work,
    is_error,
    is_valid_mbid,
)
from ...domain.includes import (
    AreaInclude,
    ArtistInclude,
    CollectionInclude,
    EventInclude,
    GenreInclude,
    InstrumentInclude,
    LabelInclude,
    PlaceInclude,
    RecordingInclude,
    ReleaseGroupInclude,
    ReleaseInclude,
    SeriesInclude,
    UrlInclude,
    WorkInclude,
)
from ..exceptions.api_exceptions import ApiError, InvalidMbidError
from .rate_limiter import RateLimitGate

T = TypeVar("T")

# Awaitable returned by ``lookup``, resolving to the entity document
Lookup = Coroutine[Any, Any, T]

# URL query parameters, entries set to None are left out
Query = Mapping[str, str | int | float | None]

# Configure logger
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RawResponse:
    """HTTP response as received from the API, before JSON decoding."""

    status: int
    headers: Mapping[str, str]
    body: bytes

    def json(self) -> Any:
        """Decode the body as JSON.

        Raises
        ------
            json.JSONDecodeError: If the body is not valid JSON
        """
        return json.loads(self.body)


def filter_query(query: Query) -> dict[str, str | int | float]:
    """Drop query parameters whose value is None."""
    return {key: value for key, value in query.items() if value is not None}


class MusicBrainzClient:
    """Asynchronous client for the MusicBrainz web service.

    Example:
        client = MusicBrainzClient()
        recording = await client.lookup(
            "recording", "94ed318a-fd7d-4abc-8491-a35e39f51dca", ["artists"]
        )
    """

    def __init__(
        self,
        api_url: str | None = None,
        user_agent: str | None = None,
        session: aiohttp.ClientSession | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the MusicBrainz API client.

        Args:
            api_url: Root URL of the API, ending with a slash. Useful to test
                against the beta server or a mirror.
            user_agent: User-Agent sent with every request
            session: Optional aiohttp session to send requests with. When
                omitted, every request opens its own short-lived session.
            clock: Returns the current Unix time in seconds
        """
        self.api_base_url = resolve_api_url(api_url)
        self._headers: Mapping[str, str] = MappingProxyType(
            {
                "Accept": "application/json",
                "User-Agent": resolve_user_agent(user_agent),
            }
        )
        self._session = session
        self._clock = clock
        self._rate_limit = RateLimitGate()

    @property
    def headers(self) -> Mapping[str, str]:
        """Headers sent with every request."""
        return self._headers

    @property
    def rate_limit(self) -> RateLimitGate:
        """Rate-limit gate shared by all requests of this client."""
        return self._rate_limit

    @overload
    def lookup(
        self,
        entity_type: Literal["area"],
        mbid: MBID,
        includes: Sequence[AreaInclude] | None = None,
    ) -> Lookup[Area]: ...
    @overload
    def lookup(
        self,
        entity_type: Literal["artist"],
        mbid: MBID,
        includes: Sequence[ArtistInclude] | None = None,
    ) -> Lookup[Artist]: ...
    @overload
    def lookup(
        self,
        entity_type: Literal["collection"],
        mbid: MBID,
        includes: Sequence[CollectionInclude] | None = None,
    ) -> Lookup[Collection]: ...
    @overload
    def lookup(
        self,
        entity_type: Literal["event"],
        mbid: MBID,
        includes: Sequence[EventInclude] | None = None,
    ) -> Lookup[MusicEvent]: ...
    @overload
    def lookup(
        self,
        entity_type: Literal["genre"],
        mbid: MBID,
        includes: Sequence[GenreInclude] | None = None,
    ) -> Lookup[GenreEntity]: ...
    @overload
    def lookup(
        self,
        entity_type: Literal["instrument"],
        mbid: MBID,
        includes: Sequence[InstrumentInclude] | None = None,
    ) -> Lookup[Instrument]: ...
    @overload
    def lookup(
        self,
        entity_type: Literal["label"],
        mbid: MBID,
        includes: Sequence[LabelInclude] | None = None,
    ) -> Lookup[Label]: ...
    @overload
    def lookup(
        self,
        entity_type: Literal["place"],
        mbid: MBID,
        includes: Sequence[PlaceInclude] | None = None,
    ) -> Lookup[Place]: ...
    @overload
    def lookup(
        self,
        entity_type: Literal["recording"],
        mbid: MBID,
        includes: Sequence[RecordingInclude] | None = None,
    ) -> Lookup[Recording]: ...
    @overload
    def lookup(
        self,
        entity_type: Literal["release"],
        mbid: MBID,
        includes: Sequence[ReleaseInclude] | None = None,
    ) -> Lookup[Release]: ...
    @overload
    def lookup(
        self,
        entity_type: Literal["release-group"],
        mbid: MBID,
        includes: Sequence[ReleaseGroupInclude] | None = None,
    ) -> Lookup[ReleaseGroup]: ...
    @overload
    def lookup(
        self,
        entity_type: Literal["series"],
        mbid: MBID,
        includes: Sequence[SeriesInclude] | None = None,
    ) -> Lookup[Series]: ...
    @overload
    def lookup(
        self,
        entity_type: Literal["url"],
        mbid: MBID,
        includes: Sequence[UrlInclude] | None = None,
    ) -> Lookup[Url]: ...
    @overload
    def lookup(
        self,
        entity_type: Literal["work"],
        mbid: MBID,
        includes: Sequence[WorkInclude] | None = None,
    ) -> Lookup[Work]: ...
    @overload
    def lookup(
        self,
        entity_type: EntityType,
        mbid: MBID,
        includes: Sequence[str] | None = None,
    ) -> Lookup[EntityBase]: ...

    def lookup(
        self,
        entity_type: EntityType,
        mbid: MBID,
        includes: Sequence[str] | None = None,
    ) -> Lookup[Any]:
        """Perform a lookup request for the given entity.

        The MBID is validated when this method is called, before a request
        is prepared, so an invalid identifier fails without awaiting.

        Args:
            entity_type: Type of the entity to look up
            mbid: MusicBrainz identifier of the entity
            includes: Include tokens requesting additional linked data

        Returns
        -------
            Awaitable resolving to the entity document

        Raises
        ------
            InvalidMbidError: If ``mbid`` is not a valid MBID
        """
        if not is_valid_mbid(mbid):
            raise InvalidMbidError(mbid)
        return self.get(f"{entity_type}/{mbid}", {"inc": "+".join(includes or [])})

    def build_url(self, endpoint: str, query: Query | None = None) -> str:
        """Resolve an endpoint against the API root and attach the query.

        Args:
            endpoint: Endpoint path relative to the API root
            query: Optional query parameters

        Returns
        -------
            The absolute request URL
        """
        url = urljoin(self.api_base_url, endpoint)
        if query is None:
            return url
        parts = urlsplit(url)
        return urlunsplit(parts._replace(query=urlencode(filter_query(query))))

    async def get(self, endpoint: str, query: Query | None = None) -> Any:
        """Fetch JSON data from the given GET endpoint.

        Only call this directly for endpoints ``lookup`` does not cover.

        Args:
            endpoint: Endpoint path relative to the API root
            query: Optional query parameters

        Returns
        -------
            The decoded JSON payload

        Raises
        ------
            ApiError: If the API answers with an error envelope
        """
        response = await self._request("GET", self.build_url(endpoint, query))
        return self._decode(response)

    async def post(self, endpoint: str, json_body: Any) -> Any:
        """Send JSON data to the given POST endpoint.

        Only call this directly for endpoints ``lookup`` does not cover.

        Args:
            endpoint: Endpoint path relative to the API root
            json_body: Data to serialize as the JSON request body

        Returns
        -------
            The decoded JSON payload

        Raises
        ------
            ApiError: If the API answers with an error envelope
        """
        response = await self._request(
            "POST",
            urljoin(self.api_base_url, endpoint),
            data=json.dumps(json_body),
            extra_headers={"Content-Type": "application/json"},
        )
        return self._decode(response)

    @staticmethod
    def _decode(response: RawResponse) -> Any:
        data = response.json()
        if is_error(data):
            raise ApiError(data["error"], response.status)
        return data

    async def _request(
        self,
        method: str,
        url: str,
        data: str | None = None,
        extra_headers: Mapping[str, str] | None = None,
    ) -> RawResponse:
        """Send a request once the rate-limit gate allows it."""
        await self._rate_limit.wait()

        headers = {**self._headers, **(extra_headers or {})}
        logger.debug(f"Making {method} request to {url}")

        if self._session is not None:
            response = await self._send(self._session, method, url, headers, data)
        else:
            async with aiohttp.ClientSession() as session:
                response = await self._send(session, method, url, headers, data)

        self._rate_limit.update(response.headers, self._clock())
        return response

    @staticmethod
    async def _send(
        session: aiohttp.ClientSession,
        method: str,
        url: str,
        headers: Mapping[str, str],
        data: str | None,
    ) -> RawResponse:
        async with session.request(
            method, url, headers=headers, data=data
        ) as response:
            body = await response.read()
            return RawResponse(
                status=response.status,
                headers=dict(response.headers),
                body=body,
            )
