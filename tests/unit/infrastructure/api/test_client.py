"""Unit tests for the MusicBrainzClient class."""

import asyncio
import json
import time
import unittest
from typing import Any
from unittest.mock import patch
from urllib.parse import parse_qs, urlsplit

import aiohttp
import pytest

from musicbrainz_api.infrastructure.api.client import (
    MusicBrainzClient,
    RawResponse,
    filter_query,
)
from musicbrainz_api.infrastructure.exceptions.api_exceptions import (
    ApiError,
    InvalidMbidError,
)

RECORDING_MBID = "94ed318a-fd7d-4abc-8491-a35e39f51dca"

# Fixed "now" for the client, one fifth of a second before RESET_AT
NOW = 1_700_000_000 - 0.2
RESET_AT = "1700000000"
COOLDOWN = 0.2


class FakeResponse:
    """Minimal stand-in for an aiohttp response used as a context manager."""

    def __init__(
        self,
        body: bytes,
        status: int = 200,
        headers: dict[str, str] | None = None,
        release: asyncio.Event | None = None,
    ) -> None:
        self.body = body
        self.status = status
        self.headers = headers or {}
        self.release = release

    async def __aenter__(self) -> "FakeResponse":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        return None

    async def read(self) -> bytes:
        if self.release is not None:
            await self.release.wait()
        return self.body


def json_response(
    payload: Any,
    status: int = 200,
    headers: dict[str, str] | None = None,
    release: asyncio.Event | None = None,
) -> FakeResponse:
    return FakeResponse(json.dumps(payload).encode(), status, headers, release)


def cooldown_headers() -> dict[str, str]:
    return {"X-RateLimit-Remaining": "0", "X-RateLimit-Reset": RESET_AT}


class FakeSession:
    """Records outgoing requests and replays canned responses in order."""

    def __init__(self, *responses: FakeResponse) -> None:
        self.responses = list(responses)
        self.requests: list[dict[str, Any]] = []
        self.sent_at: list[float] = []

    async def __aenter__(self) -> "FakeSession":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        return None

    def request(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | None = None,
        data: str | None = None,
    ) -> FakeResponse:
        self.requests.append(
            {"method": method, "url": url, "headers": headers, "data": data}
        )
        self.sent_at.append(asyncio.get_running_loop().time())
        return self.responses.pop(0)


class TestMusicBrainzClientConstruction(unittest.TestCase):
    """Test client construction and request URL building."""

    def test_defaults(self) -> None:
        """Test the default API root and the fixed headers."""
        with patch.dict("os.environ", {}, clear=True):
            client = MusicBrainzClient()

        self.assertEqual(client.api_base_url, "https://musicbrainz.org/ws/2/")
        self.assertEqual(client.headers["Accept"], "application/json")
        self.assertTrue(client.headers["User-Agent"].startswith("musicbrainz-api/"))
        self.assertFalse(client.rate_limit.is_cooling_down)

    def test_custom_api_url_and_user_agent(self) -> None:
        """Test overriding the API root and the User-Agent."""
        client = MusicBrainzClient(
            api_url="https://beta.musicbrainz.org/ws/2/", user_agent="tests/1.0"
        )

        self.assertEqual(client.api_base_url, "https://beta.musicbrainz.org/ws/2/")
        self.assertEqual(client.headers["User-Agent"], "tests/1.0")

    def test_headers_are_read_only(self) -> None:
        """Test that the fixed headers cannot be modified after construction."""
        client = MusicBrainzClient()

        with self.assertRaises(TypeError):
            client.headers["Accept"] = "text/html"  # type: ignore[index]

    def test_build_url_resolves_relative_to_root(self) -> None:
        """Test that endpoints are resolved against the API root."""
        client = MusicBrainzClient(api_url="https://example.org/ws/2/")

        self.assertEqual(
            client.build_url("artist/abc"), "https://example.org/ws/2/artist/abc"
        )
        self.assertEqual(
            client.build_url("genre/all", {"limit": 10, "offset": None}),
            "https://example.org/ws/2/genre/all?limit=10",
        )

    def test_build_url_drops_none_values(self) -> None:
        """Test that query entries set to None are not serialized."""
        client = MusicBrainzClient(api_url="https://example.org/ws/2/")

        url = client.build_url("release", {"query": "x", "status": None})

        self.assertNotIn("status", url)
        self.assertNotIn("None", url)
        self.assertEqual(parse_qs(urlsplit(url).query), {"query": ["x"]})


def test_filter_query_is_idempotent() -> None:
    """Test that filtering a query twice equals filtering it once."""
    query = {"inc": "aliases", "limit": 5, "offset": None, "fmt": None}

    once = filter_query(query)

    assert once == {"inc": "aliases", "limit": 5}
    assert filter_query(once) == once


def test_raw_response_json_decodes_body() -> None:
    """Test decoding a raw response body."""
    response = RawResponse(status=200, headers={}, body=b'{"id": "x"}')

    assert response.json() == {"id": "x"}


@pytest.mark.parametrize(
    "mbid",
    [
        "",
        "not-a-uuid",
        "94ed318a-fd7d-4abc-8491-a35e39f51dc",
        "94ed318afd7d4abc8491a35e39f51dca",
        "{94ed318a-fd7d-4abc-8491-a35e39f51dca}",
        "94ed318a-fd7d-4abc-8491-a35e39f51dcaX",
        "g4ed318a-fd7d-4abc-8491-a35e39f51dca",
    ],
)
def test_lookup_rejects_malformed_mbid_before_request(mbid: str) -> None:
    """Test that lookup fails at call time without sending anything."""
    session = FakeSession()
    client = MusicBrainzClient(session=session)  # type: ignore[arg-type]

    with pytest.raises(InvalidMbidError) as excinfo:
        client.lookup("recording", mbid)

    assert excinfo.value.mbid == mbid
    assert isinstance(excinfo.value, AssertionError)
    assert session.requests == []


class TestMusicBrainzClientRequests(unittest.IsolatedAsyncioTestCase):
    """Test lookup, get and post against a fake session."""

    def make_client(self, *responses: FakeResponse) -> MusicBrainzClient:
        self.session = FakeSession(*responses)
        return MusicBrainzClient(
            api_url="https://musicbrainz.org/ws/2/",
            session=self.session,  # type: ignore[arg-type]
            clock=lambda: NOW,
        )

    async def test_lookup_without_includes(self) -> None:
        """Test the request built for a lookup without includes."""
        payload = {"id": RECORDING_MBID, "title": "Example", "length": 123456}
        client = self.make_client(json_response(payload))

        result = await client.lookup("recording", RECORDING_MBID)

        self.assertEqual(result, payload)
        request = self.session.requests[0]
        self.assertEqual(request["method"], "GET")
        self.assertEqual(
            request["url"],
            f"https://musicbrainz.org/ws/2/recording/{RECORDING_MBID}?inc=",
        )
        self.assertEqual(request["headers"]["Accept"], "application/json")
        self.assertIsNone(request["data"])

    async def test_lookup_joins_includes_with_plus(self) -> None:
        """Test that include tokens are joined with '+' into the inc parameter."""
        client = self.make_client(json_response({"id": RECORDING_MBID}))

        await client.lookup("recording", RECORDING_MBID, ["artists", "isrcs"])

        parts = urlsplit(self.session.requests[0]["url"])
        self.assertEqual(parts.path, f"/ws/2/recording/{RECORDING_MBID}")
        self.assertEqual(parse_qs(parts.query), {"inc": ["artists+isrcs"]})

    async def test_lookup_accepts_uppercase_and_nil_mbid(self) -> None:
        """Test that valid MBIDs in other forms are accepted."""
        client = self.make_client(
            json_response({"id": "a"}), json_response({"id": "b"})
        )

        await client.lookup("artist", RECORDING_MBID.upper())
        await client.lookup("artist", "00000000-0000-0000-0000-000000000000")

        self.assertEqual(len(self.session.requests), 2)

    async def test_lookup_error_envelope(self) -> None:
        """Test that an error envelope raises ApiError with message and status."""
        client = self.make_client(json_response({"error": "Not Found"}, status=404))

        with self.assertRaises(ApiError) as ctx:
            await client.lookup("recording", RECORDING_MBID)

        self.assertEqual(ctx.exception.message, "Not Found")
        self.assertEqual(ctx.exception.status, 404)
        self.assertIn("404", str(ctx.exception))

    async def test_get_error_envelope(self) -> None:
        """Test that get raises ApiError for an error envelope."""
        client = self.make_client(
            json_response({"error": "Invalid inc parameter", "help": "..."}, 400)
        )

        with self.assertRaises(ApiError) as ctx:
            await client.get("artist", {"query": "x"})

        self.assertEqual(ctx.exception.message, "Invalid inc parameter")
        self.assertEqual(ctx.exception.status, 400)

    async def test_get_returns_payload_for_non_error_shapes(self) -> None:
        """Test that payloads without a string error field pass through."""
        payloads = [[1, 2, 3], {"error": None, "id": "x"}, {"errors": ["a"]}]
        client = self.make_client(*(json_response(p) for p in payloads))

        for payload in payloads:
            with self.subTest(payload=payload):
                self.assertEqual(await client.get("anything"), payload)

    async def test_get_filters_none_query_values(self) -> None:
        """Test that None query values never reach the wire."""
        client = self.make_client(json_response({"artists": []}))

        await client.get("artist", {"query": "Björk", "limit": 5, "offset": None})

        query = parse_qs(urlsplit(self.session.requests[0]["url"]).query)
        self.assertEqual(query, {"query": ["Björk"], "limit": ["5"]})

    async def test_post_sends_json_body(self) -> None:
        """Test that post serializes the body and sends it with POST."""
        client = self.make_client(json_response({"ok": True}))
        body = {"collection": ["a", "b"]}

        result = await client.post("collection/abc/releases", body)

        self.assertEqual(result, {"ok": True})
        request = self.session.requests[0]
        self.assertEqual(request["method"], "POST")
        self.assertEqual(
            request["url"], "https://musicbrainz.org/ws/2/collection/abc/releases"
        )
        self.assertEqual(json.loads(request["data"]), body)
        self.assertEqual(request["headers"]["Accept"], "application/json")
        self.assertEqual(request["headers"]["Content-Type"], "application/json")

    async def test_post_error_envelope(self) -> None:
        """Test that post raises ApiError for an error envelope."""
        client = self.make_client(json_response({"error": "Unauthorized"}, 401))

        with self.assertRaises(ApiError) as ctx:
            await client.post("collection/abc/releases", {})

        self.assertEqual(ctx.exception.status, 401)

    async def test_invalid_json_propagates(self) -> None:
        """Test that a body that is not JSON raises the decoder's error."""
        client = self.make_client(FakeResponse(b"<html>busy</html>", status=503))

        with self.assertRaises(json.JSONDecodeError):
            await client.get("artist")

    async def test_transport_error_propagates(self) -> None:
        """Test that transport errors are not translated."""
        client = self.make_client()

        def fail(*args: Any, **kwargs: Any) -> FakeResponse:
            raise aiohttp.ClientConnectionError("unreachable")

        self.session.request = fail  # type: ignore[method-assign]

        with self.assertRaises(aiohttp.ClientConnectionError):
            await client.get("artist")

    async def test_short_lived_session_without_injected_session(self) -> None:
        """Test that a session is opened per request when none is injected."""
        session = FakeSession(json_response({"id": "x"}))
        client = MusicBrainzClient(api_url="https://example.org/ws/2/")

        with patch(
            "musicbrainz_api.infrastructure.api.client.aiohttp.ClientSession",
            return_value=session,
        ) as session_cls:
            result = await client.get("area/x")

        self.assertEqual(result, {"id": "x"})
        session_cls.assert_called_once_with()
        self.assertEqual(session.requests[0]["url"], "https://example.org/ws/2/area/x")


class TestMusicBrainzClientRateLimit(unittest.IsolatedAsyncioTestCase):
    """Test throttling driven by the rate-limit response headers."""

    def make_client(self, *responses: FakeResponse) -> MusicBrainzClient:
        self.session = FakeSession(*responses)
        return MusicBrainzClient(
            session=self.session,  # type: ignore[arg-type]
            clock=lambda: NOW,
        )

    async def test_exhausted_units_delay_next_request(self) -> None:
        """Test that the next send waits until the reset time."""
        client = self.make_client(
            json_response({"id": "a"}, headers=cooldown_headers()),
            json_response({"id": "b"}),
        )

        await client.lookup("recording", RECORDING_MBID)
        self.assertTrue(client.rate_limit.is_cooling_down)
        await client.lookup("recording", RECORDING_MBID)

        waited = self.session.sent_at[1] - self.session.sent_at[0]
        self.assertGreaterEqual(waited, COOLDOWN * 0.9)

    async def test_expired_cooldown_does_not_delay(self) -> None:
        """Test that a request after the window is sent immediately."""
        client = self.make_client(
            json_response({"id": "a"}, headers=cooldown_headers()),
            json_response({"id": "b"}),
        )

        await client.get("artist")
        await asyncio.sleep(COOLDOWN + 0.05)
        started = asyncio.get_running_loop().time()
        await client.get("artist")

        self.assertLess(self.session.sent_at[1] - started, 0.05)

    async def test_remaining_units_do_not_delay(self) -> None:
        """Test that remaining units above zero install no cooldown."""
        headers = {"X-RateLimit-Remaining": "3", "X-RateLimit-Reset": RESET_AT}
        client = self.make_client(
            json_response({"id": "a"}, headers=headers),
            json_response({"id": "b"}),
        )

        await client.get("artist")
        await client.get("artist")

        self.assertFalse(client.rate_limit.is_cooling_down)
        self.assertLess(self.session.sent_at[1] - self.session.sent_at[0], 0.05)

    async def test_waiting_requests_are_delayed_together(self) -> None:
        """Test that concurrent lookups parked at the gate all wait."""
        client = self.make_client(
            json_response({"id": "a"}, headers=cooldown_headers()),
            json_response({"id": "b"}),
            json_response({"id": "c"}),
            json_response({"id": "d"}),
        )

        await client.lookup("recording", RECORDING_MBID)
        first_sent = self.session.sent_at[0]
        results = await asyncio.gather(
            client.lookup("recording", RECORDING_MBID),
            client.lookup("artist", RECORDING_MBID),
        )

        self.assertEqual(sorted(r["id"] for r in results), ["b", "c"])
        for sent in self.session.sent_at[1:3]:
            self.assertGreaterEqual(sent - first_sent, COOLDOWN * 0.9)

        started = asyncio.get_running_loop().time()
        await client.lookup("work", RECORDING_MBID)
        self.assertLess(self.session.sent_at[3] - started, 0.05)

    async def test_request_past_the_gate_is_not_delayed(self) -> None:
        """Test that an in-flight request ignores a cooldown installed meanwhile."""
        release = asyncio.Event()
        client = self.make_client(
            json_response({"id": "slow"}, release=release),
            json_response({"id": "fast"}, headers=cooldown_headers()),
        )

        slow = asyncio.create_task(client.get("slow"))
        while not self.session.requests:
            await asyncio.sleep(0)

        await client.get("fast")
        self.assertTrue(client.rate_limit.is_cooling_down)

        released_at = asyncio.get_running_loop().time()
        release.set()
        result = await slow

        self.assertEqual(result, {"id": "slow"})
        self.assertLess(asyncio.get_running_loop().time() - released_at, 0.05)

    async def test_error_response_still_updates_gate(self) -> None:
        """Test that rate-limit headers on an error response are honoured."""
        client = self.make_client(
            json_response({"error": "Rate limited"}, 503, headers=cooldown_headers())
        )

        with self.assertRaises(ApiError):
            await client.get("artist")

        self.assertTrue(client.rate_limit.is_cooling_down)


class TestMusicBrainzClientAcrossEventLoops(unittest.TestCase):
    """Test one client used from consecutive ``asyncio.run`` calls."""

    def setUp(self) -> None:
        """Set up the test environment."""
        self.session = FakeSession(
            json_response({"id": "a"}, headers=cooldown_headers()),
            json_response({"id": "b"}),
        )
        self.client = MusicBrainzClient(
            session=self.session,  # type: ignore[arg-type]
            clock=lambda: NOW,
        )

    def test_lookup_after_window_in_new_loop(self) -> None:
        """Test that a cooldown from a finished loop does not break later lookups."""
        asyncio.run(self.client.lookup("recording", RECORDING_MBID))
        time.sleep(COOLDOWN + 0.05)

        self.assertFalse(self.client.rate_limit.is_cooling_down)
        started = time.monotonic()
        result = asyncio.run(self.client.lookup("recording", RECORDING_MBID))

        self.assertEqual(result, {"id": "b"})
        self.assertLess(time.monotonic() - started, 0.05)

    def test_lookup_within_window_in_new_loop(self) -> None:
        """Test that a new loop still waits out the rest of the window."""
        asyncio.run(self.client.lookup("recording", RECORDING_MBID))
        started = time.monotonic()

        result = asyncio.run(self.client.lookup("recording", RECORDING_MBID))

        self.assertEqual(result, {"id": "b"})
        self.assertGreaterEqual(time.monotonic() - started, COOLDOWN * 0.75)


if __name__ == "__main__":
    unittest.main()
