"""Rate-limit gate driven by the MusicBrainz rate-limit response headers.

MusicBrainz reports how many usage units remain in the current time window
(``X-RateLimit-Remaining``) and when that window ends (``X-RateLimit-Reset``,
Unix seconds). Once the remaining units reach zero, further requests are
held back until the window resets.

The gate is a single future shared by every request of one client. Requests
await it right before sending; a response announcing a cooldown replaces it
with a new future that resolves when the window resets. A request that is
already past the gate is not affected by a later replacement.
"""

import asyncio
import logging
import time
from collections.abc import Mapping

REMAINING_HEADER = "X-RateLimit-Remaining"
RESET_HEADER = "X-RateLimit-Reset"

# Configure logger
logger = logging.getLogger(__name__)


def _get_header(headers: Mapping[str, str], name: str) -> str | None:
    """Look up a header value case-insensitively."""
    value = headers.get(name)
    if value is not None:
        return value

    lowered = name.lower()
    for key, candidate in headers.items():
        if key.lower() == lowered:
            return candidate
    return None


def _parse_int(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


class RateLimitGate:
    """Shared "safe to send" signal for the requests of one client."""

    def __init__(self) -> None:
        """Initialize the gate in the already-satisfied state."""
        self._gate: asyncio.Future[None] | None = None
        # time.monotonic() value at which the current gate opens
        self._deadline = 0.0

    @property
    def is_cooling_down(self) -> bool:
        """Whether requests reaching the gate now would be delayed."""
        if self._gate is None or self._gate.done():
            return False
        return self._deadline > time.monotonic()

    async def wait(self) -> None:
        """Wait until the current cooldown, if any, has elapsed.

        The gate is captured when the call starts, so a cooldown installed
        while waiting does not extend this wait. A gate left behind by
        another event loop is replaced by one on the running loop that opens
        at the same deadline.
        """
        gate = self._gate
        if gate is None or gate.done():
            return

        left = self._deadline - time.monotonic()
        if left <= 0:
            self._gate = None
            return

        if gate.get_loop() is not asyncio.get_running_loop():
            logger.debug(f"Moving cooldown to the running loop, {left:.2f}s left")
            gate = self._arm(left)

        await asyncio.shield(gate)

    def cool_down(self, seconds: float) -> None:
        """Replace the gate with one that opens after ``seconds``.

        The previous gate keeps running so that requests already waiting on
        it are released on its original schedule.
        """
        self._arm(seconds)

    def _arm(self, seconds: float) -> "asyncio.Future[None]":
        loop = asyncio.get_running_loop()
        gate: asyncio.Future[None] = loop.create_future()
        loop.call_later(seconds, _release, gate)
        self._gate = gate
        self._deadline = time.monotonic() + seconds
        return gate

    def update(self, headers: Mapping[str, str], now: float) -> float | None:
        """Install a cooldown if the response headers ask for one.

        Args:
            headers: Response headers
            now: Current time as Unix seconds

        Returns
        -------
            The installed cooldown in seconds, or None if no cooldown was needed
        """
        remaining = _parse_int(_get_header(headers, REMAINING_HEADER))
        logger.debug(f"{REMAINING_HEADER}: {remaining}")
        if remaining != 0:
            return None

        reset = _parse_int(_get_header(headers, RESET_HEADER))
        if reset is None:
            return None

        delay = reset - now
        if delay <= 0:
            return None

        logger.info(f"Rate limit exhausted, cooling down for {delay:.2f}s")
        self.cool_down(delay)
        return delay


def _release(gate: "asyncio.Future[None]") -> None:
    if not gate.done():
        gate.set_result(None)
