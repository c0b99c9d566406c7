"""Test-data generation service for MusicBrainz lookups.

This module performs real lookup requests and stores the responses as JSON
fixtures, so tests can work with authentic payloads without network access.
"""

import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ..domain.entities import MBID, EntityType
from ..infrastructure.api.client import MusicBrainzClient
from ..infrastructure.storage.filesystem import FixtureStore

# Configure logger
logger = logging.getLogger(__name__)

# Lookup test cases as (entity type, MBID, includes)
LookupTestCase = tuple[EntityType, MBID, Sequence[str]]

LOOKUP_TEST_CASES: list[LookupTestCase] = [
    ("recording", "94ed318a-fd7d-4abc-8491-a35e39f51dca", []),
]


def fixture_identifier(
    entity_type: str, mbid: str, includes: Iterable[str] | None = None
) -> str:
    """Build the identifier of a lookup fixture.

    Every character that is not a word character becomes an underscore, so
    the identifier can be used as a file name.

    Example:
        >>> fixture_identifier("release-group", "a1b2", ["artist-credits"])
        'release_group_a1b2_artist_credits'
    """
    joined = "_".join([entity_type, mbid, *(includes or [])])
    return re.sub(r"\W", "_", joined)


@dataclass
class LookupFixture:
    """Result of a lookup request together with the request parameters."""

    entity_type: str
    mbid: str
    includes: list[str] = field(default_factory=list)
    data: Any = None

    @property
    def identifier(self) -> str:
        return fixture_identifier(self.entity_type, self.mbid, self.includes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "entity_type": self.entity_type,
            "mbid": self.mbid,
            "includes": self.includes,
            "data": self.data,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LookupFixture":
        return cls(
            entity_type=data["entity_type"],
            mbid=data["mbid"],
            includes=list(data.get("includes", [])),
            data=data.get("data"),
        )


class TestdataService:
    """Service for generating and loading lookup fixtures."""

    # Not a test class, despite the name
    __test__ = False

    def __init__(
        self,
        output_dir: str | Path,
        client: MusicBrainzClient | None = None,
    ) -> None:
        """Initialize the test-data service.

        Args:
            output_dir: Directory where fixture files are stored
            client: Optional API client (creates a new one if not provided)
        """
        self.store = FixtureStore(output_dir)
        self.client = client or MusicBrainzClient()

    async def fetch_fixture(
        self,
        entity_type: EntityType,
        mbid: MBID,
        includes: Sequence[str] | None = None,
    ) -> LookupFixture:
        """Perform a lookup and wrap its result as a fixture.

        Raises
        ------
            InvalidMbidError: If ``mbid`` is not a valid MBID
            ApiError: If the API answers with an error envelope
        """
        include_list = list(includes or [])
        data = await self.client.lookup(entity_type, mbid, include_list)
        return LookupFixture(
            entity_type=entity_type, mbid=mbid, includes=include_list, data=data
        )

    def write_fixture(self, fixture: LookupFixture) -> Path:
        """Store a fixture and return the path of the written file."""
        return self.store.write(fixture.identifier, fixture.to_dict())

    def load_fixture(self, identifier: str) -> LookupFixture:
        """Load a previously stored fixture."""
        return LookupFixture.from_dict(self.store.read(identifier))

    async def generate(
        self,
        test_cases: Iterable[LookupTestCase] = LOOKUP_TEST_CASES,
        force: bool = False,
    ) -> list[Path]:
        """Fetch and store fixtures for the given lookup test cases.

        Lookups run one after another on the same client so that its
        rate-limit gate spaces them out.

        Args:
            test_cases: Lookup test cases to generate fixtures for
            force: If True, overwrite fixtures that already exist

        Returns
        -------
            Paths of the written fixture files
        """
        written: list[Path] = []
        for entity_type, mbid, includes in test_cases:
            identifier = fixture_identifier(entity_type, mbid, includes)
            if not force and self.store.exists(identifier):
                logger.info(f"Skipping existing fixture {identifier}")
                continue

            logger.info(f"Fetching fixture {identifier}")
            fixture = await self.fetch_fixture(entity_type, mbid, includes)
            written.append(self.write_fixture(fixture))

        return written
