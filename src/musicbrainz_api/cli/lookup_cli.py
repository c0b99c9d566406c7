"""Command-line interface for the MusicBrainz API client.

This module provides a command-line interface for ad-hoc entity lookups and
for generating lookup fixtures used by the test suite.
"""

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Sequence

from tqdm import tqdm

from ..config.settings import DEFAULT_TESTDATA_DIR
from ..domain.entities import ENTITY_TYPES, is_valid_mbid
from ..domain.includes import validate_includes
from ..infrastructure.api.client import MusicBrainzClient
from ..infrastructure.exceptions.api_exceptions import (
    ApiError,
    InvalidIncludeError,
)
from ..infrastructure.exceptions.storage_exceptions import StorageError
from ..services.testdata_service import LOOKUP_TEST_CASES, TestdataService

EXIT_OK = 0
EXIT_API_ERROR = 1
EXIT_USAGE_ERROR = 2


def setup_logging(verbose: bool = False) -> None:
    """Set up logging configuration.

    Args:
        verbose: If True, set log level to DEBUG, otherwise INFO
    """
    log_level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Arguments to parse (defaults to ``sys.argv[1:]``)

    Returns
    -------
        Parsed arguments
    """
    parser = argparse.ArgumentParser(
        prog="musicbrainz-api",
        description="Look up MusicBrainz entities and generate lookup fixtures",
    )

    parser.add_argument(
        "--api-url",
        type=str,
        default=None,
        help="Root URL of the MusicBrainz API (default: $MUSICBRAINZ_API_URL or https://musicbrainz.org/ws/2/)",
    )

    parser.add_argument(
        "--user-agent",
        type=str,
        default=None,
        help="User-Agent sent with every request (default: $MUSICBRAINZ_USER_AGENT or musicbrainz-api/<version>)",
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    lookup_parser = subparsers.add_parser(
        "lookup", help="Look up a single entity and print it as JSON"
    )
    lookup_parser.add_argument(
        "entity_type", choices=ENTITY_TYPES, help="Type of the entity"
    )
    lookup_parser.add_argument("mbid", help="MusicBrainz identifier of the entity")
    lookup_parser.add_argument(
        "--inc",
        dest="includes",
        action="append",
        default=[],
        help="Include token; may be given several times (e.g. --inc artists --inc isrcs)",
    )

    testdata_parser = subparsers.add_parser(
        "testdata", help="Generate JSON fixtures for the lookup test cases"
    )
    testdata_parser.add_argument(
        "--output-dir",
        type=str,
        default=DEFAULT_TESTDATA_DIR,
        help=f"Directory where fixtures will be written (default: {DEFAULT_TESTDATA_DIR})",
    )
    testdata_parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite fixtures that already exist",
    )

    return parser.parse_args(argv)


async def run_lookup(client: MusicBrainzClient, args: argparse.Namespace) -> int:
    """Run the ``lookup`` command.

    Returns
    -------
        Process exit code
    """
    logger = logging.getLogger(__name__)

    if not is_valid_mbid(args.mbid):
        logger.error(f"{args.mbid} is not a valid MBID")
        return EXIT_USAGE_ERROR

    try:
        includes = validate_includes(args.entity_type, args.includes)
    except InvalidIncludeError as e:
        logger.error(str(e))
        return EXIT_USAGE_ERROR

    try:
        result = await client.lookup(args.entity_type, args.mbid, includes)
    except ApiError as e:
        logger.error(f"Lookup failed: {e}")
        return EXIT_API_ERROR

    print(json.dumps(result, indent=2, ensure_ascii=False))
    return EXIT_OK


async def run_testdata(client: MusicBrainzClient, args: argparse.Namespace) -> int:
    """Run the ``testdata`` command.

    Returns
    -------
        Process exit code
    """
    logger = logging.getLogger(__name__)
    service = TestdataService(args.output_dir, client=client)

    test_cases = tqdm(LOOKUP_TEST_CASES, desc="Generating fixtures")
    try:
        written = await service.generate(test_cases, force=args.force)
    except (ApiError, StorageError) as e:
        logger.error(f"Fixture generation failed: {e}")
        return EXIT_API_ERROR

    logger.info(f"Wrote {len(written)} fixture(s) to {args.output_dir}")
    return EXIT_OK


def main(argv: Sequence[str] | None = None) -> int:
    """Run the MusicBrainz API command-line tool."""
    args = parse_args(argv)
    setup_logging(args.verbose)

    client = MusicBrainzClient(api_url=args.api_url, user_agent=args.user_agent)

    if args.command == "lookup":
        return asyncio.run(run_lookup(client, args))
    return asyncio.run(run_testdata(client, args))


if __name__ == "__main__":
    sys.exit(main())
