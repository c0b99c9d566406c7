"""Filesystem storage for lookup fixtures.

Fixtures are JSON documents stored as ``<identifier>.json`` inside a single
directory. Errors are reported as storage exceptions carrying the offending
path.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any

from ..exceptions.storage_exceptions import FixtureError

# Configure logger
logger = logging.getLogger(__name__)


class FixtureStore:
    """JSON fixture files kept in one directory."""

    SUFFIX = ".json"

    def __init__(self, directory: str | Path) -> None:
        """Initialize the fixture store.

        Args:
            directory: Directory holding the fixture files. It is created on
                the first write.
        """
        self.directory = Path(directory)

    def path_for(self, identifier: str) -> Path:
        """Return the file path of the fixture with the given identifier."""
        return self.directory / f"{identifier}{self.SUFFIX}"

    def exists(self, identifier: str) -> bool:
        """Check whether a fixture has already been stored."""
        return self.path_for(identifier).is_file()

    def ensure_directory(self) -> Path:
        """Create the fixture directory if necessary.

        Raises
        ------
            FixtureError: If the directory cannot be created
        """
        try:
            os.makedirs(self.directory, exist_ok=True)
        except OSError as e:
            raise FixtureError("create directory", str(self.directory), e) from e
        return self.directory

    def write(self, identifier: str, data: Any, indent: int = 2) -> Path:
        """Write a fixture as JSON.

        Args:
            identifier: Fixture identifier, used as the file stem
            data: JSON-serializable fixture content
            indent: Number of spaces for indentation

        Returns
        -------
            Path of the written file

        Raises
        ------
            FixtureError: If the directory or the file cannot be written
        """
        self.ensure_directory()
        file_path = self.path_for(identifier)
        try:
            with open(file_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=indent, ensure_ascii=False)
                f.write("\n")
        except (OSError, TypeError, ValueError) as e:
            raise FixtureError("write", str(file_path), e) from e

        logger.debug(f"Wrote fixture {file_path}")
        return file_path

    def read(self, identifier: str) -> Any:
        """Read a fixture.

        Raises
        ------
            FixtureError: If the file cannot be read or parsed
        """
        file_path = self.path_for(identifier)
        try:
            with open(file_path, encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise FixtureError("parse", str(file_path), e) from e
        except OSError as e:
            raise FixtureError("read", str(file_path), e) from e

    def identifiers(self) -> list[str]:
        """List the identifiers of all stored fixtures, sorted."""
        if not self.directory.is_dir():
            return []
        return sorted(p.stem for p in self.directory.glob(f"*{self.SUFFIX}"))
