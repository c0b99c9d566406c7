"""Storage modules for musicbrainz_api infrastructure layer."""

from .filesystem import FixtureStore

__all__ = ["FixtureStore"]
