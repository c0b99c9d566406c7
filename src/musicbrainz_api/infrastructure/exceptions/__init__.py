"""Exceptions raised by the musicbrainz_api infrastructure layer."""
