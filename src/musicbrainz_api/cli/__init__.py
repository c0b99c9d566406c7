"""Command-line entry points for musicbrainz_api."""
