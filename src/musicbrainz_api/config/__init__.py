"""Runtime settings for musicbrainz_api."""
