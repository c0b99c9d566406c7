"""Services built on top of the MusicBrainz API client."""
