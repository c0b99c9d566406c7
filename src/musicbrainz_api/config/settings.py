"""Runtime settings for the MusicBrainz client.

Explicit arguments always win; environment variables come next and the
module constants are the fallback.
"""

import os

from .._version import __version__

DEFAULT_API_URL = "https://musicbrainz.org/ws/2/"
APP_NAME = "musicbrainz-api"
DEFAULT_TESTDATA_DIR = "tests/fixtures/lookup"

API_URL_ENV = "MUSICBRAINZ_API_URL"
USER_AGENT_ENV = "MUSICBRAINZ_USER_AGENT"


def format_user_agent(app_name: str, app_version: str, contact: str = "") -> str:
    """Return ``App/Version (contact)`` when contact information is available."""
    stripped = contact.strip()
    if stripped:
        return f"{app_name}/{app_version} ({stripped})"
    return f"{app_name}/{app_version}"


def resolve_api_url(api_url: str | None = None) -> str:
    """Pick the API root URL from the argument, the environment or the default."""
    return api_url or os.getenv(API_URL_ENV) or DEFAULT_API_URL


def resolve_user_agent(user_agent: str | None = None) -> str:
    """Pick the User-Agent from the argument, the environment or the default."""
    return (
        user_agent
        or os.getenv(USER_AGENT_ENV)
        or format_user_agent(APP_NAME, __version__)
    )
