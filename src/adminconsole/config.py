"""Default configuration values for adminconsole."""

from __future__ import annotations

from typing import Final

# Rows per page used by the list screens when nothing else is configured.
DEFAULT_PAGE_SIZE: Final[int] = 20
PAGE_SIZE_CHOICES: Final[tuple[int, ...]] = (10, 20, 25, 50, 100)

# The audit log screen refreshes every ten seconds while "real time" is on.
DEFAULT_POLL_INTERVAL_MS: Final[int] = 10_000
MIN_POLL_INTERVAL_MS: Final[int] = 250

# Exports ask for one oversized page instead of walking the pages.
EXPORT_PAGE_SIZE: Final[int] = 10_000

# Upper bound on concurrently running bulk mutations.
DEFAULT_MAX_CONCURRENCY: Final[int] = 8

MISSING_PLACEHOLDER: Final[str] = "N/A"
EXPORT_DATE_FORMAT: Final[str] = "%Y-%m-%d"

DEFAULT_API_URL: Final[str] = "http://localhost:5000/api"
HTTP_TIMEOUT_SEC: Final[float] = 30.0
# Environment variables read by the CLI.
API_URL_ENV: Final[str] = "ADMINCONSOLE_API_URL"
API_TOKEN_ENV: Final[str] = "ADMINCONSOLE_TOKEN"
