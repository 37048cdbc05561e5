"""UTC datetime helpers.

All timestamps produced by the service (error envelopes, audit events) are
timezone-aware UTC.
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Return the current UTC datetime with timezone info."""
    return datetime.now(UTC)
