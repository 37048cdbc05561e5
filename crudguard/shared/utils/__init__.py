"""Shared utilities (datetime, id generation)."""

from crudguard.shared.utils.datetime import utc_now
from crudguard.shared.utils.generators import generate_cuid

__all__ = ["generate_cuid", "utc_now"]
