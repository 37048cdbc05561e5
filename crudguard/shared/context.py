"""Request context management using contextvars.

Async-safe storage for request-scoped metadata that the audit hook attaches
to every event (request id, client address, user agent). Identity is not
stored here: it is resolved per request and passed explicitly.

Usage:
    set_request_id("abc")
    set_client_info("10.0.0.1", "curl/8.0")
    ctx = get_request_context()
"""

from contextvars import ContextVar
from dataclasses import dataclass

_current_request_id: ContextVar[str | None] = ContextVar(
    "current_request_id", default=None
)
_current_ip_address: ContextVar[str | None] = ContextVar(
    "current_ip_address", default=None
)
_current_user_agent: ContextVar[str | None] = ContextVar(
    "current_user_agent", default=None
)


@dataclass(frozen=True)
class RequestContext:
    """Immutable snapshot of the current request metadata."""

    request_id: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None


def set_request_id(request_id: str | None) -> None:
    """Set the request id for the current task (called by RequestIDMiddleware)."""
    _current_request_id.set(request_id)


def set_client_info(ip_address: str | None, user_agent: str | None) -> None:
    """Set client address and user agent for the current task."""
    _current_ip_address.set(ip_address)
    _current_user_agent.set(user_agent)


def clear_request_context() -> None:
    """Clear all request metadata."""
    _current_request_id.set(None)
    _current_ip_address.set(None)
    _current_user_agent.set(None)


def get_request_context() -> RequestContext:
    """Return a snapshot of the current request metadata."""
    return RequestContext(
        request_id=_current_request_id.get(),
        ip_address=_current_ip_address.get(),
        user_agent=_current_user_agent.get(),
    )
