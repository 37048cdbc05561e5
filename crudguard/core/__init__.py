"""Core: config, lifespan, exception handlers, rate limiter, policy holder."""

from crudguard.core.config import get_settings

__all__ = ["get_settings"]
