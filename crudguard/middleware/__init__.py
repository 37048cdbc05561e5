"""ASGI middleware."""

from crudguard.middleware.request_id import RequestIDMiddleware

__all__ = ["RequestIDMiddleware"]
