"""Shared cross-cutting helpers: request context, logging, utilities."""
