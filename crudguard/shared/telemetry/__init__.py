"""Telemetry helpers (logging setup)."""
