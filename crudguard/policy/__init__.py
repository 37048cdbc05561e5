"""Bundled policy document and its JSON schema (package data)."""
