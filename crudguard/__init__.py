"""crudguard: metadata-driven CRUD API with role, row and field level access control."""

__version__ = "1.0.0"
