"""Infrastructure layer: SQLAlchemy persistence, JWT identity decoding, audit hook.

Implements the application ports (IEntityStore, IAuditHook).
"""
