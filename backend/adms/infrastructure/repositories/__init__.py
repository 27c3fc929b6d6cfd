"""Repositories over the async SQLAlchemy session."""

from .entity_store import EntityStore

__all__ = ["EntityStore"]
