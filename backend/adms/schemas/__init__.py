"""Helpers shared by the pydantic input schemas."""

from .mapping import apply_update

__all__ = ["apply_update"]
