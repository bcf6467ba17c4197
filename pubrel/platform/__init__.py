"""Local platform helpers."""

from .files import content_type_for, is_accessible, iter_chunks

__all__ = ["content_type_for", "is_accessible", "iter_chunks"]
