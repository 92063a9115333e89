"""Core module - shared utilities"""

from .ids import IdKind, generate_id, short_id

__all__ = [
    "IdKind",
    "generate_id",
    "short_id",
]
