"""Shared utilities for Brandr."""

from brandr.core.utils.math import clamp, lerp

__all__ = [
    "clamp",
    "lerp",
]
