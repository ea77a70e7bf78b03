"""Utility functions for the registry secret scanner."""

from .digest import calculate_digest, split_digest

__all__ = ["calculate_digest", "split_digest"]
