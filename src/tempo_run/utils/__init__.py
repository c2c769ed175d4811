"""Utility functions shared across domains."""

from .text import slugify, track_identity

__all__ = ["slugify", "track_identity"]
