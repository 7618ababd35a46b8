"""Elevation Tiles Domain Layer.

This package contains the core business logic organized by bounded contexts:
- elevation: Tile geometry, coordinate lookup, tile splitting
"""

from domain import elevation

__all__ = ["elevation"]
