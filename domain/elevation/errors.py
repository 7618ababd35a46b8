"""Elevation Bounded Context - Error Hierarchy.

Custom exceptions for tile indexing, lookup and splitting.

A coordinate that no tile covers is NOT an error: lookups return the
no-data sentinel (0) instead.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from domain.elevation.value_objects import TileDescriptor


class ElevationError(Exception):
    """Base error for elevation tile operations."""


class CorruptSourceError(ElevationError):
    """Tile archive, raster or index cache cannot be decoded."""


class InvalidPartitionError(ElevationError):
    """Requested split spans do not divide the source tile into >1 whole parts.

    Attributes:
        axis: "latitude" or "longitude"
        factor: The offending source_span / target_span ratio
    """

    def __init__(self, axis: str, factor: float) -> None:
        self.axis = axis
        self.factor = factor
        super().__init__(
            f"{axis} factor must be an integer greater than 1, got {factor:g}"
        )


class PointOutsideTileError(ElevationError):
    """Coordinate is outside the tile passed to a checked read.

    Attributes:
        latitude: The offending latitude
        longitude: The offending longitude
        descriptor: The tile's TileDescriptor
    """

    def __init__(
        self, latitude: float, longitude: float, descriptor: "TileDescriptor"
    ) -> None:
        self.latitude = latitude
        self.longitude = longitude
        self.descriptor = descriptor
        super().__init__(
            f"Point ({latitude:.6f}, {longitude:.6f}) outside tile "
            f"[lat: {descriptor.south:.6f} to {descriptor.north:.6f}, "
            f"lon: {descriptor.west:.6f} to {descriptor.east:.6f}]"
        )
