"""Elevation Bounded Context - Domain Services.

Pure domain logic for elevation tiles: coordinate -> pixel mapping and
splitting a tile into an aligned grid of smaller tiles.
NO I/O operations - archives, GeoTIFF decoding and the tile index cache are
implemented by infrastructure adapters under `src/infrastructure/elevation/`.
"""

from __future__ import annotations

import math

import numpy as np

from domain.elevation.errors import InvalidPartitionError, PointOutsideTileError
from domain.elevation.value_objects import (
    ARCHIVE_SUFFIX,
    NODATA_ELEVATION,
    ElevationGrid,
    Raster,
    SubTile,
    TileDescriptor,
)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
# Relative tolerance when checking that a span ratio is a whole number. Spans
# harvested from files are resolution * pixels, e.g. (5 / 6000) * 6000.
FACTOR_TOLERANCE = 1e-9


# ---------------------------------------------------------------------------
# Coordinate -> Pixel
# ---------------------------------------------------------------------------
def pixel_offset(
    descriptor: TileDescriptor, latitude: float, longitude: float
) -> tuple[int, int]:
    """Return the (x, y) pixel owning a coordinate.

    Cells own ``[cell, cell + resolution)``, hence floor rather than round.
    No bounds check: callers must ensure ``descriptor.contains(...)``.
    """
    offset_lat = descriptor.north - latitude
    offset_lon = longitude - descriptor.west
    x = math.floor(descriptor.width * offset_lon / descriptor.longitude_span)
    y = math.floor(descriptor.height * offset_lat / descriptor.latitude_span)
    return x, y


def lookup_elevation(
    descriptor: TileDescriptor, grid: ElevationGrid, latitude: float, longitude: float
) -> int:
    """Read the elevation sample of the grid cell containing a coordinate.

    Nearest-cell read, no interpolation. The coordinate must already be known
    to lie inside the tile (see TileIndex.resolve); use read_elevation when
    that is not guaranteed.
    """
    x, y = pixel_offset(descriptor, latitude, longitude)
    return int(grid.data[y, x])


def read_elevation(
    descriptor: TileDescriptor, grid: ElevationGrid, latitude: float, longitude: float
) -> int:
    """Checked variant of lookup_elevation.

    Raises:
        PointOutsideTileError: If the coordinate is not inside the tile
    """
    if not descriptor.contains(latitude, longitude):
        raise PointOutsideTileError(latitude, longitude, descriptor)
    return lookup_elevation(descriptor, grid, latitude, longitude)


# ---------------------------------------------------------------------------
# Tile Naming
# ---------------------------------------------------------------------------
def _format_degrees(value: float, positive: str, negative: str) -> str:
    hemisphere = positive if value >= 0 else negative
    magnitude = abs(value)
    if magnitude.is_integer():
        return f"{hemisphere}{int(magnitude):02d}"
    return f"{hemisphere}{magnitude:05.2f}"


def tile_name(
    north: float, west: float, latitude_span: float, longitude_span: float
) -> str:
    """Canonical tile identifier from its north-west and south-east corners.

    Example:
        >>> tile_name(46.0, 6.0, 1.0, 1.0)
        'N46E06-N45E07'
    """
    south = north - latitude_span
    east = west + longitude_span
    return (
        f"{_format_degrees(north, 'N', 'S')}{_format_degrees(west, 'E', 'W')}-"
        f"{_format_degrees(south, 'N', 'S')}{_format_degrees(east, 'E', 'W')}"
    )


# ---------------------------------------------------------------------------
# Tile Splitting
# ---------------------------------------------------------------------------
def _whole_factor(axis: str, source_span: float, target_span: float) -> int:
    if target_span == 0:
        raise InvalidPartitionError(axis, math.inf)
    factor = source_span / target_span
    # NaN and infinite ratios fail here too, before round() sees them
    if not (math.isfinite(factor) and factor > 1):
        raise InvalidPartitionError(axis, factor)
    rounded = round(factor)
    if rounded <= 1 or abs(factor - rounded) > FACTOR_TOLERANCE * factor:
        raise InvalidPartitionError(axis, factor)
    return int(rounded)


def partition_factors(
    source: TileDescriptor, target_lat_span: float, target_lon_span: float
) -> tuple[int, int]:
    """Return (lat_factor, lon_factor) for splitting a tile.

    Raises:
        InvalidPartitionError: If a span ratio is not a whole number > 1
    """
    lat_factor = _whole_factor("latitude", source.latitude_span, target_lat_span)
    lon_factor = _whole_factor("longitude", source.longitude_span, target_lon_span)
    return lat_factor, lon_factor


def split_raster(
    raster: Raster, target_lat_span: float, target_lon_span: float
) -> list[SubTile]:
    """Partition a raster into an aligned grid of smaller, disjoint tiles.

    Cells are visited north to south, then west to east. Each sub-tile is a
    ``floor(height / lat_factor) x floor(width / lon_factor)`` block; pixels
    left over at the southern/eastern edge are dropped. Sub-tiles made only
    of no-data samples are not emitted.

    Each sub-tile keeps the source resolution and copy-through metadata and
    gets a new origin tie-point at its own north-west corner. The source
    raster is only read.

    Args:
        raster: Decoded source tile
        target_lat_span: Sub-tile height in degrees
        target_lon_span: Sub-tile width in degrees

    Returns:
        Sub-tiles with their canonical names, in visiting order

    Raises:
        InvalidPartitionError: If a span does not divide the source into
            a whole number (> 1) of parts
    """
    source = raster.descriptor()
    lat_factor, lon_factor = partition_factors(source, target_lat_span, target_lon_span)

    sub_height = source.height // lat_factor
    sub_width = source.width // lon_factor
    data = raster.grid.data
    metadata = raster.metadata()

    sub_tiles: list[SubTile] = []
    for row in range(lat_factor):
        north = source.north - row * target_lat_span
        # == floor(height * (source.north - north) / latitude_span), in integers
        y_offset = source.height * row // lat_factor
        for col in range(lon_factor):
            west = source.west + col * target_lon_span
            x_offset = source.width * col // lon_factor

            block = data[y_offset : y_offset + sub_height, x_offset : x_offset + sub_width]
            if not np.any(block != NODATA_ELEVATION):
                continue

            name = tile_name(north, west, target_lat_span, target_lon_span)
            sub_raster = Raster(
                grid=ElevationGrid(data=block),
                georef=raster.georef.with_origin(north, west),
                **metadata,
            )
            sub_tiles.append(
                SubTile(
                    name=name,
                    descriptor=sub_raster.descriptor(file_name=name + ARCHIVE_SUFFIX),
                    raster=sub_raster,
                )
            )

    return sub_tiles
