"""Elevation Bounded Context - Value Objects.

Immutable data structures describing elevation tiles and their pixel data.
All validation occurs at construction time via Pydantic.

Tile geometry convention: a tile owns the half-open box
``north >= lat > south`` and ``west <= lon < east``, so a coordinate lying on a
shared edge belongs to exactly one of two adjacent tiles.
"""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import NDArray
from pydantic import BaseModel, ConfigDict, Field, model_validator

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
NODATA_ELEVATION = 0  # Returned when no tile covers a coordinate; also ocean fill
DEFAULT_FILE_TYPE = "ZippedTiff"
ARCHIVE_SUFFIX = ".zip"  # One zipped GeoTIFF per tile


class TileDescriptor(BaseModel):
    """Geographic footprint and pixel geometry of one tile (Value Object).

    Invariants:
        TD-1: latitude_span > 0 and longitude_span > 0
        TD-2: width > 0 and height > 0

    south/east are derived, never stored, so they cannot drift from the spans.
    """

    north: float = Field(allow_inf_nan=False)  # Northern edge (degrees)
    west: float = Field(allow_inf_nan=False)  # Western edge (degrees)
    latitude_span: float = Field(gt=0)  # Box height (degrees)
    longitude_span: float = Field(gt=0)  # Box width (degrees)
    width: int = Field(gt=0)  # Pixels along longitude
    height: int = Field(gt=0)  # Pixels along latitude
    file_name: str | None = None  # Backing archive, None for synthesized tiles
    file_type: str = DEFAULT_FILE_TYPE

    model_config = ConfigDict(frozen=True)

    @property
    def south(self) -> float:
        return self.north - self.latitude_span

    @property
    def east(self) -> float:
        return self.west + self.longitude_span

    def contains(self, latitude: float, longitude: float) -> bool:
        """Check if a coordinate lies in this tile (north/west edges inclusive)."""
        return (
            self.north >= latitude > self.south
            and self.east > longitude >= self.west
        )

    def intersects(self, other: "TileDescriptor") -> bool:
        """Check if the two half-open boxes share any area."""
        return (
            self.west < other.east
            and other.west < self.east
            and self.south < other.north
            and other.south < self.north
        )


class TileIndex(BaseModel):
    """Ordered, immutable collection of tile descriptors (SpatialIndex).

    resolve() scans linearly and the first containing tile wins. Well-formed
    tile sets are disjoint, so the order only matters for overlapping data.
    """

    tiles: tuple[TileDescriptor, ...] = ()

    model_config = ConfigDict(frozen=True)

    def __len__(self) -> int:
        return len(self.tiles)

    def resolve(self, latitude: float, longitude: float) -> TileDescriptor | None:
        """Return the tile owning the coordinate, or None if no tile covers it."""
        for tile in self.tiles:
            if tile.contains(latitude, longitude):
                return tile
        return None

    def overlaps(self) -> list[tuple[TileDescriptor, TileDescriptor]]:
        """Return every pair of tiles whose boxes intersect, in index order."""
        pairs = []
        for i, first in enumerate(self.tiles):
            for second in self.tiles[i + 1 :]:
                if first.intersects(second):
                    pairs.append((first, second))
        return pairs


class GeoReference(BaseModel):
    """Origin tie-point and per-axis angular scale of a raster (Value Object).

    x_res and y_res are absolute degrees per pixel; rows grow southwards.
    """

    north: float  # Latitude of the top edge of pixel row 0
    west: float  # Longitude of the left edge of pixel column 0
    x_res: float = Field(gt=0)
    y_res: float = Field(gt=0)

    model_config = ConfigDict(frozen=True)

    def with_origin(self, north: float, west: float) -> "GeoReference":
        """Return the same scale anchored at a new origin."""
        return GeoReference(north=north, west=west, x_res=self.x_res, y_res=self.y_res)


class ElevationGrid(BaseModel):
    """Dense int16 elevation samples, row 0 at the north edge (Value Object).

    The data array is made read-only at construction time; the grid may be
    shared between worker threads while a tile is being split.
    """

    data: NDArray[np.int16]  # 2D int16 array (height x width), read-only

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @model_validator(mode="after")
    def validate_grid(self) -> "ElevationGrid":
        if self.data.ndim != 2:
            raise ValueError(f"Data must be 2D, got {self.data.ndim}D")
        if self.data.shape[0] == 0 or self.data.shape[1] == 0:
            raise ValueError(f"Data cannot be empty: {self.data.shape}")
        if self.data.dtype != np.int16:
            raise ValueError(f"Data must be int16, got {self.data.dtype}")

        # Owned, contiguous, frozen copy: callers' arrays are never aliased.
        immutable = np.array(self.data, dtype=np.int16, copy=True, order="C")
        immutable.flags.writeable = False
        object.__setattr__(self, "data", immutable)
        return self

    @property
    def width(self) -> int:
        return int(self.data.shape[1])

    @property
    def height(self) -> int:
        return int(self.data.shape[0])

    def is_void(self) -> bool:
        """True if every sample is the no-data sentinel."""
        return not np.any(self.data != NODATA_ELEVATION)


class Raster(BaseModel):
    """A decoded tile: samples, geo-referencing and copy-through metadata."""

    grid: ElevationGrid
    georef: GeoReference
    crs: str | None = None  # e.g. "EPSG:4326"; carried through unchanged
    nodata: float | None = None
    tags: dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    def descriptor(self, file_name: str | None = None) -> TileDescriptor:
        """Derive the TileDescriptor from the geotransform and pixel size."""
        return TileDescriptor(
            north=self.georef.north,
            west=self.georef.west,
            latitude_span=self.georef.y_res * self.grid.height,
            longitude_span=self.georef.x_res * self.grid.width,
            width=self.grid.width,
            height=self.grid.height,
            file_name=file_name,
        )

    def metadata(self) -> dict[str, Any]:
        """Return the copy-through fields for building a derived raster."""
        return {"crs": self.crs, "nodata": self.nodata, "tags": dict(self.tags)}


class SubTile(BaseModel):
    """One emitted cell of a tile split (Value Object)."""

    name: str  # Canonical identifier, e.g. "N46E06-N45E07"
    descriptor: TileDescriptor
    raster: Raster

    model_config = ConfigDict(frozen=True)
