"""Shared helpers for building test rasters and tile directories.

These utilities are used by:
- tests/elevation/ (domain tests, no I/O)
- tests/gis/ and tests/commandline/ (adapter tests writing real GeoTIFFs to tmp_path)
"""

from __future__ import annotations

from pathlib import Path

import numpy as np

from domain.elevation.value_objects import ElevationGrid, GeoReference, Raster


def make_raster(
    data: np.ndarray,
    north: float,
    west: float,
    latitude_span: float,
    longitude_span: float,
    crs: str | None = "EPSG:4326",
    tags: dict[str, str] | None = None,
) -> Raster:
    """Build a Raster covering the given box with the given samples."""
    data = np.asarray(data, dtype=np.int16)
    height, width = data.shape
    return Raster(
        grid=ElevationGrid(data=data),
        georef=GeoReference(
            north=north,
            west=west,
            x_res=longitude_span / width,
            y_res=latitude_span / height,
        ),
        crs=crs,
        tags=tags or {},
    )


def gradient(height: int, width: int, start: int = 1) -> np.ndarray:
    """Return non-zero int16 samples counting up from ``start``.

    Values wrap every 30000 samples to stay inside the int16 range.
    """
    values = np.arange(height * width, dtype=np.int64) % 30000 + start
    return values.astype(np.int16).reshape(height, width)


def write_tile(directory: Path, name: str, raster: Raster) -> Path:
    """Encode a raster as a zipped GeoTIFF tile ``<name>.zip``."""
    from infrastructure.elevation.geotiff_codec import GeoTiffCodec
    from infrastructure.elevation.zip_archive import write_single_raster

    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{name}.zip"
    write_single_raster(path, f"{name}.tif", GeoTiffCodec().encode(raster, name=name))
    return path
