"""GeoTIFF codec for RasterCodec.

Decodes single-band int16 GeoTIFF bytes into a domain Raster and encodes the
inverse, using rasterio in-memory datasets.

Lifecycle (to avoid resource leaks and shared decoder state):
1) Enter rasterio.Env for GDAL configuration (per call, never global)
2) Wrap the bytes in a fresh MemoryFile
3) Open the dataset with a context manager, validate band/dtype/geotransform
4) Read samples and copy-through metadata (CRS, nodata, tags)
5) Exit contexts to release GDAL handles
6) Return Raster

Every call builds its own MemoryFile, so the codec is safe to share between
worker threads.
"""

from __future__ import annotations

import logging
import math
from typing import Any

import numpy as np
import rasterio
from affine import Affine
from rasterio.io import MemoryFile

from domain.elevation.errors import CorruptSourceError
from domain.elevation.value_objects import ElevationGrid, GeoReference, Raster

# Module-level logger (reused across all calls)
logger = logging.getLogger(__name__)

# GDAL metadata item holding the TIFF DocumentName tag
DOCUMENT_NAME_TAG = "TIFFTAG_DOCUMENTNAME"

_SAMPLE_DTYPE = "int16"


def _georef_from_transform(transform: Any) -> GeoReference:
    """Build a GeoReference from a north-up affine geotransform.

    Raises:
        CorruptSourceError: If the transform is missing, rotated or degenerate
    """
    if not isinstance(transform, Affine):
        raise CorruptSourceError("Missing affine transform")
    values = (transform.a, transform.b, transform.c, transform.d, transform.e, transform.f)
    if any(math.isnan(v) or math.isinf(v) for v in values):
        raise CorruptSourceError("Invalid (NaN/Inf) transform values")
    if transform.b != 0 or transform.d != 0:
        raise CorruptSourceError("Rotated geotransforms are not supported")
    # North-up rasters have a positive x scale and a negative y scale
    if transform.a <= 0 or transform.e >= 0:
        raise CorruptSourceError(
            f"Raster is not north-up (scale {transform.a}, {transform.e})"
        )
    return GeoReference(
        north=transform.f, west=transform.c, x_res=transform.a, y_res=-transform.e
    )


class GeoTiffCodec:
    """Infrastructure codec between GeoTIFF bytes and domain Rasters."""

    def decode(self, payload: bytes) -> Raster:
        """Decode GeoTIFF bytes into a Raster.

        Raises:
            CorruptSourceError: If the bytes are not a readable single-band
                int16 GeoTIFF with a north-up geotransform
        """
        if not payload:
            raise CorruptSourceError("Empty raster payload")

        try:
            with rasterio.Env():
                with MemoryFile(payload) as memfile:
                    with memfile.open() as src:
                        if src.count != 1:
                            raise CorruptSourceError(f"Expected 1 band, got {src.count}")
                        if src.dtypes[0] != _SAMPLE_DTYPE:
                            raise CorruptSourceError(
                                f"Expected {_SAMPLE_DTYPE} samples, got {src.dtypes[0]}"
                            )

                        georef = _georef_from_transform(src.transform)
                        data = src.read(1)
                        crs = src.crs.to_string() if src.crs is not None else None

                        logger.debug(
                            "Decoded %dx%d raster at (%s, %s)",
                            src.width,
                            src.height,
                            georef.north,
                            georef.west,
                        )
                        return Raster(
                            grid=ElevationGrid(data=data),
                            georef=georef,
                            crs=crs,
                            nodata=src.nodata,
                            tags=src.tags(),
                        )
        except (rasterio.errors.RasterioIOError, rasterio.errors.RasterioError) as e:
            raise CorruptSourceError(f"Corrupted or invalid raster: {e}") from e
        except ValueError as e:
            # Value Object invariants (e.g. zero-sized raster)
            raise CorruptSourceError(f"Invalid raster contents: {e}") from e

    def encode(self, raster: Raster, name: str | None = None) -> bytes:
        """Encode a Raster as GeoTIFF bytes.

        CRS, nodata and tags are copied through; when ``name`` is given the
        DocumentName tag is set to ``<name>.tif``.
        """
        georef = raster.georef
        transform = Affine(
            georef.x_res, 0.0, georef.west, 0.0, -georef.y_res, georef.north
        )
        profile: dict[str, Any] = {
            "driver": "GTiff",
            "width": raster.grid.width,
            "height": raster.grid.height,
            "count": 1,
            "dtype": _SAMPLE_DTYPE,
            "crs": raster.crs,
            "transform": transform,
            "nodata": raster.nodata,
        }
        tags = dict(raster.tags)
        if name is not None:
            tags[DOCUMENT_NAME_TAG] = f"{name}.tif"

        # GDAL needs a writable buffer; the grid's array is frozen
        data = np.array(raster.grid.data, dtype=np.int16, copy=True)

        with rasterio.Env():
            with MemoryFile() as memfile:
                with memfile.open(**profile) as dst:
                    dst.write(data, 1)
                    if tags:
                        dst.update_tags(**tags)
                memfile.seek(0)
                payload = memfile.read()

        logger.debug("Encoded %s (%d bytes)", name or "raster", len(payload))
        return payload
