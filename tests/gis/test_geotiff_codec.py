"""Tests for the GeoTIFF RasterCodec (real rasterio, in-memory files)."""

from __future__ import annotations

import numpy as np
import pytest
from affine import Affine
from rasterio.io import MemoryFile

from domain.elevation.errors import CorruptSourceError
from infrastructure.elevation.geotiff_codec import DOCUMENT_NAME_TAG, GeoTiffCodec
from tests.conftest_utils import gradient, make_raster


def geotiff_bytes(data: np.ndarray, transform: Affine | None = None, **profile) -> bytes:
    """Write an arbitrary (possibly multi-band) GeoTIFF to bytes."""
    if data.ndim == 2:
        data = data[np.newaxis, ...]
    count, height, width = data.shape
    options = dict(
        driver="GTiff",
        width=width,
        height=height,
        count=count,
        dtype=str(data.dtype),
        crs="EPSG:4326",
    )
    if transform is not None:
        options["transform"] = transform
    options.update(profile)
    with MemoryFile() as memfile:
        with memfile.open(**options) as dst:
            dst.write(data)
        memfile.seek(0)
        return memfile.read()


class TestEncodeDecode:
    def test_samples_and_georeference_preserved(self) -> None:
        codec = GeoTiffCodec()
        raster = make_raster(gradient(10, 12, start=-50), 46.0, 6.0, 1.0, 1.2)

        decoded = codec.decode(codec.encode(raster))

        np.testing.assert_array_equal(decoded.grid.data, raster.grid.data)
        assert decoded.grid.data.dtype == np.int16
        assert decoded.georef.north == pytest.approx(46.0)
        assert decoded.georef.west == pytest.approx(6.0)
        assert decoded.georef.x_res == pytest.approx(0.1)
        assert decoded.georef.y_res == pytest.approx(0.1)
        assert decoded.crs == "EPSG:4326"

    def test_descriptor_harvested_from_metadata(self) -> None:
        codec = GeoTiffCodec()
        raster = make_raster(gradient(500, 500), 46.0, 6.0, 5.0, 5.0)

        descriptor = codec.decode(codec.encode(raster)).descriptor("tile.zip")

        assert descriptor.north == pytest.approx(46.0)
        assert descriptor.west == pytest.approx(6.0)
        assert descriptor.latitude_span == pytest.approx(5.0)
        assert descriptor.longitude_span == pytest.approx(5.0)
        assert (descriptor.width, descriptor.height) == (500, 500)

    def test_tags_copied_and_document_name_set(self) -> None:
        codec = GeoTiffCodec()
        raster = make_raster(
            gradient(4, 4), 46.0, 6.0, 1.0, 1.0, tags={"SOURCE": "srtm"}
        )

        decoded = codec.decode(codec.encode(raster, name="N46E06-N45E07"))

        assert decoded.tags["SOURCE"] == "srtm"
        assert decoded.tags[DOCUMENT_NAME_TAG] == "N46E06-N45E07.tif"

    def test_nodata_copied(self) -> None:
        codec = GeoTiffCodec()
        raster = make_raster(gradient(4, 4), 46.0, 6.0, 1.0, 1.0).model_copy(
            update={"nodata": -32768.0}
        )
        assert codec.decode(codec.encode(raster)).nodata == -32768.0

    def test_encoding_is_deterministic(self) -> None:
        codec = GeoTiffCodec()
        raster = make_raster(gradient(8, 8), 46.0, 6.0, 1.0, 1.0)
        assert codec.encode(raster, name="a") == codec.encode(raster, name="a")


class TestCorruptSources:
    def test_empty_payload(self) -> None:
        with pytest.raises(CorruptSourceError):
            GeoTiffCodec().decode(b"")

    def test_garbage_payload(self) -> None:
        with pytest.raises(CorruptSourceError):
            GeoTiffCodec().decode(b"this is not a tiff at all" * 10)

    def test_float_samples_rejected(self) -> None:
        transform = Affine.translation(6.0, 46.0) * Affine.scale(0.1, -0.1)
        payload = geotiff_bytes(np.ones((10, 10), dtype=np.float32), transform)
        with pytest.raises(CorruptSourceError, match="int16"):
            GeoTiffCodec().decode(payload)

    def test_multiband_rejected(self) -> None:
        transform = Affine.translation(6.0, 46.0) * Affine.scale(0.1, -0.1)
        payload = geotiff_bytes(np.ones((2, 10, 10), dtype=np.int16), transform)
        with pytest.raises(CorruptSourceError, match="1 band"):
            GeoTiffCodec().decode(payload)

    def test_south_up_transform_rejected(self) -> None:
        transform = Affine.translation(6.0, 45.0) * Affine.scale(0.1, 0.1)
        payload = geotiff_bytes(np.ones((10, 10), dtype=np.int16), transform)
        with pytest.raises(CorruptSourceError, match="north-up"):
            GeoTiffCodec().decode(payload)
