"""Root pytest configuration for all tests.

Provides a small directory of zipped GeoTIFF tiles for adapter and CLI tests.
Domain tests build Rasters directly via tests/conftest_utils.py.
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest

from tests.conftest_utils import gradient, make_raster, write_tile


@pytest.fixture
def tiles_dir(tmp_path: Path) -> Path:
    """Two adjacent 1x1 degree tiles (10x10 pixels) and one 5x5 degree tile.

    - N46E06: north=46, west=6, samples 1..100
    - N46E07: north=46, west=7, samples 1001..1100
    - N40E00: north=40, west=0, 500x500 pixels, constant 7
    """
    directory = tmp_path / "tiles"
    write_tile(directory, "N46E06", make_raster(gradient(10, 10), 46.0, 6.0, 1.0, 1.0))
    write_tile(
        directory, "N46E07", make_raster(gradient(10, 10, 1001), 46.0, 7.0, 1.0, 1.0)
    )
    write_tile(
        directory,
        "N40E00",
        make_raster(np.full((500, 500), 7, dtype=np.int16), 40.0, 0.0, 5.0, 5.0),
    )
    return directory
