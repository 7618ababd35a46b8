"""Command-line entry points.

    tile-elevation LATITUDE LONGITUDE
        Print the elevation at a coordinate (0 when no tile covers it).

    tile-split SOURCE_DIR TARGET_DIR [--lat-span 1] [--lon-span 1]
        Split every tile of SOURCE_DIR into aligned sub-tiles in TARGET_DIR.

The tile directory, worker count and log level come from ``ELEVATION_*``
environment variables (see TileSettings).
"""

from __future__ import annotations

import argparse
import logging
from collections.abc import Sequence
from pathlib import Path

from infrastructure.elevation.settings import TileSettings
from infrastructure.elevation.tile_directory import TileDirectory


def _configure_logging(settings: TileSettings) -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="tile-elevation",
        description="Print the elevation at a coordinate from a tile directory.",
    )
    parser.add_argument("latitude", type=float)
    parser.add_argument("longitude", type=float)
    parser.add_argument(
        "--tiles-dir", type=Path, default=None, help="override ELEVATION_TILES_DIR"
    )
    args = parser.parse_args(argv)

    settings = TileSettings.from_env()
    _configure_logging(settings)

    tiles = TileDirectory.from_settings(settings, args.tiles_dir)
    print(tiles.get_elevation(args.latitude, args.longitude))
    return 0


def split_main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="tile-split",
        description="Split elevation tiles into aligned, smaller tiles.",
    )
    parser.add_argument("source_dir", type=Path)
    parser.add_argument("target_dir", type=Path)
    parser.add_argument("--lat-span", type=float, default=1.0)
    parser.add_argument("--lon-span", type=float, default=1.0)
    args = parser.parse_args(argv)

    settings = TileSettings.from_env()
    _configure_logging(settings)

    source = TileDirectory.from_settings(settings, args.source_dir)
    target = source.split_into(args.target_dir, args.lat_span, args.lon_span)
    print(len(target.tiles()))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
