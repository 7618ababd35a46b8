"""Directory of zipped GeoTIFF elevation tiles.

Ties the domain services to storage:
- index construction: every ``*.zip`` is decoded in a thread pool and the
  resulting descriptors are cached in ``tiles.json``
- elevation lookup: resolve the owning tile, decode it, read one cell
- splitting: cut every tile into aligned sub-tiles written by a bounded pool

Decoded rasters are not kept between lookups unless ``grid_cache_size`` is
set, in which case ``functools.lru_cache`` holds the most recently read tiles.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from functools import lru_cache, partial
from pathlib import Path

from domain.elevation.errors import CorruptSourceError
from domain.elevation.repositories import RasterCodec, TileIndexStore
from domain.elevation.services import lookup_elevation, split_raster
from domain.elevation.value_objects import (
    ARCHIVE_SUFFIX,
    NODATA_ELEVATION,
    Raster,
    SubTile,
    TileDescriptor,
    TileIndex,
)

from .geotiff_codec import GeoTiffCodec
from .settings import TileSettings
from .tile_index_cache import DEFAULT_INDEX_FILE_NAME, JsonTileIndexCache
from .zip_archive import read_single_raster, write_single_raster

logger = logging.getLogger(__name__)

ARCHIVE_PATTERN = f"*{ARCHIVE_SUFFIX}"


class TileDirectory:
    """Elevation tiles stored as one zipped GeoTIFF per tile.

    Parameters
    ----------
    directory: Path | str
        Folder holding the ``*.zip`` tiles and the index cache.
    codec: RasterCodec | None
        Raster codec; defaults to GeoTiffCodec.
    index_store: TileIndexStore | None
        Index persistence; defaults to ``index_file_name`` inside ``directory``.
    max_workers: int | None
        Worker threads for scanning and splitting (default: CPU count).
    grid_cache_size: int
        Number of decoded tiles kept between lookups (0 = re-decode always).
    index_file_name: str
        Name of the index cache file when no ``index_store`` is given.
    """

    def __init__(
        self,
        directory: Path | str,
        codec: RasterCodec | None = None,
        index_store: TileIndexStore | None = None,
        max_workers: int | None = None,
        grid_cache_size: int = 0,
        index_file_name: str = DEFAULT_INDEX_FILE_NAME,
    ) -> None:
        self.directory = Path(directory)
        self.codec = codec if codec is not None else GeoTiffCodec()
        self.index_file_name = index_file_name
        self.index_store = (
            index_store
            if index_store is not None
            else JsonTileIndexCache(self.directory, index_file_name)
        )
        self.max_workers = max_workers or os.cpu_count() or 1
        self.grid_cache_size = grid_cache_size
        self._index: TileIndex | None = None
        if grid_cache_size > 0:
            self._decode_archive = lru_cache(maxsize=grid_cache_size)(  # type: ignore
                self._decode_archive
            )

    @classmethod
    def from_settings(
        cls, settings: TileSettings, directory: Path | str | None = None
    ) -> "TileDirectory":
        return cls(
            directory if directory is not None else settings.tiles_dir,
            max_workers=settings.max_workers,
            grid_cache_size=settings.grid_cache_size,
            index_file_name=settings.index_file_name,
        )

    # -----------------------------------------------------------------------
    # Index
    # -----------------------------------------------------------------------
    def archives(self) -> list[Path]:
        return sorted(self.directory.glob(ARCHIVE_PATTERN))

    def describe(self, archive_path: Path | str) -> TileDescriptor:
        """Decode one archive's raster and return its descriptor.

        Raises:
            CorruptSourceError: If the archive or its raster is unreadable,
                or its georeferencing does not form a valid tile box
        """
        path = Path(archive_path)
        raster = self.codec.decode(read_single_raster(path))
        try:
            descriptor = raster.descriptor(file_name=path.name)
        except ValueError as e:
            raise CorruptSourceError(f"{path.name}: invalid tile extent ({e})") from e
        logger.debug("Indexed %s", path.name)
        return descriptor

    def tiles(self) -> TileIndex:
        """Return the tile index, building and caching it on first use."""
        if self._index is None:
            if self.index_store.exists():
                self._index = TileIndex(tiles=tuple(self.index_store.load()))
            else:
                self._index = self.rebuild_index()
        return self._index

    def rebuild_index(self) -> TileIndex:
        """Scan every archive, persist the descriptors and return the index.

        Raises:
            CorruptSourceError: If any archive cannot be decoded; a partial
                index would silently report elevation 0 for its area
        """
        archives = self.archives()
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            descriptors = list(pool.map(self.describe, archives))
        descriptors.sort(key=lambda d: d.file_name or "")

        index = TileIndex(tiles=tuple(descriptors))
        for first, second in index.overlaps():
            logger.warning(
                "Tiles %s and %s overlap; lookups use %s",
                first.file_name,
                second.file_name,
                first.file_name,
            )

        self.index_store.save(descriptors)
        logger.info("Indexed %d tiles in %s", len(index), self.directory.name)
        self._index = index
        return index

    # -----------------------------------------------------------------------
    # Lookup
    # -----------------------------------------------------------------------
    def load_raster(self, descriptor: TileDescriptor) -> Raster:
        """Decode the raster backing a descriptor."""
        if descriptor.file_name is None:
            raise ValueError("Descriptor has no backing file")

        return self._decode_archive(descriptor.file_name)

    def _decode_archive(self, file_name: str) -> Raster:
        return self.codec.decode(read_single_raster(self.directory / file_name))

    def get_elevation(self, latitude: float, longitude: float) -> int:
        """Return the elevation at a coordinate, or 0 when no tile covers it."""
        tile = self.tiles().resolve(latitude, longitude)
        if tile is None:
            logger.debug("No tile for (%.6f, %.6f)", latitude, longitude)
            return NODATA_ELEVATION

        raster = self.load_raster(tile)
        return lookup_elevation(tile, raster.grid, latitude, longitude)

    # -----------------------------------------------------------------------
    # Splitting
    # -----------------------------------------------------------------------
    def _write_sub_tile(self, target_dir: Path, sub_tile: SubTile) -> Path:
        payload = self.codec.encode(sub_tile.raster, name=sub_tile.name)
        archive_path = target_dir / sub_tile.descriptor.file_name
        write_single_raster(archive_path, f"{sub_tile.name}.tif", payload)
        return archive_path

    def split_tile(
        self,
        descriptor: TileDescriptor,
        target_dir: Path | str,
        latitude_span: float = 1.0,
        longitude_span: float = 1.0,
    ) -> list[Path]:
        """Split one tile and write its non-empty sub-tiles to target_dir.

        Raises:
            InvalidPartitionError: If the spans do not divide the tile
        """
        target = Path(target_dir)
        target.mkdir(parents=True, exist_ok=True)

        raster = self.load_raster(descriptor)
        sub_tiles = split_raster(raster, latitude_span, longitude_span)

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            written = list(pool.map(partial(self._write_sub_tile, target), sub_tiles))

        logger.info(
            "Split %s into %d sub-tiles", descriptor.file_name, len(written)
        )
        return written

    def split_into(
        self,
        target_dir: Path | str,
        latitude_span: float = 1.0,
        longitude_span: float = 1.0,
    ) -> "TileDirectory":
        """Split every tile of this directory and index the target directory.

        The target directory shares this directory's codec, worker count,
        grid cache size and index file name.
        """
        for descriptor in self.tiles().tiles:
            self.split_tile(descriptor, target_dir, latitude_span, longitude_span)

        target = TileDirectory(
            target_dir,
            codec=self.codec,
            max_workers=self.max_workers,
            grid_cache_size=self.grid_cache_size,
            index_file_name=self.index_file_name,
        )
        target.rebuild_index()
        return target
