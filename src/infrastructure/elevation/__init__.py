"""Infrastructure adapters for the elevation bounded context.

This module provides the infrastructure layer implementations for elevation
tiles: the GeoTIFF codec, zip archives, the tile index cache and the tile
directory that ties them together.
"""

from .geotiff_codec import GeoTiffCodec
from .settings import TileSettings
from .tile_directory import TileDirectory
from .tile_index_cache import JsonTileIndexCache

__all__ = ["GeoTiffCodec", "JsonTileIndexCache", "TileDirectory", "TileSettings"]
