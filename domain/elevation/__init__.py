"""Elevation Bounded Context.

Responsible for locating elevation tiles and reading or splitting them:
- Value Objects: TileDescriptor, TileIndex, ElevationGrid, Raster, SubTile
- Services: lookup_elevation, split_raster, tile_name
"""
