"""Domain Ports for Elevation Tile I/O.

Defines interfaces (Protocols) that infrastructure adapters must implement.
No concrete I/O here.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from .value_objects import Raster, TileDescriptor


class RasterCodec(Protocol):
    """Port for decoding/encoding one raster container.

    Implementations must keep no shared decoder state between calls so that
    several tiles can be processed from worker threads at once.
    """

    def decode(self, payload: bytes) -> Raster:
        """Decode raster bytes; raise CorruptSourceError if unreadable."""
        ...

    def encode(self, raster: Raster, name: str | None = None) -> bytes:
        """Encode a raster, carrying its copy-through metadata.

        ``name`` is the tile's canonical identifier, recorded in the
        container's document name when the format has one.
        """
        ...


class TileIndexStore(Protocol):
    """Port for the persisted per-directory tile index."""

    def exists(self) -> bool: ...

    def load(self) -> list[TileDescriptor]: ...

    def save(self, descriptors: Sequence[TileDescriptor]) -> None: ...
