"""JSON cache of a tile directory's index (``tiles.json``).

Implements the TileIndexStore port. The cache is never invalidated here:
callers rebuild it when the directory's set of tiles changes.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from domain.elevation.errors import CorruptSourceError
from domain.elevation.value_objects import TileDescriptor

logger = logging.getLogger(__name__)

DEFAULT_INDEX_FILE_NAME = "tiles.json"

_descriptors_adapter = TypeAdapter(list[TileDescriptor])


class JsonTileIndexCache:
    """Persisted list of TileDescriptors for one directory."""

    def __init__(
        self, directory: Path | str, file_name: str = DEFAULT_INDEX_FILE_NAME
    ) -> None:
        self.directory = Path(directory)
        self.path = self.directory / file_name

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> list[TileDescriptor]:
        """Read the cached descriptors.

        Raises:
            FileNotFoundError: If the cache file does not exist
            CorruptSourceError: If the cache is not a valid descriptor list
        """
        content = self.path.read_bytes()
        try:
            descriptors = _descriptors_adapter.validate_json(content)
        except ValidationError as e:
            raise CorruptSourceError(f"{self.path.name}: invalid tile index ({e})") from e
        logger.debug("Loaded %d tiles from %s", len(descriptors), self.path.name)
        return descriptors

    def save(self, descriptors: Sequence[TileDescriptor]) -> None:
        self.path.write_bytes(_descriptors_adapter.dump_json(list(descriptors), indent=2))
        logger.info("Saved %d tiles to %s", len(descriptors), self.path.name)
