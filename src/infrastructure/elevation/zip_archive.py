"""Single-entry zip archives holding one GeoTIFF each."""

from __future__ import annotations

import logging
import zipfile
from pathlib import Path

from domain.elevation.errors import CorruptSourceError

logger = logging.getLogger(__name__)

RASTER_SUFFIX = ".tif"


def read_single_raster(archive_path: Path | str) -> bytes:
    """Return the bytes of the one ``.tif`` entry in an archive.

    Raises:
        FileNotFoundError: If the archive does not exist
        CorruptSourceError: If the archive is unreadable or does not hold
            exactly one raster entry
    """
    path = Path(archive_path)
    try:
        with zipfile.ZipFile(path) as archive:
            entries = [
                info
                for info in archive.infolist()
                if info.filename.lower().endswith(RASTER_SUFFIX)
            ]
            if len(entries) != 1:
                raise CorruptSourceError(
                    f"{path.name}: expected one {RASTER_SUFFIX} entry, found {len(entries)}"
                )
            return archive.read(entries[0])
    except (zipfile.BadZipFile, zipfile.LargeZipFile) as e:
        raise CorruptSourceError(f"{path.name}: unreadable archive ({e})") from e


def write_single_raster(archive_path: Path | str, entry_name: str, payload: bytes) -> None:
    """Write a new deflate-compressed archive with exactly one entry."""
    path = Path(archive_path)
    with zipfile.ZipFile(
        path, mode="w", compression=zipfile.ZIP_DEFLATED, compresslevel=9
    ) as archive:
        archive.writestr(entry_name, payload)
    logger.debug("Wrote %s (%d bytes raster)", path.name, len(payload))
