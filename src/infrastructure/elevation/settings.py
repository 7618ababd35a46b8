"""Runtime configuration for tile directories and the command line.

Values are loaded with Dynaconf from, in increasing priority:
1. ``elevation.toml`` in the current directory (optional)
2. Files passed as ``settings_files`` / ``ELEVATION_SETTINGS_FILE_FOR_DYNACONF``
3. ``ELEVATION_*`` environment variables (e.g. ``ELEVATION_MAX_WORKERS=4``)

and then validated by the TileSettings model.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from dynaconf import Dynaconf
from pydantic import BaseModel, ConfigDict, Field

from .tile_index_cache import DEFAULT_INDEX_FILE_NAME

ENVVAR_PREFIX = "ELEVATION"


class TileSettings(BaseModel):
    """Settings for a TileDirectory (validated at construction)."""

    tiles_dir: Path = Path(".")
    index_file_name: str = Field(default=DEFAULT_INDEX_FILE_NAME, min_length=1)
    max_workers: int | None = Field(default=None, gt=0)  # None = CPU count
    grid_cache_size: int = Field(default=0, ge=0)  # 0 disables the LRU cache
    log_level: str = "WARNING"

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_env(
        cls, settings_files: Sequence[Path | str] | None = None
    ) -> "TileSettings":
        """Load settings from settings files and ``ELEVATION_*`` variables.

        Unset keys keep their defaults; invalid values raise
        pydantic.ValidationError.
        """
        files = [Path.cwd() / "elevation.toml"]
        files.extend(Path(f) for f in settings_files or ())
        source = Dynaconf(
            envvar_prefix=ENVVAR_PREFIX,
            settings_files=[str(f) for f in files],
            environments=False,
            load_dotenv=False,
        )
        values = {}
        for name in cls.model_fields:
            value = source.get(name)
            if value is not None and value != "":
                values[name] = value
        return cls.model_validate(values)
