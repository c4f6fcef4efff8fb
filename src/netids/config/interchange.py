"""Import/export file configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .errors import ConfigurationError

EXPORT_SUFFIX: Final[str] = "_NetworkIDs.json"
IMPORT_SUFFIXES: Final[tuple[str, ...]] = (".json", ".txt")


@dataclass(frozen=True, slots=True)
class InterchangeConfig:
    export_dir: Path
    export_suffix: str = EXPORT_SUFFIX
    import_suffixes: tuple[str, ...] = IMPORT_SUFFIXES

    def export_path(self, scene_name: str) -> Path:
        return self.export_dir.expanduser().resolve() / f"{scene_name}{self.export_suffix}"

    def looks_importable(self, path: Path) -> bool:
        """Advisory suffix check; content parsing is the only real validation."""
        return path.suffix.lower() in self.import_suffixes


def get_interchange_config() -> InterchangeConfig:
    env_dir = os.getenv("NETIDS_EXPORT_DIR")
    if not env_dir:
        return InterchangeConfig(export_dir=Path.cwd())
    export_dir = Path(env_dir).expanduser()
    if export_dir.exists() and not export_dir.is_dir():
        raise ConfigurationError(f"NETIDS_EXPORT_DIR is not a directory: {export_dir}")
    return InterchangeConfig(export_dir=export_dir)
