"""Scene snapshot files: a JSON scene tree plus its registry."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from .schema import BindingPayload, NodePayload, PinPayload, SceneFilePayload
from .translator import dump_scene, parse_scene

if TYPE_CHECKING:
    from pathlib import Path

    from netids.adapters.memory_scene import InMemoryScene
    from netids.domain.model.registry import IdentifierRegistry

log = getLogger(__name__)


def load_scene_file(path: Path) -> tuple[InMemoryScene, IdentifierRegistry]:
    payload = SceneFilePayload.model_validate_json(path.read_text(encoding="utf-8"))
    scene, registry = parse_scene(payload)
    log.debug("Loaded scene %s with %s registry entries from %s", scene.name, len(registry), path)
    return scene, registry


def save_scene_file(path: Path, scene: InMemoryScene, registry: IdentifierRegistry) -> None:
    payload = dump_scene(scene, registry)
    path.write_text(
        payload.model_dump_json(indent=2) + "\n",
        encoding="utf-8",
    )
    log.debug("Saved scene %s to %s", scene.name, path)


__all__ = [
    "BindingPayload",
    "NodePayload",
    "PinPayload",
    "SceneFilePayload",
    "dump_scene",
    "load_scene_file",
    "parse_scene",
    "save_scene_file",
]
