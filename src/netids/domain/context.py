"""Per-call scene context.

Hosts build a ``SceneContext`` for each operation and pass it in explicitly;
nothing in the domain caches the current scene between calls.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from netids.config.registry import RegistryConfig, get_registry_config
from netids.domain.allocation import IdAllocator
from netids.domain.conflicts import ConflictDetector
from netids.domain.matching import ComponentSignatureMatcher

if TYPE_CHECKING:
    from netids.domain.model.registry import IdentifierRegistry
    from netids.domain.ports.scene import SceneGraph
    from netids.domain.ports.types import TypeCatalog


@dataclass(frozen=True, slots=True)
class SceneContext:
    scene: SceneGraph
    registry: IdentifierRegistry
    types: TypeCatalog
    name: str = "Scene"
    config: RegistryConfig = field(default_factory=get_registry_config)

    def matcher(self) -> ComponentSignatureMatcher:
        return ComponentSignatureMatcher(self.scene, self.types)

    def allocator(self) -> IdAllocator:
        return IdAllocator(self.scene, self.matcher(), self.config)

    def detector(self) -> ConflictDetector:
        return ConflictDetector(self.scene, self.matcher(), self.config)
