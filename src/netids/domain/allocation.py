"""Network id allocation.

Batch assignment handles pinned nodes first so that their reserved ids are
taken before the linear scan hands out ids to everything else. A failure
stops the batch where it is; bindings inserted earlier in the same call are
left in place and reported on the result, so hosts that need all-or-nothing
semantics wrap the call in a unit of work and roll back on ``result.error``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from netids.config.registry import RegistryConfig, get_registry_config
from netids.domain.errors import (
    AllocationError,
    AllocationExhausted,
    InvalidPinnedId,
    PinCollision,
)
from netids.domain.model.binding import Binding
from netids.domain.model.changes import RegistryChange

if TYPE_CHECKING:
    from collections.abc import Iterable

    from netids.domain.matching import ComponentSignatureMatcher
    from netids.domain.model.binding import PinDeclaration
    from netids.domain.model.registry import IdentifierRegistry
    from netids.domain.ports.scene import Node, SceneGraph

log = logging.getLogger(__name__)


@dataclass(slots=True)
class AssignmentResult:
    """Outcome of one batch assignment."""

    inserted: list[Binding] = field(default_factory=list["Binding"])
    skipped: list[Node] = field(default_factory=list["Node"])
    error: AllocationError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def change(self) -> RegistryChange:
        return RegistryChange(added=tuple(self.inserted))

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise self.error


@dataclass(slots=True)
class IdAllocator:
    scene: SceneGraph
    matcher: ComponentSignatureMatcher
    config: RegistryConfig = field(default_factory=get_registry_config)

    def next_available_id(self, registry: IdentifierRegistry) -> int | None:
        """Lowest free id in range, or ``None`` once the range is exhausted."""
        return self._next_free(registry.ids_in_use(), start=self.config.min_id)

    def assign_batch(self, nodes: Iterable[Node], registry: IdentifierRegistry) -> AssignmentResult:
        result = AssignmentResult()
        pinned: list[tuple[Node, PinDeclaration]] = []
        unpinned: list[Node] = []
        for node in _unique(nodes):
            declaration = self.scene.pin_declaration(node)
            if declaration is not None:
                pinned.append((node, declaration))
            else:
                unpinned.append(node)

        in_use = registry.ids_in_use()
        bound = registry.bound_nodes()

        for node, declaration in pinned:
            if any(node is other for other in bound):
                result.skipped.append(node)
                continue
            pinned_id = declaration.pinned_id
            if not self.config.is_valid(pinned_id):
                result.error = InvalidPinnedId(pinned_id, node)
                log.error("%s", result.error)
                return result
            if pinned_id in in_use:
                result.error = PinCollision(pinned_id, node)
                log.error("%s", result.error)
                return result
            self._insert(registry, result, node, pinned_id)
            in_use.add(pinned_id)
            bound.append(node)

        cursor = self.config.min_id
        for node in unpinned:
            if any(node is other for other in bound):
                result.skipped.append(node)
                continue
            next_id = self._next_free(in_use, start=cursor)
            if next_id is None:
                result.error = AllocationExhausted(self.config.min_id, self.config.max_id)
                log.error("%s", result.error)
                return result
            self._insert(registry, result, node, next_id)
            in_use.add(next_id)
            bound.append(node)
            cursor = next_id + 1

        return result

    def _insert(
        self,
        registry: IdentifierRegistry,
        result: AssignmentResult,
        node: Node,
        binding_id: int,
    ) -> None:
        binding = Binding(binding_id, node)
        registry.append(binding)
        self.matcher.resync(binding)
        result.inserted.append(binding)

    def _next_free(self, in_use: set[int], *, start: int) -> int | None:
        for candidate in range(max(start, self.config.min_id), self.config.max_id):
            if candidate not in in_use:
                return candidate
        return None


def _unique(nodes: Iterable[Node]) -> list[Node]:
    unique: list[Node] = []
    for node in nodes:
        if node is None or not node.alive or any(node is seen for seen in unique):
            continue
        unique.append(node)
    return unique
