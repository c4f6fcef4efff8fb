"""Component signature matching.

A binding records the ordered component type names its node carried at last
sync. Drift is detected by greedily pairing each recorded type with the first
unconsumed live component of exactly that type, then checking that nothing
is left over on either side and that the pairing preserves order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from netids.domain.model.changes import RegistryChange
from netids.domain.model.signature import resolve_signature

if TYPE_CHECKING:
    from collections.abc import Sequence

    from netids.domain.model.binding import Binding
    from netids.domain.model.signature import Signature
    from netids.domain.ports.scene import Component, Node, SceneGraph
    from netids.domain.ports.types import TypeCatalog


@dataclass(slots=True)
class ComponentSignatureMatcher:
    scene: SceneGraph
    types: TypeCatalog

    def matches(self, recorded: Sequence[str], live: Sequence[str]) -> bool:
        """Compare recorded type names against live type names, both in order.

        A recorded name no catalog can resolve never pairs with a live component,
        so it always counts as a mismatch.
        """

        signature = resolve_signature(recorded, self.types)
        if any(not entry.resolved for entry in signature):
            return False
        return tuple(recorded) == tuple(live)

    def has_mismatch(self, node: Node, recorded: Sequence[str]) -> bool:
        return _has_mismatch(self.scene, node, resolve_signature(recorded, self.types))

    def binding_has_mismatch(self, binding: Binding) -> bool:
        """False for bindings without a node or without a recorded signature."""

        node = binding.node
        if node is None or binding.signature is None:
            return False
        return self.has_mismatch(node, binding.signature)

    def live_signature(self, node: Node) -> tuple[str, ...]:
        return tuple(
            component.type_handle.name for component in self.scene.networked_components(node)
        )

    def resync(self, binding: Binding) -> RegistryChange:
        """Overwrite the recorded signature with the node's live component order."""

        node = binding.node
        if node is None:
            return RegistryChange()
        binding.signature = self.live_signature(node)
        return RegistryChange(updated=(binding,))


def _has_mismatch(scene: SceneGraph, node: Node, signature: Signature) -> bool:
    live = list(scene.networked_components(node))
    if not live and not signature:
        return False

    missing = False
    matched: list[Component] = []
    pool = list(live)
    for entry in signature:
        if entry.handle is None:
            continue
        candidates = scene.components_of_type(node, entry.handle)
        if not pool:
            missing = True
            break
        for component in candidates:
            if _contains(matched, component) or not _contains(pool, component):
                continue
            matched.append(component)
            _discard(pool, component)
            break

    missing |= len(matched) != len(signature)
    if not missing and not pool:
        # every live component was consumed; compare in live order to catch reordering
        for component, entry in zip(live, signature, strict=True):
            if component.type_handle.name != entry.type_name:
                missing = True
                break

    return missing or bool(pool)


def _contains(components: list[Component], component: Component) -> bool:
    return any(candidate is component for candidate in components)


def _discard(components: list[Component], component: Component) -> None:
    for index, candidate in enumerate(components):
        if candidate is component:
            del components[index]
            return
