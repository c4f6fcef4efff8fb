"""Translate scene snapshot payloads to and from the in-memory scene."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from netids.adapters.memory_scene import InMemoryScene, SceneNode
from netids.domain.model.binding import Binding, PinDeclaration
from netids.domain.model.registry import IdentifierRegistry

from .schema import BindingPayload, NodePayload, PinPayload, SceneFilePayload

if TYPE_CHECKING:
    from collections.abc import Iterable


log = getLogger(__name__)


def parse_scene(payload: SceneFilePayload) -> tuple[InMemoryScene, IdentifierRegistry]:
    scene = InMemoryScene(name=payload.name)
    for node_payload in payload.nodes:
        _add_node(scene, node_payload, parent=None)

    nodes_by_path = _nodes_by_path(scene)
    bindings: list[Binding | None] = []
    dangling = 0
    for entry in payload.registry:
        if entry is None:
            bindings.append(None)
            continue
        node = (
            _pick(nodes_by_path, entry.path, entry.occurrence) if entry.path is not None else None
        )
        if entry.path is not None and node is None:
            dangling += 1
        bindings.append(
            Binding(entry.id, node, signature=entry.signature, source_path=entry.path)
        )
    if dangling:
        log.warning("%s registry entries in %s point to missing nodes", dangling, payload.name)
    return scene, IdentifierRegistry(bindings)


def dump_scene(scene: InMemoryScene, registry: IdentifierRegistry) -> SceneFilePayload:
    nodes_by_path = _nodes_by_path(scene)
    return SceneFilePayload(
        name=scene.name,
        nodes=[_node_payload(node) for node in scene.roots],
        registry=[_binding_payload(nodes_by_path, scene, binding) for binding in registry],
    )


def _add_node(scene: InMemoryScene, payload: NodePayload, *, parent: SceneNode | None) -> None:
    pin = (
        PinDeclaration(payload.pin.pinned_id, locked=payload.pin.locked)
        if payload.pin is not None
        else None
    )
    node = scene.add(
        payload.name,
        parent=parent,
        components=payload.components,
        pin=pin,
        capabilities=payload.capabilities,
    )
    for child in payload.children:
        _add_node(scene, child, parent=node)


def _node_payload(node: SceneNode) -> NodePayload:
    return NodePayload(
        name=node.name,
        components=[component.type_handle.name for component in node.components],
        capabilities=sorted(node.capabilities),
        pin=(
            PinPayload(pinned_id=node.pin.pinned_id, locked=node.pin.locked)
            if node.pin is not None
            else None
        ),
        children=[_node_payload(child) for child in node.children],
    )


def _binding_payload(
    nodes_by_path: dict[str, list[SceneNode]],
    scene: InMemoryScene,
    binding: Binding | None,
) -> BindingPayload | None:
    if binding is None:
        return None
    node = binding.node
    if node is None:
        # a binding whose node is gone keeps the path it was loaded with
        return BindingPayload(
            id=binding.id,
            path=binding.source_path,
            signature=_optional_list(binding.signature),
        )
    path = scene.hierarchy_path(node)
    siblings = nodes_by_path.get(path, []) if path is not None else []
    occurrence = next(
        (index for index, candidate in enumerate(siblings) if candidate is node), 0
    )
    return BindingPayload(
        id=binding.id,
        path=path,
        occurrence=occurrence,
        signature=_optional_list(binding.signature),
    )


def _optional_list(values: Iterable[str] | None) -> list[str] | None:
    return list(values) if values is not None else None


def _nodes_by_path(scene: InMemoryScene) -> dict[str, list[SceneNode]]:
    """Live nodes grouped by hierarchy path, each group in scene order."""

    groups: dict[str, list[SceneNode]] = {}
    for node in scene.walk():
        path = scene.hierarchy_path(node)
        if path is not None:
            groups.setdefault(path, []).append(node)
    return groups


def _pick(
    nodes_by_path: dict[str, list[SceneNode]], path: str, occurrence: int
) -> SceneNode | None:
    key = path.strip()
    if not key.startswith("/"):
        key = "/" + key
    candidates = nodes_by_path.get(key, [])
    return candidates[occurrence] if occurrence < len(candidates) else None
