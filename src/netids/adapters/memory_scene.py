"""In-memory scene graph.

Hosts the engine outside an editor: the CLI loads one from a scene snapshot
file and tests build them directly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from netids.domain.model.signature import TypeHandle

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from netids.domain.model.binding import PinDeclaration
    from netids.domain.ports.scene import Node


class Capability(StrEnum):
    PLAYER_OBJECT = "player_object"
    ENABLE_PERSISTENCE = "enable_persistence"


@dataclass(eq=False)
class NetworkComponent:
    type_handle: TypeHandle

    def __repr__(self) -> str:
        return f"NetworkComponent({self.type_handle.name})"


@dataclass(eq=False)
class SceneNode:
    name: str
    parent: SceneNode | None = None
    children: list[SceneNode] = field(default_factory=list["SceneNode"])
    components: list[NetworkComponent] = field(default_factory=list[NetworkComponent])
    pin: PinDeclaration | None = None
    capabilities: set[Capability] = field(default_factory=set[Capability])
    alive: bool = True

    def __repr__(self) -> str:
        return f"SceneNode({self.name!r})"

    def ancestors_and_self(self) -> Iterator[SceneNode]:
        node: SceneNode | None = self
        while node is not None:
            yield node
            node = node.parent

    def child(self, name: str) -> SceneNode | None:
        for candidate in self.children:
            if candidate.name == name:
                return candidate
        return None


@dataclass(slots=True)
class StaticTypeCatalog:
    """Type catalog over a fixed set of component type names."""

    name: str = "scene"
    type_names: set[str] = field(default_factory=set[str])

    def resolve_type(self, name: str) -> TypeHandle | None:
        if name not in self.type_names:
            return None
        return TypeHandle(name, catalog=self.name)

    def register(self, name: str) -> TypeHandle:
        self.type_names.add(name)
        return TypeHandle(name, catalog=self.name)


@dataclass(slots=True)
class InMemoryScene:
    name: str = "Scene"
    roots: list[SceneNode] = field(default_factory=list[SceneNode])
    catalog: StaticTypeCatalog = field(default_factory=StaticTypeCatalog)

    # Building

    def add(
        self,
        name: str,
        *,
        parent: SceneNode | None = None,
        components: Iterable[str] = (),
        pin: PinDeclaration | None = None,
        capabilities: Iterable[Capability] = (),
    ) -> SceneNode:
        node = SceneNode(name=name, parent=parent, pin=pin, capabilities=set(capabilities))
        for type_name in components:
            node.components.append(NetworkComponent(self.catalog.register(type_name)))
        (parent.children if parent is not None else self.roots).append(node)
        return node

    def destroy(self, node: SceneNode) -> None:
        """Remove ``node`` and its subtree; bindings to them start to dangle."""

        siblings = node.parent.children if node.parent is not None else self.roots
        siblings[:] = [candidate for candidate in siblings if candidate is not node]
        stack = [node]
        while stack:
            current = stack.pop()
            current.alive = False
            stack.extend(current.children)

    def walk(self) -> Iterator[SceneNode]:
        """Depth-first, pre-order, in sibling order."""

        stack = list(reversed(self.roots))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    # SceneGraph

    def find_networked_nodes(self) -> list[SceneNode]:
        return [node for node in self.walk() if node.components]

    def find_pinned_nodes(self) -> list[tuple[Node, PinDeclaration]]:
        return [(node, node.pin) for node in self.walk() if node.pin is not None]

    def networked_components(self, node: Node) -> list[NetworkComponent]:
        scene_node = _as_scene_node(node)
        return list(scene_node.components) if scene_node is not None else []

    def components_of_type(self, node: Node, type_handle: TypeHandle) -> list[NetworkComponent]:
        return [
            component
            for component in self.networked_components(node)
            if component.type_handle == type_handle
        ]

    def hierarchy_path(self, node: Node) -> str | None:
        scene_node = _as_scene_node(node)
        if scene_node is None:
            return None
        names = [current.name for current in scene_node.ancestors_and_self()]
        return "/" + "/".join(reversed(names))

    def resolve_path(self, path: str) -> SceneNode | None:
        """First node whose hierarchy path equals ``path``; the leading slash is optional."""

        if not path or not path.strip():
            return None
        relative = path.strip()
        if len(relative) > 1 and relative.startswith("/"):
            relative = relative[1:]
        for root in self.roots:
            if root.name == relative:
                return root
            prefix = root.name + "/"
            if relative.startswith(prefix):
                found = _descend(root, relative[len(prefix) :])
                if found is not None:
                    return found
        return None

    def pin_declaration(self, node: Node) -> PinDeclaration | None:
        scene_node = _as_scene_node(node)
        return scene_node.pin if scene_node is not None else None

    def is_persistent(self, node: Node) -> bool:
        scene_node = _as_scene_node(node)
        if scene_node is None:
            return False
        chain = list(scene_node.ancestors_and_self())
        return any(Capability.PLAYER_OBJECT in current.capabilities for current in chain) and any(
            Capability.ENABLE_PERSISTENCE in current.capabilities for current in chain
        )


def _as_scene_node(node: Node | None) -> SceneNode | None:
    if isinstance(node, SceneNode) and node.alive:
        return node
    return None


def _descend(root: SceneNode, relative: str) -> SceneNode | None:
    node: SceneNode | None = root
    for segment in relative.split("/"):
        if node is None:
            return None
        node = node.child(segment)
    return node
