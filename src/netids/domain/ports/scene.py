"""Scene-graph collaborator contract.

The engine never owns nodes. It holds weak references to them and compares
them by identity only; everything else it learns about a node comes through
this port.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from netids.domain.model.binding import PinDeclaration
    from netids.domain.model.signature import TypeHandle


@runtime_checkable
class Node(Protocol):
    """Opaque scene element. ``alive`` turns false once the scene destroys it."""

    @property
    def alive(self) -> bool: ...


@runtime_checkable
class Component(Protocol):
    """A networked behaviour attached to a node."""

    @property
    def type_handle(self) -> TypeHandle: ...


@runtime_checkable
class SceneGraph(Protocol):
    """Read-only queries the engine issues against the host scene."""

    def find_networked_nodes(self) -> Sequence[Node]:
        """Nodes carrying at least one networked component, in scene order."""
        ...

    def find_pinned_nodes(self) -> Sequence[tuple[Node, PinDeclaration]]: ...

    def networked_components(self, node: Node) -> Sequence[Component]:
        """All networked components on ``node`` in their live order."""
        ...

    def components_of_type(self, node: Node, type_handle: TypeHandle) -> Sequence[Component]: ...

    def hierarchy_path(self, node: Node) -> str | None: ...

    def resolve_path(self, path: str) -> Node | None: ...

    def pin_declaration(self, node: Node) -> PinDeclaration | None: ...

    def is_persistent(self, node: Node) -> bool:
        """Whether ``node`` sits under persisted player state."""
        ...
