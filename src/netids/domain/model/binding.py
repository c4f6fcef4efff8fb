"""Bindings between network ids and scene nodes."""

from __future__ import annotations

import weakref
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from netids.domain.ports.scene import Node


@dataclass(frozen=True, slots=True)
class PinDeclaration:
    """Reservation of a specific network id on a node.

    When ``locked`` the node's binding id must equal ``pinned_id``.
    """

    pinned_id: int
    locked: bool = False


class Binding:
    """One id to node pair plus the component signature recorded at last sync.

    The node is held weakly. ``node`` reads as ``None`` once the referent is
    gone or reports itself dead, which is how a dangling reference shows up.
    ``signature`` is ``None`` when it was never recorded.
    """

    __slots__ = ("_node_ref", "id", "signature", "source_path")

    def __init__(
        self,
        id: int,  # noqa: A002
        node: Node | None = None,
        *,
        signature: Sequence[str] | None = None,
        source_path: str | None = None,
    ) -> None:
        self.id = id
        self._node_ref: weakref.ref[Node] | None = None
        self.signature: tuple[str, ...] | None = (
            tuple(signature) if signature is not None else None
        )
        # hierarchy path this binding was read from, if it came from a file
        self.source_path = source_path
        self.node = node

    @property
    def node(self) -> Node | None:
        if self._node_ref is None:
            return None
        node = self._node_ref()
        if node is None or not node.alive:
            return None
        return node

    @node.setter
    def node(self, value: Node | None) -> None:
        self._node_ref = weakref.ref(value) if value is not None else None

    @property
    def had_node(self) -> bool:
        """True if a node was ever attached, even if it has since gone away."""
        return self._node_ref is not None

    def refers_to(self, node: Node | None) -> bool:
        return node is not None and self.node is node

    def copy(self) -> Binding:
        clone = Binding(self.id, signature=self.signature, source_path=self.source_path)
        clone._node_ref = self._node_ref
        return clone

    def update_from(self, other: Binding) -> None:
        self.id = other.id
        self.signature = other.signature
        self.source_path = other.source_path
        self._node_ref = other._node_ref

    def __repr__(self) -> str:
        return (
            f"Binding(id={self.id!r}, node={self.node!r}, signature={self.signature!r}, "
            f"source_path={self.source_path!r})"
        )
