"""Ordered collection of bindings for one scene.

Insertion order is significant: it is the "file" order shown to users and the
order in which lookups return their first match. Null slots are allowed; they
show up as ``NULL_BINDING`` issues rather than being silently dropped.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from netids.domain.errors import BindingOccupied, NodeAlreadyBound
from netids.domain.model.changes import RegistryChange

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator

    from netids.domain.model.binding import Binding
    from netids.domain.ports.scene import Node


# each live binding paired with a copy of its state at snapshot time
type RegistrySnapshot = tuple[tuple[Binding, Binding] | None, ...]


class IdentifierRegistry:
    """Mutable, ordered id to node bindings."""

    def __init__(self, bindings: Iterable[Binding | None] = ()) -> None:
        self._bindings: list[Binding | None] = list(bindings)

    def __len__(self) -> int:
        return len(self._bindings)

    def __iter__(self) -> Iterator[Binding | None]:
        return iter(tuple(self._bindings))

    def __getitem__(self, index: int) -> Binding | None:
        return self._bindings[index]

    def __repr__(self) -> str:
        return f"IdentifierRegistry({self._bindings!r})"

    @property
    def bindings(self) -> tuple[Binding | None, ...]:
        return tuple(self._bindings)

    def non_null(self) -> tuple[Binding, ...]:
        return tuple(binding for binding in self._bindings if binding is not None)

    # Queries

    def index_of(self, binding: Binding) -> int | None:
        for index, candidate in enumerate(self._bindings):
            if candidate is binding:
                return index
        return None

    def find_by_node(self, node: Node | None) -> Binding | None:
        if node is None:
            return None
        for binding in self._bindings:
            if binding is not None and binding.refers_to(node):
                return binding
        return None

    def find_by_id(self, binding_id: int) -> Binding | None:
        for binding in self._bindings:
            if binding is not None and binding.id == binding_id:
                return binding
        return None

    def node_for_id(self, binding_id: int) -> Node | None:
        binding = self.find_by_id(binding_id)
        return binding.node if binding is not None else None

    def ids_in_use(self) -> set[int]:
        return {binding.id for binding in self._bindings if binding is not None}

    def bound_nodes(self) -> list[Node]:
        nodes: list[Node] = []
        for binding in self._bindings:
            node = binding.node if binding is not None else None
            if node is not None:
                nodes.append(node)
        return nodes

    # Mutations

    def append(self, binding: Binding | None) -> RegistryChange:
        self._bindings.append(binding)
        if binding is None:
            return RegistryChange()
        return RegistryChange(added=(binding,))

    def insert_or_replace(self, binding: Binding) -> RegistryChange:
        """Replace the first binding sharing ``binding``'s id or node, else append.

        The replacement keeps the original index. Any further bindings that would
        now duplicate the id or node are dropped so the merged registry does not
        gain conflicts of its own making.
        """

        target = self._first_conflicting_index(binding)
        if target is None:
            return self.append(binding)

        previous = self._bindings[target]
        if previous is binding:
            return RegistryChange()
        self._bindings[target] = binding

        removed: list[Binding | None] = []
        for index in range(len(self._bindings) - 1, -1, -1):
            if index == target:
                continue
            candidate = self._bindings[index]
            if candidate is not None and _conflicts(candidate, binding):
                removed.append(candidate)
                del self._bindings[index]

        return RegistryChange(replaced=((previous, binding),), removed=tuple(removed))

    def remove(self, binding: Binding) -> RegistryChange:
        index = self.index_of(binding)
        if index is None:
            return RegistryChange()
        del self._bindings[index]
        return RegistryChange(removed=(binding,))

    def remove_where(self, predicate: Callable[[Binding | None], bool]) -> RegistryChange:
        kept: list[Binding | None] = []
        removed: list[Binding | None] = []
        for binding in self._bindings:
            (removed if predicate(binding) else kept).append(binding)
        self._bindings = kept
        return RegistryChange(removed=tuple(removed))

    def remove_excluding(self, keep: Iterable[Node]) -> RegistryChange:
        """Drop every binding whose node is not in ``keep``.

        Null bindings and bindings whose node is gone are always dropped.
        """

        keep_nodes = list(keep)
        if not keep_nodes:
            return self.clear()

        def _drop(binding: Binding | None) -> bool:
            if binding is None:
                return True
            node = binding.node
            if node is None:
                return True
            return not any(node is kept for kept in keep_nodes)

        return self.remove_where(_drop)

    def clear(self) -> RegistryChange:
        removed = tuple(self._bindings)
        self._bindings.clear()
        return RegistryChange(removed=removed)

    def assign_node(self, binding: Binding, node: Node, *, force: bool = False) -> RegistryChange:
        """Attach ``node`` to an existing ``binding``.

        Refuses if ``node`` is already bound elsewhere, or if ``binding`` still
        holds a live node and ``force`` is not set.
        """

        if self.index_of(binding) is None:
            raise ValueError("binding not in registry")
        existing = self.find_by_node(node)
        if existing is not None:
            raise NodeAlreadyBound(node, existing.id)
        if binding.node is not None and not force:
            raise BindingOccupied(binding.id)
        binding.node = node
        return RegistryChange(updated=(binding,))

    # Transaction support

    def snapshot(self) -> RegistrySnapshot:
        return tuple(
            (binding, binding.copy()) if binding is not None else None
            for binding in self._bindings
        )

    def restore(self, snapshot: RegistrySnapshot) -> None:
        """Put back the slots and binding state captured by :meth:`snapshot`.

        Binding objects keep their identity, so references held by callers stay valid.
        """

        restored: list[Binding | None] = []
        for entry in snapshot:
            if entry is None:
                restored.append(None)
                continue
            binding, state = entry
            binding.update_from(state)
            restored.append(binding)
        self._bindings = restored

    def _first_conflicting_index(self, binding: Binding) -> int | None:
        for index, candidate in enumerate(self._bindings):
            if candidate is not None and _conflicts(candidate, binding):
                return index
        return None


def _conflicts(existing: Binding, incoming: Binding) -> bool:
    if existing.id == incoming.id:
        return True
    node = incoming.node
    return node is not None and existing.refers_to(node)
