"""Type catalog contract used to resolve recorded component type names."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from netids.domain.model.signature import TypeHandle


@runtime_checkable
class TypeCatalog(Protocol):
    def resolve_type(self, name: str) -> TypeHandle | None: ...
