"""Component signatures: recorded type names tagged with their resolved type."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from netids.domain.ports.types import TypeCatalog


@dataclass(frozen=True, slots=True)
class TypeHandle:
    """Concrete component type as known to one type catalog."""

    name: str
    catalog: str = ""


@dataclass(frozen=True, slots=True)
class SignatureEntry:
    """One recorded type name; ``handle`` is ``None`` when no catalog knows it."""

    type_name: str
    handle: TypeHandle | None

    @property
    def resolved(self) -> bool:
        return self.handle is not None


type Signature = tuple[SignatureEntry, ...]


@dataclass(slots=True)
class ChainedTypeCatalog:
    """Search several catalogs in order; the first one that knows a name wins."""

    catalogs: list[TypeCatalog] = field(default_factory=list["TypeCatalog"])

    def resolve_type(self, name: str) -> TypeHandle | None:
        if not name or not name.strip():
            return None
        for catalog in self.catalogs:
            handle = catalog.resolve_type(name)
            if handle is not None:
                return handle
        return None


def resolve_signature(recorded: Sequence[str], catalog: TypeCatalog) -> Signature:
    """Tag every recorded name with its resolved type, once."""

    cache: dict[str, TypeHandle | None] = {}
    entries: list[SignatureEntry] = []
    for name in recorded:
        if name not in cache:
            cache[name] = catalog.resolve_type(name)
        entries.append(SignatureEntry(type_name=name, handle=cache[name]))
    return tuple(entries)
