"""Registry change notifications.

Mutations return a ``RegistryChange`` instead of firing callbacks; the host
decides when to re-render.
"""

from __future__ import annotations

from dataclasses import dataclass

from netids.domain.model.binding import Binding  # noqa: TC001


@dataclass(frozen=True, slots=True)
class RegistryChange:
    added: tuple[Binding, ...] = ()
    replaced: tuple[tuple[Binding | None, Binding], ...] = ()
    removed: tuple[Binding | None, ...] = ()
    updated: tuple[Binding, ...] = ()

    def __bool__(self) -> bool:
        return bool(self.added or self.replaced or self.removed or self.updated)

    def __add__(self, other: RegistryChange) -> RegistryChange:
        return RegistryChange(
            added=self.added + other.added,
            replaced=self.replaced + other.replaced,
            removed=self.removed + other.removed,
            updated=self.updated + other.updated,
        )

    @classmethod
    def combine(cls, *changes: RegistryChange) -> RegistryChange:
        combined = cls()
        for change in changes:
            combined += change
        return combined

    def describe(self) -> str:
        return (
            f"added={len(self.added)}, replaced={len(self.replaced)}, "
            f"removed={len(self.removed)}, updated={len(self.updated)}"
        )
