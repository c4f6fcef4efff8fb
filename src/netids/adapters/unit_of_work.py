"""Snapshot-based unit of work for an in-memory registry."""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from types import TracebackType

    from netids.domain.model.registry import IdentifierRegistry, RegistrySnapshot


class UnitOfWorkError(RuntimeError):
    """Raised when a unit of work is used outside its ``with`` block."""


class SnapshotUnitOfWork:
    """Restores the registry to its entry state unless ``commit`` was called.

    Leaving the block with an exception, or without committing, rolls back,
    the same way closing an uncommitted session discards its changes.
    """

    def __init__(self, registry: IdentifierRegistry) -> None:
        self._registry = registry
        self._snapshot: RegistrySnapshot | None = None
        self._committed = False

    @property
    def registry(self) -> IdentifierRegistry:
        return self._registry

    def __enter__(self) -> SnapshotUnitOfWork:
        if self._snapshot is not None:
            raise UnitOfWorkError("Unit of work already entered")
        self._snapshot = self._registry.snapshot()
        self._committed = False
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        if exc_type is not None or not self._committed:
            self.rollback()
        self._snapshot = None
        return False

    def commit(self) -> None:
        if self._snapshot is None:
            raise UnitOfWorkError("Unit of work not entered")
        self._snapshot = self._registry.snapshot()
        self._committed = True

    def rollback(self) -> None:
        if self._snapshot is None:
            raise UnitOfWorkError("Unit of work not entered")
        self._registry.restore(self._snapshot)
        self._committed = False


if TYPE_CHECKING:
    from netids.domain.ports.unit_of_work import RegistryUnitOfWork

    _uow_check: RegistryUnitOfWork = SnapshotUnitOfWork(IdentifierRegistry())
