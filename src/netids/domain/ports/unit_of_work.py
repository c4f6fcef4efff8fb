"""Unit-of-work boundary around one user-visible registry action."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

    from netids.domain.model.registry import IdentifierRegistry


@runtime_checkable
class RegistryUnitOfWork(Protocol):
    """Either every mutation made inside the block stays, or none does."""

    @property
    def registry(self) -> IdentifierRegistry: ...

    def __enter__(self) -> RegistryUnitOfWork: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...
