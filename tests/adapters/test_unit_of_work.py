from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from netids.adapters.unit_of_work import SnapshotUnitOfWork, UnitOfWorkError
from netids.domain.model import Binding, IdentifierRegistry
from netids.domain.ports import RegistryUnitOfWork

if TYPE_CHECKING:
    from netids.adapters.memory_scene import SceneNode


def test_commit_keeps_changes(child: SceneNode) -> None:
    registry = IdentifierRegistry()

    with SnapshotUnitOfWork(registry) as uow:
        uow.registry.append(Binding(10, child))
        uow.commit()

    assert [binding.id for binding in registry.non_null()] == [10]


def test_leaving_without_commit_rolls_back(child: SceneNode) -> None:
    binding = Binding(10, child)
    registry = IdentifierRegistry([binding])

    with SnapshotUnitOfWork(registry) as uow:
        uow.registry.clear()
        binding.id = 11

    assert registry.bindings == (binding,)
    assert binding.id == 10


def test_exception_rolls_back_and_propagates(child: SceneNode) -> None:
    registry = IdentifierRegistry([Binding(10, child)])
    before = registry.bindings

    with pytest.raises(RuntimeError, match="boom"), SnapshotUnitOfWork(registry) as uow:
        uow.registry.append(Binding(11))
        uow.commit()
        uow.registry.append(Binding(12))
        raise RuntimeError("boom")

    assert registry.bindings[:1] == before
    assert [binding.id for binding in registry.non_null()] == [10, 11]


def test_requires_with_block() -> None:
    uow = SnapshotUnitOfWork(IdentifierRegistry())

    with pytest.raises(UnitOfWorkError):
        uow.commit()
    with pytest.raises(UnitOfWorkError):
        uow.rollback()


def test_satisfies_port() -> None:
    assert isinstance(SnapshotUnitOfWork(IdentifierRegistry()), RegistryUnitOfWork)
