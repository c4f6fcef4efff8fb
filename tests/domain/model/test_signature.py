from __future__ import annotations

from netids.adapters.memory_scene import StaticTypeCatalog
from netids.domain.model.binding import Binding
from netids.domain.model.changes import RegistryChange
from netids.domain.model.signature import (
    ChainedTypeCatalog,
    SignatureEntry,
    TypeHandle,
    resolve_signature,
)


def test_chained_catalog_first_match_wins() -> None:
    engine = StaticTypeCatalog(name="engine", type_names={"Door", "Pickup"})
    project = StaticTypeCatalog(name="project", type_names={"Door", "Scoreboard"})
    chained = ChainedTypeCatalog([engine, project])

    assert chained.resolve_type("Door") == TypeHandle("Door", catalog="engine")
    assert chained.resolve_type("Scoreboard") == TypeHandle("Scoreboard", catalog="project")
    assert chained.resolve_type("Unknown") is None
    assert chained.resolve_type("  ") is None


def test_resolve_signature_tags_unresolved_names() -> None:
    catalog = StaticTypeCatalog(type_names={"Door"})

    signature = resolve_signature(["Door", "Removed", "Door"], catalog)

    assert signature == (
        SignatureEntry("Door", TypeHandle("Door", catalog="scene")),
        SignatureEntry("Removed", None),
        SignatureEntry("Door", TypeHandle("Door", catalog="scene")),
    )
    assert [entry.resolved for entry in signature] == [True, False, True]


def test_registry_change_combines_and_describes() -> None:
    first = Binding(10)
    second = Binding(11)

    combined = RegistryChange.combine(
        RegistryChange(added=(first,)),
        RegistryChange(),
        RegistryChange(removed=(None,), updated=(second,)),
    )

    assert combined
    assert not RegistryChange()
    assert combined.added == (first,)
    assert combined.describe() == "added=1, replaced=0, removed=1, updated=1"
