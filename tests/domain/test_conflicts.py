from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest

from netids.adapters.memory_scene import Capability
from netids.domain.conflicts import filter_bindings, order_bindings
from netids.domain.model import (
    Binding,
    IdentifierRegistry,
    IssueFlag,
    PinDeclaration,
    SortMode,
    primary_status,
)

if TYPE_CHECKING:
    from netids.adapters.memory_scene import InMemoryScene, SceneNode
    from netids.domain.context import SceneContext


@pytest.fixture
def messy_registry(
    scene: InMemoryScene, child: SceneNode, door: SceneNode
) -> IdentifierRegistry:
    gone = scene.add("Gone", components=["Door"])
    registry = IdentifierRegistry(
        [
            None,
            Binding(10, gone, signature=["Door"]),
            Binding(11, child),
            Binding(12, door, signature=["Pickup"]),
        ]
    )
    scene.destroy(gone)
    return registry


def test_classify_flags_every_slot(
    context: SceneContext, messy_registry: IdentifierRegistry
) -> None:
    issues = context.detector().classify(messy_registry)

    assert [entry.flags for entry in issues] == [
        IssueFlag.NULL_BINDING,
        IssueFlag.NODE_MISSING,
        IssueFlag.SIGNATURE_MISSING,
        IssueFlag.SIGNATURE_MISMATCH,
    ]
    assert issues.has_blocking_issues


def test_classify_is_idempotent(
    context: SceneContext, messy_registry: IdentifierRegistry
) -> None:
    detector = context.detector()

    first = [entry.flags for entry in detector.classify(messy_registry)]
    second = [entry.flags for entry in detector.classify(messy_registry)]

    assert first == second


def test_empty_registry_is_all_clear(context: SceneContext) -> None:
    issues = context.detector().classify(IdentifierRegistry())

    assert len(issues) == 0
    assert not issues.has_blocking_issues


def test_locked_pin_mismatch_follows_binding_id(
    context: SceneContext, scene: InMemoryScene
) -> None:
    pinned = scene.add("Pinned", components=["Door"], pin=PinDeclaration(42, locked=True))
    binding = Binding(43, pinned, signature=["Door"])
    registry = IdentifierRegistry([binding])
    detector = context.detector()

    assert detector.classify(registry).flags_for(binding) == IssueFlag.PIN_MISMATCH

    binding.id = 42

    assert detector.classify(registry).flags_for(binding) == IssueFlag.NORMAL


def test_unlocked_pin_is_not_enforced(context: SceneContext, scene: InMemoryScene) -> None:
    pinned = scene.add("Pinned", components=["Door"], pin=PinDeclaration(42))
    binding = Binding(43, pinned, signature=["Door"])

    issues = context.detector().classify(IdentifierRegistry([binding]))

    assert issues.flags_for(binding) == IssueFlag.NORMAL


def test_invalid_locked_pin_is_a_mismatch(context: SceneContext, scene: InMemoryScene) -> None:
    pinned = scene.add("Pinned", components=["Door"], pin=PinDeclaration(3, locked=True))
    binding = Binding(3, pinned, signature=["Door"])

    issues = context.detector().classify(IdentifierRegistry([binding]))

    assert issues.flags_for(binding) & IssueFlag.PIN_MISMATCH


def test_unbound_locked_pin_blocks(context: SceneContext, scene: InMemoryScene) -> None:
    pinned = scene.add("Pinned", components=["Door"], pin=PinDeclaration(42, locked=True))
    detector = context.detector()
    registry = IdentifierRegistry()

    issues = detector.classify(registry)

    assert [pin.node for pin in issues.unbound_pins] == [pinned]
    assert issues.has_pin_issues
    assert detector.has_unresolved_issues(registry)


def test_persistence_is_informational(context: SceneContext, scene: InMemoryScene) -> None:
    players = scene.add("Players", capabilities=[Capability.PLAYER_OBJECT])
    save = scene.add(
        "Save",
        parent=players,
        components=["Pickup"],
        capabilities=[Capability.ENABLE_PERSISTENCE],
    )
    binding = Binding(10, save, signature=["Pickup"])
    registry = IdentifierRegistry([binding])
    detector = context.detector()

    issues = detector.classify(registry)

    assert issues.flags_for(binding) == IssueFlag.PERSISTENCE_ENABLED
    assert not issues.has_blocking_issues
    assert detector.persistent_nodes(registry) == [save]


def test_primary_status_uses_fixed_precedence() -> None:
    assert primary_status(IssueFlag.PIN_MISMATCH | IssueFlag.SIGNATURE_MISMATCH) == (
        IssueFlag.SIGNATURE_MISMATCH
    )
    assert primary_status(IssueFlag.PERSISTENCE_ENABLED | IssueFlag.SIGNATURE_MISSING) == (
        IssueFlag.SIGNATURE_MISSING
    )
    assert primary_status(IssueFlag.NORMAL) == IssueFlag.NORMAL


def test_duplicate_hierarchy_paths_are_warned(
    context: SceneContext, scene: InMemoryScene, caplog: pytest.LogCaptureFixture
) -> None:
    root = scene.resolve_path("/Root")
    first = scene.add("Twin", parent=root, components=["Door"])
    second = scene.add("Twin", parent=root, components=["Door"])
    registry = IdentifierRegistry([Binding(10, first), Binding(11, second)])
    detector = context.detector()

    duplicates = detector.find_duplicate_hierarchy_paths(registry)
    with caplog.at_level(logging.WARNING):
        count = detector.warn_duplicate_hierarchy_paths(registry)

    assert list(duplicates) == ["/Root/Twin"]
    assert count == 1
    assert "/Root/Twin" in caplog.text


def test_auto_resolve_applies_safe_fixes(
    context: SceneContext, messy_registry: IdentifierRegistry, child: SceneNode, door: SceneNode
) -> None:
    detector = context.detector()

    result = detector.auto_resolve(messy_registry)

    assert result
    assert (result.removed, result.resynced) == (2, 2)
    assert [binding.node for binding in messy_registry.non_null()] == [child, door]
    door_binding = messy_registry.find_by_node(door)
    assert door_binding is not None
    assert door_binding.signature == ("Door",)
    assert not detector.has_unresolved_issues(messy_registry)


def test_auto_resolve_refuses_on_pin_issues(
    context: SceneContext, scene: InMemoryScene, messy_registry: IdentifierRegistry
) -> None:
    scene.add("Pinned", components=["Door"], pin=PinDeclaration(42, locked=True))
    before = messy_registry.bindings

    result = context.detector().auto_resolve(messy_registry)

    assert not result
    assert result.reason == "pin_issues"
    assert messy_registry.bindings == before


def test_auto_resolve_reports_nothing_to_do(context: SceneContext, child: SceneNode) -> None:
    registry = IdentifierRegistry([Binding(10, child, signature=["Pickup", "ObjectSync"])])

    result = context.detector().auto_resolve(registry)

    assert not result
    assert result.reason == "nothing_to_resolve"


def test_sort_modes(context: SceneContext, messy_registry: IdentifierRegistry) -> None:
    messy_registry.append(Binding(5))
    issues = context.detector().classify(messy_registry)

    by_file = [entry.index for entry in order_bindings(issues, SortMode.FILE)]
    by_id = [
        entry.binding.id if entry.binding else None
        for entry in order_bindings(issues, SortMode.NETWORK_ID)
    ]
    by_status = [entry.primary_status for entry in order_bindings(issues, SortMode.STATUS)]

    assert by_file == [0, 1, 2, 3, 4]
    assert by_id == [None, 5, 10, 11, 12]
    assert by_status == [
        IssueFlag.NULL_BINDING,
        IssueFlag.NODE_MISSING,
        IssueFlag.NODE_MISSING,
        IssueFlag.SIGNATURE_MISSING,
        IssueFlag.SIGNATURE_MISMATCH,
    ]


def test_filter_matches_id_and_path(
    context: SceneContext, messy_registry: IdentifierRegistry
) -> None:
    issues = context.detector().classify(messy_registry)

    by_path = filter_bindings(issues, "door", scene=context.scene)
    by_id = filter_bindings(issues, "11", scene=context.scene)

    assert [entry.binding.id for entry in by_path if entry.binding] == [12]
    assert [entry.binding.id for entry in by_id if entry.binding] == [11]
    assert len(filter_bindings(issues, "  ", scene=context.scene)) == len(issues)
