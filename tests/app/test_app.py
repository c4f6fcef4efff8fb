from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from netids.adapters.memory_scene import Capability
from netids.app import (
    CLEAR_PROMPT,
    MISMATCH_PROMPT,
    OVERWRITE_PROMPT,
    assign_ids,
    assign_node_to_binding,
    auto_resolve_scene,
    check_scene,
    clear_ids,
    commit_import,
    export_ids,
    preview_import,
    regenerate_ids,
)
from netids.config import InterchangeConfig
from netids.domain.errors import ParseError, PinCollision
from netids.domain.model import Binding, IssueFlag, PinDeclaration, Side

if TYPE_CHECKING:
    from pathlib import Path

    from netids.adapters.memory_scene import InMemoryScene, SceneNode
    from netids.domain.context import SceneContext


class _Prompts:
    def __init__(self, answer: bool) -> None:
        self.answer = answer
        self.seen: list[str] = []

    def __call__(self, message: str) -> bool:
        self.seen.append(message)
        return self.answer


def _pairs(context: SceneContext) -> list[tuple[int, object]]:
    return [(binding.id, binding.node) for binding in context.registry.non_null()]


def test_check_scene_reports_issues(context: SceneContext, child: SceneNode) -> None:
    context.registry.append(Binding(10, child))
    context.registry.append(None)

    report = check_scene(context)

    assert report.has_unresolved_issues
    assert report.issues.counts()[IssueFlag.NULL_BINDING] == 1
    assert report.duplicate_paths == {}


def test_assign_ids_covers_networked_nodes(
    context: SceneContext, child: SceneNode, door: SceneNode
) -> None:
    result = assign_ids(context)

    assert result.ok
    assert _pairs(context) == [(10, child), (11, door)]
    assert not check_scene(context).has_unresolved_issues


def test_assign_ids_rolls_back_whole_batch(
    context: SceneContext, scene: InMemoryScene
) -> None:
    scene.add("First", components=["Door"], pin=PinDeclaration(50))
    scene.add("Second", components=["Door"], pin=PinDeclaration(42))
    existing = Binding(42)
    context.registry.append(existing)

    with pytest.raises(PinCollision):
        assign_ids(context)

    assert context.registry.bindings == (existing,)


def test_clear_ids_can_be_cancelled(context: SceneContext, child: SceneNode) -> None:
    context.registry.append(Binding(10, child))
    prompts = _Prompts(answer=False)

    assert clear_ids(context, confirm=prompts) is None
    assert prompts.seen == [CLEAR_PROMPT]
    assert len(context.registry) == 1


def test_clear_ids_keeps_persistent_nodes(
    context: SceneContext, scene: InMemoryScene, child: SceneNode
) -> None:
    locker = scene.add(
        "Locker",
        components=["Door"],
        capabilities=[Capability.PLAYER_OBJECT, Capability.ENABLE_PERSISTENCE],
    )
    context.registry.append(Binding(10, child))
    context.registry.append(Binding(11, locker))

    change = clear_ids(context)

    assert change is not None
    assert len(change.removed) == 1
    assert _pairs(context) == [(11, locker)]

    clear_ids(context, keep_persistent=False)

    assert len(context.registry) == 0


def test_regenerate_ids_reassigns_from_scratch(
    context: SceneContext, child: SceneNode, door: SceneNode
) -> None:
    context.registry.append(Binding(500, child))
    context.registry.append(None)

    result = regenerate_ids(context)

    assert result is not None
    assert _pairs(context) == [(10, child), (11, door)]


def test_auto_resolve_scene_commits_fixes(context: SceneContext, child: SceneNode) -> None:
    context.registry.append(None)
    context.registry.append(Binding(10, child))

    result = auto_resolve_scene(context)

    assert result.applied
    assert _pairs(context) == [(10, child)]
    assert not check_scene(context).has_unresolved_issues


def test_assign_node_asks_before_mismatched_assignment(
    context: SceneContext, door: SceneNode
) -> None:
    binding = Binding(10, signature=["Pickup", "ObjectSync"])
    context.registry.append(binding)
    declined = _Prompts(answer=False)

    assert assign_node_to_binding(context, binding, door, confirm=declined) is None
    assert declined.seen == [MISMATCH_PROMPT]
    assert binding.node is None

    change = assign_node_to_binding(context, binding, door, confirm=_Prompts(answer=True))

    assert change is not None
    assert binding.node is door


def test_export_ids_uses_configured_directory(
    context: SceneContext, child: SceneNode, tmp_path: Path
) -> None:
    context.registry.append(Binding(10, child))

    path = export_ids(context, config=InterchangeConfig(export_dir=tmp_path))

    assert path == tmp_path.resolve() / "Lobby_NetworkIDs.json"
    assert path.read_text(encoding="utf-8") == '{"10":"/Root/Child"}'


def test_import_round_trip_between_scenes(
    context: SceneContext, child: SceneNode, door: SceneNode, tmp_path: Path
) -> None:
    source = tmp_path / "ids.json"
    source.write_text('{"5":"/Root/Child", "6":"/Root/Door"}', encoding="utf-8")
    config = InterchangeConfig(export_dir=tmp_path)

    preview = preview_import(context, source, config=config)
    summary = commit_import(context, preview)

    assert summary is not None
    assert summary.counts.new_ids == 2
    assert _pairs(context) == [(5, child), (6, door)]
    assert all(binding.signature is not None for binding in context.registry.non_null())
    assert not check_scene(context).has_unresolved_issues


def test_import_overwrite_needs_confirmation(
    context: SceneContext, child: SceneNode, door: SceneNode, tmp_path: Path
) -> None:
    context.registry.append(Binding(5, door))
    source = tmp_path / "ids.txt"
    source.write_text('{"5":"/Root/Child"}', encoding="utf-8")
    prompts = _Prompts(answer=False)

    preview = preview_import(context, source, config=InterchangeConfig(export_dir=tmp_path))
    summary = commit_import(context, preview, selections={0: Side.TAKE_IMPORT}, confirm=prompts)

    assert summary is None
    assert prompts.seen == [OVERWRITE_PROMPT]
    assert _pairs(context) == [(5, door)]


def test_import_parse_error_propagates(context: SceneContext, tmp_path: Path) -> None:
    source = tmp_path / "ids.json"
    source.write_text('{"5":"/Root/Child"', encoding="utf-8")

    with pytest.raises(ParseError, match="Expected"):
        preview_import(context, source, config=InterchangeConfig(export_dir=tmp_path))
