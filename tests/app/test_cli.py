from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from netids.adapters.scene_file import load_scene_file
from netids.ui import cli

if TYPE_CHECKING:
    from pathlib import Path

SCENE_JSON = {
    "name": "Lobby",
    "nodes": [
        {
            "name": "Root",
            "children": [
                {"name": "Child", "components": ["Pickup", "ObjectSync"]},
                {"name": "Door", "components": ["Door"]},
            ],
        }
    ],
    "registry": [],
}


@pytest.fixture
def scene_path(tmp_path: Path) -> Path:
    path = tmp_path / "lobby.json"
    path.write_text(json.dumps(SCENE_JSON), encoding="utf-8")
    return path


def _ids(path: Path) -> list[tuple[int, str | None]]:
    scene, registry = load_scene_file(path)
    return [
        (binding.id, scene.hierarchy_path(binding.node) if binding.node is not None else None)
        for binding in registry.non_null()
    ]


def test_assign_then_check_passes(scene_path: Path) -> None:
    cli.main(["assign", str(scene_path)])

    assert _ids(scene_path) == [(10, "/Root/Child"), (11, "/Root/Door")]

    cli.main(["check", str(scene_path)])


def test_check_exits_with_issue_code(scene_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    payload = dict(SCENE_JSON, registry=[{"id": 10, "path": "/Root/Child"}, None])
    scene_path.write_text(json.dumps(payload), encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["check", str(scene_path)])

    assert excinfo.value.code == cli.EXIT_UNRESOLVED_ISSUES
    assert "Resolve them before building" in caplog.text


def test_resolve_fixes_the_registry(scene_path: Path) -> None:
    payload = dict(SCENE_JSON, registry=[None, {"id": 10, "path": "/Root/Child"}])
    scene_path.write_text(json.dumps(payload), encoding="utf-8")

    cli.main(["resolve", str(scene_path), "--yes"])

    assert _ids(scene_path) == [(10, "/Root/Child")]
    cli.main(["check", str(scene_path)])


def test_export_writes_interchange_file(scene_path: Path, tmp_path: Path) -> None:
    cli.main(["assign", str(scene_path)])
    output = tmp_path / "out.json"

    cli.main(["export", str(scene_path), "--output", str(output)])

    assert output.read_text(encoding="utf-8") == '{"10":"/Root/Child", "11":"/Root/Door"}'


def test_import_with_yes_saves_the_merge(scene_path: Path, tmp_path: Path) -> None:
    source = tmp_path / "ids.json"
    source.write_text('{"20":"/Root/Door", "21":"/Root/Child"}', encoding="utf-8")

    cli.main(["import", str(scene_path), str(source), "--yes"])

    assert _ids(scene_path) == [(20, "/Root/Door"), (21, "/Root/Child")]


def test_declined_clear_leaves_file_untouched(
    scene_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    cli.main(["assign", str(scene_path)])
    before = scene_path.read_text(encoding="utf-8")
    monkeypatch.setattr("builtins.input", lambda _prompt: "n")

    cli.main(["clear", str(scene_path)])

    assert scene_path.read_text(encoding="utf-8") == before


def test_confirmed_clear_empties_registry(
    scene_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    cli.main(["assign", str(scene_path)])
    monkeypatch.setattr("builtins.input", lambda _prompt: "yes")

    cli.main(["clear", str(scene_path)])

    assert _ids(scene_path) == []


def test_unknown_node_fails(scene_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["assign", str(scene_path), "--node", "/Root/Nowhere"])

    assert excinfo.value.code == 1
    assert "No node at hierarchy path" in caplog.text


def test_invalid_subcommand_is_rejected(scene_path: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["frobnicate", str(scene_path)])

    assert excinfo.value.code == 2


def test_reassign_is_stable_with_same_named_siblings(scene_path: Path) -> None:
    lamp = {"name": "Lamp", "components": ["Light"]}
    payload = dict(SCENE_JSON, nodes=[{"name": "Root", "children": [lamp, lamp]}])
    scene_path.write_text(json.dumps(payload), encoding="utf-8")

    cli.main(["assign", str(scene_path)])
    cli.main(["assign", str(scene_path)])

    assert _ids(scene_path) == [(10, "/Root/Lamp"), (11, "/Root/Lamp")]
