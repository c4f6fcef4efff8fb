from __future__ import annotations

import pytest

from netids.adapters.memory_scene import InMemoryScene, SceneNode
from netids.domain.context import SceneContext
from netids.domain.model import IdentifierRegistry


@pytest.fixture
def scene() -> InMemoryScene:
    """``/Root`` with two networked children and one plain child."""

    scene = InMemoryScene(name="Lobby")
    root = scene.add("Root")
    scene.add("Child", parent=root, components=["Pickup", "ObjectSync"])
    scene.add("Door", parent=root, components=["Door"])
    scene.add("Decoration", parent=root)
    return scene


@pytest.fixture
def registry() -> IdentifierRegistry:
    return IdentifierRegistry()


@pytest.fixture
def context(scene: InMemoryScene, registry: IdentifierRegistry) -> SceneContext:
    return SceneContext(scene=scene, registry=registry, types=scene.catalog, name=scene.name)


@pytest.fixture
def child(scene: InMemoryScene) -> SceneNode:
    node = scene.resolve_path("/Root/Child")
    assert node is not None
    return node


@pytest.fixture
def door(scene: InMemoryScene) -> SceneNode:
    node = scene.resolve_path("/Root/Door")
    assert node is not None
    return node
