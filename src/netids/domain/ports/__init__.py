"""Domain port definitions for adapters."""

from __future__ import annotations

from .scene import Component, Node, SceneGraph
from .types import TypeCatalog
from .unit_of_work import RegistryUnitOfWork

__all__ = [
    "Component",
    "Node",
    "RegistryUnitOfWork",
    "SceneGraph",
    "TypeCatalog",
]
