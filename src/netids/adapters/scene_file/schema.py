"""Pydantic models describing scene snapshot files."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from netids.adapters.memory_scene import Capability


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class SceneFileBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class PinPayload(SceneFileBaseModel):
    pinned_id: int
    locked: bool = False


class NodePayload(SceneFileBaseModel):
    name: str
    components: list[str] = Field(default_factory=list[str])
    capabilities: list[Capability] = Field(default_factory=list[Capability])
    pin: PinPayload | None = None
    children: list[NodePayload] = Field(default_factory=list["NodePayload"])


class BindingPayload(SceneFileBaseModel):
    """One registry slot. ``path`` is ``None`` for a binding that never had a node.

    ``occurrence`` picks one node when several share ``path``, counting in
    scene order from zero.
    """

    id: int
    path: str | None = None
    occurrence: int = Field(default=0, ge=0)
    signature: list[str] | None = None

    _normalize_path = field_validator("path", mode="before")(_blank_to_none)


class SceneFilePayload(SceneFileBaseModel):
    name: str = "Scene"
    nodes: list[NodePayload] = Field(default_factory=list[NodePayload])
    registry: list[BindingPayload | None] = Field(default_factory=list["BindingPayload | None"])
