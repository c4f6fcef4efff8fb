"""Two-phase inspectors.

Every inspector first runs ``precheck`` and only builds its report when that
returns ``Ready``. Hosts compose inspectors with :func:`run_inspector` instead of
subclassing a shared base.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from netids.domain.conflicts import IssueSet
    from netids.domain.context import SceneContext
    from netids.domain.ports.scene import Node

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Ready:
    pass


@dataclass(frozen=True, slots=True)
class Blocked:
    reason: str


type Precheck = Ready | Blocked


class InspectorStrategy[TReport](Protocol):
    def precheck(self, context: SceneContext) -> Precheck: ...

    def build(self, context: SceneContext) -> TReport: ...


def run_inspector[TReport](
    strategy: InspectorStrategy[TReport], context: SceneContext
) -> TReport | Blocked:
    outcome = strategy.precheck(context)
    if isinstance(outcome, Blocked):
        log.debug("Inspector %s blocked: %s", type(strategy).__name__, outcome.reason)
        return outcome
    return strategy.build(context)


def _require_networked(node: Node, context: SceneContext) -> Precheck:
    if not context.scene.networked_components(node):
        return Blocked(
            "No networked component found on this node. This node does not need a network id."
        )
    return Ready()


@dataclass(frozen=True, slots=True)
class NetworkIdReport:
    node: Node
    network_id: int | None

    @property
    def assigned(self) -> bool:
        return self.network_id is not None

    def label(self) -> str:
        return f"Network ID: {self.network_id if self.assigned else 'Not assigned'}"


@dataclass(frozen=True, slots=True)
class NetworkIdInspector:
    node: Node

    def precheck(self, context: SceneContext) -> Precheck:
        return _require_networked(self.node, context)

    def build(self, context: SceneContext) -> NetworkIdReport:
        binding = context.registry.find_by_node(self.node)
        return NetworkIdReport(
            node=self.node,
            network_id=binding.id if binding is not None else None,
        )


@dataclass(frozen=True, slots=True)
class PinReport:
    """State of one pinned node.

    ``in_use_by`` is the other node currently holding the pinned id, if any.
    """

    pinned_id: int
    actual_id: int | None
    locked: bool
    valid: bool
    persistent: bool
    in_use_by: Node | None = None

    @property
    def mismatched(self) -> bool:
        return self.actual_id != self.pinned_id

    def messages(self) -> list[str]:
        if not self.valid:
            return [
                f"This object has an invalid pinned network id: {self.pinned_id}. "
                "Remove the pin declaration."
            ]
        messages: list[str] = []
        if not self.persistent:
            messages.append(
                "This node does not have persistence enabled. "
                "Usually, network id pinning is not needed for non-persistent objects."
            )
        if self.mismatched and self.in_use_by is not None:
            messages.append(
                f"The pinned network id is already in use by another object ({self.in_use_by!r}). "
                "Either this or the other object needs its network id changed."
            )
        if self.mismatched and self.actual_id is not None:
            messages.append(
                "The pinned network id does not match the actual network id. "
                "Persistent data stored under the published id may be lost."
            )
        return messages


@dataclass(frozen=True, slots=True)
class PinInspector:
    node: Node

    def precheck(self, context: SceneContext) -> Precheck:
        outcome = _require_networked(self.node, context)
        if isinstance(outcome, Blocked):
            return outcome
        if context.scene.pin_declaration(self.node) is None:
            return Blocked("This node has no pinned network id.")
        return Ready()

    def build(self, context: SceneContext) -> PinReport:
        declaration = context.scene.pin_declaration(self.node)
        if declaration is None:
            raise ValueError("build() called for a node without a pin declaration")
        binding = context.registry.find_by_node(self.node)
        holder = context.registry.node_for_id(declaration.pinned_id)
        return PinReport(
            pinned_id=declaration.pinned_id,
            actual_id=binding.id if binding is not None else None,
            locked=declaration.locked,
            valid=context.config.is_valid(declaration.pinned_id),
            persistent=context.scene.is_persistent(self.node),
            in_use_by=holder if holder is not None and holder is not self.node else None,
        )


@dataclass(frozen=True, slots=True)
class BuildGate:
    """Blocks a build while the registry has unresolved issues."""

    def precheck(self, context: SceneContext) -> Precheck:
        if context.detector().has_unresolved_issues(context.registry):
            return Blocked(
                "Network id issues were found. Resolve them, or run auto resolve, before building."
            )
        return Ready()

    def build(self, context: SceneContext) -> IssueSet:
        return context.detector().classify(context.registry)
