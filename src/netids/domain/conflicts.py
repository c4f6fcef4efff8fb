"""Conflict detection over a registry.

Classification is a total function: every slot of the registry, null slots
included, gets a flag set, and nothing here raises. Duplicate hierarchy
paths are reported separately because they only matter to path-based
import matching, never to live operation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from netids.config.registry import RegistryConfig, get_registry_config
from netids.domain.model.changes import RegistryChange
from netids.domain.model.enums import (
    BLOCKING_FLAGS,
    STATUS_PRECEDENCE,
    IssueFlag,
    SortMode,
    primary_status,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Sequence

    from netids.domain.matching import ComponentSignatureMatcher
    from netids.domain.model.binding import Binding, PinDeclaration
    from netids.domain.model.registry import IdentifierRegistry
    from netids.domain.ports.scene import Node, SceneGraph

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BindingIssue:
    index: int
    binding: Binding | None
    flags: IssueFlag

    @property
    def primary_status(self) -> IssueFlag:
        return primary_status(self.flags)

    @property
    def blocking(self) -> bool:
        return bool(self.flags & BLOCKING_FLAGS)


@dataclass(frozen=True, slots=True)
class UnboundPin:
    """A locked pin whose node has no binding at all."""

    node: Node
    declaration: PinDeclaration


@dataclass(frozen=True, slots=True)
class IssueSet:
    entries: tuple[BindingIssue, ...] = ()
    unbound_pins: tuple[UnboundPin, ...] = ()

    def __iter__(self) -> Iterator[BindingIssue]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def flags_for(self, binding: Binding) -> IssueFlag:
        for entry in self.entries:
            if entry.binding is binding:
                return entry.flags
        return IssueFlag.NORMAL

    def with_flag(self, flag: IssueFlag) -> tuple[BindingIssue, ...]:
        return tuple(entry for entry in self.entries if entry.flags & flag)

    @property
    def has_blocking_issues(self) -> bool:
        return bool(self.unbound_pins) or any(entry.blocking for entry in self.entries)

    @property
    def has_pin_issues(self) -> bool:
        return bool(self.unbound_pins or self.with_flag(IssueFlag.PIN_MISMATCH))

    def counts(self) -> dict[IssueFlag, int]:
        """Number of entries per primary status."""

        counts = {flag: 0 for flag in (*STATUS_PRECEDENCE, IssueFlag.NORMAL)}
        for entry in self.entries:
            counts[entry.primary_status] += 1
        return counts


@dataclass(slots=True)
class ConflictDetector:
    scene: SceneGraph
    matcher: ComponentSignatureMatcher
    config: RegistryConfig = field(default_factory=get_registry_config)

    def classify(
        self,
        registry: IdentifierRegistry,
        pins: Iterable[tuple[Node, PinDeclaration]] | None = None,
    ) -> IssueSet:
        """Flag every registry slot. ``pins`` defaults to the scene's pinned nodes."""

        pin_list = list(self.scene.find_pinned_nodes() if pins is None else pins)
        entries = tuple(
            BindingIssue(index=index, binding=binding, flags=self._flags(binding, pin_list))
            for index, binding in enumerate(registry)
        )

        unbound: list[UnboundPin] = []
        for node, declaration in pin_list:
            if not declaration.locked or not node.alive:
                continue
            if registry.find_by_node(node) is None:
                unbound.append(UnboundPin(node=node, declaration=declaration))

        return IssueSet(entries=entries, unbound_pins=tuple(unbound))

    def pin_mismatch(self, binding: Binding, declaration: PinDeclaration | None) -> bool:
        if declaration is None or not declaration.locked:
            return False
        if not self.config.is_valid(declaration.pinned_id):
            return True
        return binding.id != declaration.pinned_id

    def find_duplicate_hierarchy_paths(
        self, registry: IdentifierRegistry
    ) -> dict[str, list[Binding]]:
        groups: dict[str, list[Binding]] = {}
        for binding in registry.non_null():
            node = binding.node
            if node is None:
                continue
            path = self.scene.hierarchy_path(node)
            if path is None:
                continue
            groups.setdefault(path, []).append(binding)
        return {path: group for path, group in groups.items() if len(group) >= 2}

    def warn_duplicate_hierarchy_paths(self, registry: IdentifierRegistry) -> int:
        duplicates = self.find_duplicate_hierarchy_paths(registry)
        if duplicates:
            log.warning(
                "%s path(s) point to multiple network objects. Issues may occur when "
                "importing/exporting ids between platforms and scenes: %s",
                len(duplicates),
                ", ".join(sorted(duplicates)),
            )
        return len(duplicates)

    def has_unresolved_issues(self, registry: IdentifierRegistry) -> bool:
        self.warn_duplicate_hierarchy_paths(registry)
        return self.classify(registry).has_blocking_issues

    def auto_resolve(self, registry: IdentifierRegistry) -> AutoResolveResult:
        """Apply the safe fixes, or nothing at all.

        Null bindings and bindings whose node is gone are dropped, then missing
        or drifted signatures are resynced from the live node. Refuses when any
        pin issue exists; those need an explicit decision.
        """

        issues = self.classify(registry)
        if issues.has_pin_issues:
            pinned = [
                f"{entry.binding.id}" for entry in issues.with_flag(IssueFlag.PIN_MISMATCH)
                if entry.binding is not None
            ]
            pinned.extend(f"unbound {pin.node!r}" for pin in issues.unbound_pins)
            log.error("Network id pairs have pinned id issues: %s", ", ".join(pinned))
            return AutoResolveResult(applied=False, reason="pin_issues")

        drop = [
            entry.binding
            for entry in issues
            if entry.flags & (IssueFlag.NULL_BINDING | IssueFlag.NODE_MISSING)
        ]
        resync = [
            entry.binding
            for entry in issues
            if entry.binding is not None
            and entry.flags & (IssueFlag.SIGNATURE_MISSING | IssueFlag.SIGNATURE_MISMATCH)
            and not entry.flags & IssueFlag.NODE_MISSING
        ]
        if not drop and not resync:
            log.info("Could not find anything to auto resolve")
            return AutoResolveResult(applied=False, reason="nothing_to_resolve")

        change = registry.remove_where(
            lambda binding: any(binding is dropped for dropped in drop)
        )
        for binding in resync:
            if binding is not None:
                change += self.matcher.resync(binding)

        log.info(
            "Auto resolved network id conflicts: removed=%s, resynced=%s",
            len(drop),
            len(resync),
        )
        self.warn_duplicate_hierarchy_paths(registry)
        return AutoResolveResult(
            applied=True,
            removed=len(drop),
            resynced=len(resync),
            change=change,
        )

    def persistent_nodes(self, registry: IdentifierRegistry) -> list[Node]:
        return [node for node in registry.bound_nodes() if self.scene.is_persistent(node)]

    def _flags(
        self,
        binding: Binding | None,
        pins: Sequence[tuple[Node, PinDeclaration]],
    ) -> IssueFlag:
        if binding is None:
            return IssueFlag.NULL_BINDING

        flags = IssueFlag.NORMAL
        node = binding.node
        if node is None:
            return flags | IssueFlag.NODE_MISSING

        if binding.signature is None:
            flags |= IssueFlag.SIGNATURE_MISSING
        elif self.matcher.has_mismatch(node, binding.signature):
            flags |= IssueFlag.SIGNATURE_MISMATCH

        declaration = _declaration_for(node, pins)
        if self.pin_mismatch(binding, declaration):
            flags |= IssueFlag.PIN_MISMATCH

        if self.scene.is_persistent(node):
            flags |= IssueFlag.PERSISTENCE_ENABLED
        return flags


@dataclass(frozen=True, slots=True)
class AutoResolveResult:
    applied: bool
    reason: str | None = None
    removed: int = 0
    resynced: int = 0
    change: RegistryChange = field(default_factory=RegistryChange)

    def __bool__(self) -> bool:
        return self.applied


def order_bindings(
    issues: IssueSet,
    mode: SortMode,
) -> list[BindingIssue]:
    """Present registry entries in one of the user-facing sort orders."""

    entries = list(issues.entries)
    if mode is SortMode.FILE:
        return entries
    if mode is SortMode.NETWORK_ID:
        return sorted(
            entries,
            key=lambda entry: (entry.binding is not None, entry.binding.id if entry.binding else 0),
        )
    rank = {flag: position for position, flag in enumerate(STATUS_PRECEDENCE)}
    rank[IssueFlag.NORMAL] = len(STATUS_PRECEDENCE)
    return sorted(entries, key=lambda entry: rank[entry.primary_status])


def filter_bindings(
    entries: Iterable[BindingIssue],
    term: str,
    *,
    scene: SceneGraph,
) -> list[BindingIssue]:
    """Keep entries whose id or hierarchy path contains ``term`` (case-insensitive)."""

    needle = term.strip().casefold()
    if not needle:
        return list(entries)

    kept: list[BindingIssue] = []
    for entry in entries:
        binding = entry.binding
        if binding is None:
            continue
        haystacks = [str(binding.id)]
        node = binding.node
        if node is not None:
            path = scene.hierarchy_path(node)
            if path:
                haystacks.append(path)
        elif binding.source_path:
            haystacks.append(binding.source_path)
        if any(needle in haystack.casefold() for haystack in haystacks):
            kept.append(entry)
    return kept


def _declaration_for(
    node: Node,
    pins: Sequence[tuple[Node, PinDeclaration]],
) -> PinDeclaration | None:
    for pinned_node, declaration in pins:
        if pinned_node is node:
            return declaration
    return None
