"""Merge preview rows and selections.

A preview pairs every imported binding with the live binding it would
touch. Building one never mutates the live registry, so discarding a
preview is the cancellation path.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from netids.domain.model.enums import RowState, Side

if TYPE_CHECKING:
    from netids.domain.model.binding import Binding
    from netids.domain.model.changes import RegistryChange
    from netids.domain.ports.scene import Node


@dataclass(slots=True, kw_only=True)
class MergeRow:
    imported: Binding
    live: Binding
    live_is_placeholder: bool = False
    selection: Side = Side.KEEP_LIVE
    override_node: Node | None = None

    @property
    def state(self) -> RowState:
        return classify_row(self.live, self.import_node, imported_id=self.imported.id)

    @property
    def needs_decision(self) -> bool:
        return self.state is not RowState.NO_CHANGE

    @property
    def import_node(self) -> Node | None:
        return self.override_node if self.override_node is not None else self.imported.node

    @property
    def takes_import(self) -> bool:
        return self.selection is Side.TAKE_IMPORT


@dataclass(slots=True)
class MergePreview:
    rows: list[MergeRow] = field(default_factory=list["MergeRow"])

    def __len__(self) -> int:
        return len(self.rows)

    def select(self, index: int, side: Side) -> None:
        """Choose which side of row ``index`` is committed."""

        row = self.rows[index]
        if not row.needs_decision:
            raise ValueError(f"row {index} has no changes to decide")
        row.selection = side

    def select_all(self, side: Side) -> None:
        for row in self.rows:
            if row.needs_decision:
                row.selection = side

    def override(self, index: int, node: Node | None) -> None:
        """Supply the node for an imported row whose path did not resolve."""
        self.rows[index].override_node = node

    def counts(self) -> MergeCounts:
        counts = MergeCounts()
        for row in self.rows:
            if not row.takes_import:
                if row.needs_decision:
                    counts.kept_live += 1
                continue
            live_node = row.live.node
            import_node = row.import_node
            if live_node is None:
                counts.new_ids += 1
            elif live_node is not import_node:
                counts.node_reassignments += 1
            elif row.live.id != row.imported.id:
                counts.ids_changed += 1
            if import_node is None:
                counts.missing_import_nodes += 1
        return counts


@dataclass(slots=True)
class MergeCounts:
    new_ids: int = 0
    ids_changed: int = 0
    node_reassignments: int = 0
    missing_import_nodes: int = 0
    kept_live: int = 0

    @property
    def overwrites_existing(self) -> bool:
        """True when committing changes ids or nodes already present in the scene."""
        return bool(self.ids_changed or self.node_reassignments)

    def describe(self) -> str:
        parts: list[str] = []
        if self.new_ids:
            parts.append(_plural(self.new_ids, "new ID"))
        if self.ids_changed:
            parts.append(_plural(self.ids_changed, "changed ID"))
        if self.node_reassignments:
            parts.append(_plural(self.node_reassignments, "ID conflict"))
        if self.missing_import_nodes:
            parts.append(_plural(self.missing_import_nodes, "missing imported object"))
        if not parts:
            return "No changes detected."
        text = ", ".join(parts) + "."
        if self.kept_live:
            text += f" - Keeping {_plural(self.kept_live, 'Scene ID')}."
        return text


@dataclass(slots=True)
class MergeSummary:
    counts: MergeCounts
    change: RegistryChange
    committed: list[Binding] = field(default_factory=list["Binding"])


def classify_row(live: Binding, import_node: Node | None, *, imported_id: int) -> RowState:
    live_node = live.node
    if live_node is None:
        return RowState.NEW_FROM_IMPORT
    if live_node is not import_node:
        return RowState.OBJECT_CHANGED
    if live.id != imported_id:
        return RowState.ID_WILL_CHANGE
    return RowState.NO_CHANGE


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}{'' if count == 1 else 's'}"
