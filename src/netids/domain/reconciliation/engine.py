"""Reconcile an imported registry against the live one."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from netids.domain.model.binding import Binding
from netids.domain.model.changes import RegistryChange
from netids.domain.model.enums import RowState, Side

from .plan import MergePreview, MergeRow, MergeSummary, classify_row

if TYPE_CHECKING:
    from collections.abc import Mapping

    from netids.domain.model.registry import IdentifierRegistry

log = logging.getLogger(__name__)


@dataclass(slots=True)
class ReconciliationEngine:
    """Builds merge previews and commits the sides the user picked.

    Rows the user has not decided on keep the live side, except rows that only
    add a new id: those default to the imported side so that an import into an
    empty scene does what it says without extra clicks.
    """

    def preview(self, imported: IdentifierRegistry, live: IdentifierRegistry) -> MergePreview:
        rows: list[MergeRow] = []
        for imported_binding in imported.non_null():
            match = _find_live_match(imported_binding, live)
            live_side = match if match is not None else Binding(imported_binding.id)
            state = classify_row(live_side, imported_binding.node, imported_id=imported_binding.id)
            rows.append(
                MergeRow(
                    imported=imported_binding,
                    live=live_side,
                    live_is_placeholder=match is None,
                    selection=(
                        Side.TAKE_IMPORT if state is RowState.NEW_FROM_IMPORT else Side.KEEP_LIVE
                    ),
                )
            )
        return MergePreview(rows)

    def commit(
        self,
        preview: MergePreview,
        live: IdentifierRegistry,
        selections: Mapping[int, Side] | None = None,
    ) -> MergeSummary:
        """Write the selected side of every row into ``live``.

        ``selections`` maps row index to side and is applied on top of whatever
        the preview already holds.
        """

        for index, side in (selections or {}).items():
            preview.select(index, side)

        counts = preview.counts()
        change = RegistryChange()
        committed: list[Binding] = []
        for row in preview.rows:
            if not row.takes_import:
                # the live side is already in place
                continue
            binding = _import_binding(row)
            change += live.insert_or_replace(binding)
            committed.append(binding)

        if counts.missing_import_nodes:
            log.warning(
                "%s imported id(s) have no scene object; their bindings were added without one",
                counts.missing_import_nodes,
            )
        log.info("Imported network ids: %s", counts.describe())
        return MergeSummary(counts=counts, change=change, committed=committed)


def _find_live_match(imported: Binding, live: IdentifierRegistry) -> Binding | None:
    node = imported.node
    for candidate in live.non_null():
        if candidate.id == imported.id:
            return candidate
        if node is not None and candidate.refers_to(node):
            return candidate
    return None


def _import_binding(row: MergeRow) -> Binding:
    node = row.import_node
    signature = row.imported.signature
    if node is not None and row.live.refers_to(node):
        # same object on both sides; the recorded components still describe it
        signature = row.live.signature
    return Binding(
        row.imported.id,
        node,
        signature=signature,
        source_path=row.imported.source_path,
    )
