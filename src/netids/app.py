"""Application orchestration entry points.

Every function takes an explicit :class:`SceneContext` and wraps its registry
mutations in one unit of work, so a user-visible action is either applied in
full or not at all. Destructive actions ask ``confirm`` first; a ``False``
answer returns ``None`` before anything is touched.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from netids.adapters.interchange import read_interchange_file, write_interchange_file
from netids.adapters.unit_of_work import SnapshotUnitOfWork
from netids.config.interchange import get_interchange_config
from netids.domain.errors import ParseError
from netids.domain.model.changes import RegistryChange
from netids.domain.reconciliation import ReconciliationEngine

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from pathlib import Path

    from netids.config.interchange import InterchangeConfig
    from netids.domain.allocation import AssignmentResult
    from netids.domain.conflicts import AutoResolveResult, IssueSet
    from netids.domain.context import SceneContext
    from netids.domain.model.binding import Binding
    from netids.domain.model.enums import Side
    from netids.domain.model.registry import IdentifierRegistry
    from netids.domain.ports.scene import Node
    from netids.domain.ports.unit_of_work import RegistryUnitOfWork
    from netids.domain.reconciliation import MergePreview, MergeSummary

type Confirm = Callable[[str], bool]
UnitOfWorkFactory = Callable[["IdentifierRegistry"], "RegistryUnitOfWork"]

log = getLogger(__name__)

CLEAR_PROMPT = (
    "Are you sure you want to clear all network ids in the current scene? "
    "Persistent player data could be lost."
)
REGENERATE_PROMPT = (
    "Are you sure you want to clear and regenerate all network ids in the current scene? "
    "Persistent player data could be lost. Cross-platform worlds must be re-uploaded to "
    "every platform, and other scenes of the same world may need these ids imported."
)
OVERWRITE_PROMPT = (
    "Some imported network ids will change already existing scene network ids. This could "
    "cause persistent player data loss and/or break cross-platform networking. "
    "Are you sure you want to overwrite?"
)
MISMATCH_PROMPT = "The node provided has a component mismatch with the registry. Continue anyways?"


def _always(_message: str) -> bool:
    return True


@dataclass(frozen=True, slots=True)
class CheckReport:
    issues: IssueSet
    duplicate_paths: dict[str, list[Binding]] = field(default_factory=dict[str, list["Binding"]])

    @property
    def has_unresolved_issues(self) -> bool:
        return self.issues.has_blocking_issues


def check_scene(context: SceneContext) -> CheckReport:
    """Classify the registry and report duplicate hierarchy paths."""

    detector = context.detector()
    detector.warn_duplicate_hierarchy_paths(context.registry)
    report = CheckReport(
        issues=detector.classify(context.registry),
        duplicate_paths=detector.find_duplicate_hierarchy_paths(context.registry),
    )
    counts = report.issues.counts()
    log.info(
        "Checked %s network id(s): %s",
        len(report.issues),
        ", ".join(f"{flag.name}={count}" for flag, count in counts.items() if count),
    )
    return report


def assign_ids(
    context: SceneContext,
    nodes: Iterable[Node] | None = None,
    *,
    unit_of_work_factory: UnitOfWorkFactory = SnapshotUnitOfWork,
) -> AssignmentResult:
    """Assign ids to ``nodes`` (default: every networked node) as one transaction.

    Raises the allocation error after rolling back when the batch fails.
    """

    targets = list(context.scene.find_networked_nodes() if nodes is None else nodes)
    with unit_of_work_factory(context.registry) as uow:
        result = context.allocator().assign_batch(targets, uow.registry)
        if result.ok:
            uow.commit()
    if not result.ok:
        log.error("Rolled back %s id assignment(s) after failure", len(result.inserted))
        result.raise_for_error()
    log.info(
        "Assigned %s network id(s), skipped %s already bound node(s)",
        len(result.inserted),
        len(result.skipped),
    )
    return result


def assign_node_to_binding(
    context: SceneContext,
    binding: Binding,
    node: Node,
    *,
    force: bool = False,
    confirm: Confirm = _always,
    unit_of_work_factory: UnitOfWorkFactory = SnapshotUnitOfWork,
) -> RegistryChange | None:
    """Point an existing binding at ``node``.

    Unless forced, a node whose components differ from the recorded signature
    needs confirmation.
    """

    if (
        not force
        and binding.node is None
        and binding.signature is not None
        and context.matcher().has_mismatch(node, binding.signature)
        and not confirm(MISMATCH_PROMPT)
    ):
        log.info("Assignment to network id %s cancelled", binding.id)
        return None
    with unit_of_work_factory(context.registry) as uow:
        change = uow.registry.assign_node(binding, node, force=force)
        uow.commit()
    log.info("Assigned %r to network id %s", node, binding.id)
    return change


def clear_ids(
    context: SceneContext,
    *,
    keep_persistent: bool = True,
    confirm: Confirm = _always,
    unit_of_work_factory: UnitOfWorkFactory = SnapshotUnitOfWork,
) -> RegistryChange | None:
    if not confirm(CLEAR_PROMPT):
        log.info("Clear cancelled")
        return None
    with unit_of_work_factory(context.registry) as uow:
        change = _clear(context, uow.registry, keep_persistent=keep_persistent)
        uow.commit()
    log.info("Cleared %s network id(s)", len(change.removed))
    return change


def regenerate_ids(
    context: SceneContext,
    *,
    keep_persistent: bool = True,
    confirm: Confirm = _always,
    unit_of_work_factory: UnitOfWorkFactory = SnapshotUnitOfWork,
) -> AssignmentResult | None:
    """Clear the registry, then assign ids to every networked node again."""

    if not confirm(REGENERATE_PROMPT):
        log.info("Regenerate cancelled")
        return None
    with unit_of_work_factory(context.registry) as uow:
        cleared = _clear(context, uow.registry, keep_persistent=keep_persistent)
        result = context.allocator().assign_batch(
            context.scene.find_networked_nodes(), uow.registry
        )
        if result.ok:
            uow.commit()
    if not result.ok:
        log.error("Regenerate rolled back; the registry is unchanged")
        result.raise_for_error()
    log.info(
        "Regenerated network ids: cleared=%s, assigned=%s",
        len(cleared.removed),
        len(result.inserted),
    )
    return result


def auto_resolve_scene(
    context: SceneContext,
    *,
    unit_of_work_factory: UnitOfWorkFactory = SnapshotUnitOfWork,
) -> AutoResolveResult:
    with unit_of_work_factory(context.registry) as uow:
        result = context.detector().auto_resolve(uow.registry)
        if result.applied:
            uow.commit()
    return result


def export_ids(
    context: SceneContext,
    path: Path | None = None,
    *,
    config: InterchangeConfig | None = None,
) -> Path:
    """Write the interchange file; defaults to ``<export dir>/<scene>_NetworkIDs.json``."""

    if path is None:
        effective_config = config or get_interchange_config()
        path = effective_config.export_path(context.name)
    write_interchange_file(path, context.registry, context.scene)
    return path


def preview_import(
    context: SceneContext,
    path: Path,
    *,
    config: InterchangeConfig | None = None,
) -> MergePreview:
    """Parse ``path`` and line it up against the live registry. Mutates nothing."""

    effective_config = config or get_interchange_config()
    if not effective_config.looks_importable(path):
        log.warning("%s does not have a usual interchange suffix; parsing anyway", path)
    try:
        imported = read_interchange_file(path, context.scene)
    except ParseError:
        log.exception("Failed to import network ids from %s", path)
        raise
    return ReconciliationEngine().preview(imported, context.registry)


def commit_import(
    context: SceneContext,
    preview: MergePreview,
    *,
    selections: Mapping[int, Side] | None = None,
    confirm: Confirm = _always,
    unit_of_work_factory: UnitOfWorkFactory = SnapshotUnitOfWork,
) -> MergeSummary | None:
    """Commit the selected rows, then resync signatures of imported bindings."""

    for index, side in (selections or {}).items():
        preview.select(index, side)
    if preview.counts().overwrites_existing and not confirm(OVERWRITE_PROMPT):
        log.info("Import cancelled")
        return None

    matcher = context.matcher()
    with unit_of_work_factory(context.registry) as uow:
        summary = ReconciliationEngine().commit(preview, uow.registry)
        resynced = RegistryChange.combine(
            *(matcher.resync(binding) for binding in summary.committed if binding.node is not None)
        )
        uow.commit()
    log.debug("Import resynced %s signature(s)", len(resynced.updated))
    return summary


def _clear(
    context: SceneContext,
    registry: IdentifierRegistry,
    *,
    keep_persistent: bool,
) -> RegistryChange:
    keep = context.detector().persistent_nodes(registry) if keep_persistent else []
    if keep:
        log.info("Keeping %s persistent network object(s)", len(keep))
    return registry.remove_excluding(keep)
