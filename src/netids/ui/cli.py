from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from netids.adapters.scene_file import load_scene_file, save_scene_file
from netids.app import (
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
from netids.config import configure_logging
from netids.domain.conflicts import filter_bindings, order_bindings
from netids.domain.context import SceneContext
from netids.domain.inspection import (
    Blocked,
    NetworkIdInspector,
    PinInspector,
    run_inspector,
)
from netids.domain.model.enums import Side, SortMode

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from types import FrameType

    from netids.adapters.memory_scene import InMemoryScene, SceneNode
    from netids.domain.model.registry import IdentifierRegistry

log = logging.getLogger(__name__)

EXIT_UNRESOLVED_ISSUES = 3


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Manage network ids of a scene snapshot")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log debug output",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    check = subparsers.add_parser("check", help="List network ids and their issues")
    _add_scene_argument(check)
    check.add_argument(
        "--sort",
        type=SortMode,
        choices=list(SortMode),
        default=SortMode.STATUS,
        help="Order of the listed ids (default: %(default)s)",
    )
    check.add_argument(
        "--search",
        type=str,
        default="",
        help="Only list ids whose id or hierarchy path contains this text",
    )

    assign = subparsers.add_parser("assign", help="Assign ids to networked nodes without one")
    _add_scene_argument(assign)
    assign.add_argument(
        "--node",
        dest="nodes",
        action="append",
        metavar="PATH",
        help="Hierarchy path of a node to assign (repeatable, defaults to all networked nodes)",
    )

    link = subparsers.add_parser("link", help="Point an existing network id at another node")
    _add_scene_argument(link)
    link.add_argument("network_id", type=int, help="Network id to re-point")
    link.add_argument("node", type=str, help="Hierarchy path of the new node")
    link.add_argument(
        "--force",
        action="store_true",
        help="Replace the node even if the id still has a live one",
    )
    _add_yes_argument(link)

    regenerate = subparsers.add_parser("regenerate", help="Clear and reassign all network ids")
    _add_scene_argument(regenerate)
    _add_persistence_argument(regenerate)
    _add_yes_argument(regenerate)

    clear = subparsers.add_parser("clear", help="Clear network ids")
    _add_scene_argument(clear)
    _add_persistence_argument(clear)
    _add_yes_argument(clear)

    resolve = subparsers.add_parser("resolve", help="Apply the safe automatic fixes")
    _add_scene_argument(resolve)
    _add_yes_argument(resolve)

    inspect = subparsers.add_parser("inspect", help="Show the network id state of one node")
    _add_scene_argument(inspect)
    inspect.add_argument("node", type=str, help="Hierarchy path of the node")

    export = subparsers.add_parser("export", help="Export network ids to an interchange file")
    _add_scene_argument(export)
    export.add_argument(
        "--output",
        type=Path,
        help="Target file (defaults to <NETIDS_EXPORT_DIR>/<scene>_NetworkIDs.json)",
    )

    import_ = subparsers.add_parser("import", help="Merge an interchange file into the scene")
    _add_scene_argument(import_)
    import_.add_argument("file", type=Path, help="Interchange file to import")
    side = import_.add_mutually_exclusive_group()
    side.add_argument(
        "--take-import",
        dest="side",
        action="store_const",
        const=Side.TAKE_IMPORT,
        help="Take the imported side of every differing row",
    )
    side.add_argument(
        "--keep-live",
        dest="side",
        action="store_const",
        const=Side.KEEP_LIVE,
        help="Keep the scene side of every differing row",
    )
    _add_yes_argument(import_)

    return parser.parse_args(list(argv))


def _add_scene_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("scene", type=Path, help="Scene snapshot file (JSON)")


def _add_yes_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-y",
        "--yes",
        action="store_true",
        help="Do not ask for confirmation",
    )


def _add_persistence_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--include-persistent",
        action="store_true",
        help="Also clear ids of nodes holding persistent player data",
    )


def _confirmation(assume_yes: bool) -> Callable[[str], bool]:
    def confirm(message: str) -> bool:
        if assume_yes:
            return True
        try:
            answer = input(f"{message} [y/N] ")
        except EOFError:
            return False
        return answer.strip().lower() in {"y", "yes"}

    return confirm


def _load(path: Path) -> tuple[InMemoryScene, IdentifierRegistry, SceneContext]:
    scene, registry = load_scene_file(path)
    context = SceneContext(scene=scene, registry=registry, types=scene.catalog, name=scene.name)
    return scene, registry, context


def _resolve_node(scene: InMemoryScene, path: str) -> SceneNode:
    node = scene.resolve_path(path)
    if node is None:
        raise ValueError(f"No node at hierarchy path {path!r}")
    return node


def _run_check(args: argparse.Namespace, context: SceneContext) -> bool:
    report = check_scene(context)
    entries = filter_bindings(
        order_bindings(report.issues, args.sort),
        args.search,
        scene=context.scene,
    )
    for entry in entries:
        binding = entry.binding
        node = binding.node if binding is not None else None
        path = context.scene.hierarchy_path(node) if node is not None else None
        log.info(
            "%s %s %s",
            binding.id if binding is not None else "-",
            path or (binding.source_path if binding is not None else None) or "<missing>",
            entry.primary_status.name,
        )
    for pin in report.issues.unbound_pins:
        log.info("unbound locked pin %s on %r", pin.declaration.pinned_id, pin.node)
    if report.has_unresolved_issues:
        log.error("Network id issues were found. Resolve them before building.")
        return False
    return True


def _run_inspect(args: argparse.Namespace, scene: InMemoryScene, context: SceneContext) -> None:
    node = _resolve_node(scene, args.node)
    report = run_inspector(NetworkIdInspector(node), context)
    if isinstance(report, Blocked):
        log.info("%s", report.reason)
        return
    log.info("%s", report.label())
    pin = run_inspector(PinInspector(node), context)
    if isinstance(pin, Blocked):
        return
    log.info("Pinned network id: %s (locked=%s)", pin.pinned_id, pin.locked)
    for message in pin.messages():
        log.warning("%s", message)


def _dispatch(args: argparse.Namespace) -> None:  # noqa: C901, PLR0912
    scene, registry, context = _load(args.scene)
    confirm = _confirmation(getattr(args, "yes", False))
    keep_persistent = not getattr(args, "include_persistent", False)

    if args.command == "check":
        if not _run_check(args, context):
            sys.exit(EXIT_UNRESOLVED_ISSUES)
        return
    if args.command == "inspect":
        _run_inspect(args, scene, context)
        return
    if args.command == "export":
        path = export_ids(context, args.output)
        log.info("Wrote %s", path)
        return

    changed: object | None
    if args.command == "assign":
        nodes = [_resolve_node(scene, path) for path in args.nodes] if args.nodes else None
        changed = assign_ids(context, nodes)
    elif args.command == "link":
        binding = registry.find_by_id(args.network_id)
        if binding is None:
            raise ValueError(f"Network id {args.network_id} is not in the registry")
        changed = assign_node_to_binding(
            context,
            binding,
            _resolve_node(scene, args.node),
            force=args.force,
            confirm=confirm,
        )
    elif args.command == "regenerate":
        changed = regenerate_ids(context, keep_persistent=keep_persistent, confirm=confirm)
    elif args.command == "clear":
        changed = clear_ids(context, keep_persistent=keep_persistent, confirm=confirm)
    elif args.command == "resolve":
        if not confirm("Apply automatic fixes to the network id registry?"):
            return
        result = auto_resolve_scene(context)
        changed = result if result.applied else None
        if result.reason == "pin_issues":
            sys.exit(EXIT_UNRESOLVED_ISSUES)
    elif args.command == "import":
        preview = preview_import(context, args.file)
        if args.side is not None:
            preview.select_all(args.side)
        log.info("%s", preview.counts().describe())
        changed = commit_import(context, preview, confirm=confirm)
    else:
        raise ValueError(f"Unsupported command: {args.command}")

    if changed is not None:
        save_scene_file(args.scene, scene, registry)


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    if parsed_args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        _dispatch(parsed_args)
    except Exception:
        log.exception("Fatal error while processing %s", parsed_args.scene)
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
