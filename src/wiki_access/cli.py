"""Command-line interface for inspecting per-viewer documentation trees."""

import argparse
import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from wiki_access.config import Settings
from wiki_access.database import MembershipDatabase
from wiki_access.models import Folder, Page, PageTree, Separator, ViewerContext
from wiki_access.portal import DocsPortal
from wiki_access.viewer import ViewerContextBuilder


def _add_viewer_flags(parser: argparse.ArgumentParser) -> None:
    """Add the content directory and viewer selection arguments.

    Args:
        parser: Subcommand parser to extend.
    """
    parser.add_argument("content_dir", nargs="?", type=Path, help="Documentation content directory.")
    parser.add_argument("--auth", action="store_true", help="Filter for an authenticated viewer.")
    parser.add_argument("--admin", action="store_true", help="Filter for an admin viewer.")
    parser.add_argument(
        "--client",
        action="append",
        default=[],
        help="Client slug the viewer belongs to (repeatable, implies --auth).",
    )
    parser.add_argument("--user", help="Build the viewer from this user id in the membership database.")
    parser.add_argument("--db", type=Path, help="Membership database path (overrides WIKI_ACCESS_DB).")


def _build_context(args: argparse.Namespace, settings: Settings) -> ViewerContext:
    """Build the viewer from the command-line flags.

    Args:
        args: Parsed arguments.
        settings: Settings supplying the default database path.

    Returns:
        ViewerContext from the membership database when --user is given,
        otherwise from the --auth, --admin and --client flags.

    Raises:
        ValueError: If --user is given without a database path.
    """
    if args.user:
        db_path = args.db or settings.database_path
        if db_path is None:
            msg = "--user requires --db or WIKI_ACCESS_DB"
            raise ValueError(msg)
        database = MembershipDatabase(db_path)
        return ViewerContextBuilder(database.is_admin, database.get_user_client_slugs).build(args.user)
    return ViewerContext(
        is_authenticated=args.auth or args.admin or bool(args.client),
        is_admin=args.admin,
        client_slugs=frozenset(args.client),
    )


def _label(node: Any) -> str:
    """Return the display label of a tree node.

    Args:
        node: Page, folder, separator or unknown node.

    Returns:
        One-line label.
    """
    if isinstance(node, Folder):
        return f"{node.title or node.path}/"
    if isinstance(node, Page):
        return node.title or node.path
    if isinstance(node, Separator):
        return f"--- {node.title} ---" if node.title else "---"
    return repr(node)


def format_tree(tree: PageTree) -> str:
    """Render a page tree as indented text."""
    lines: list[str] = [tree.title or "/"]

    def render(children: Sequence[Any], prefix: str = "") -> None:
        for idx, node in enumerate(children):
            last = idx == len(children) - 1
            connector = "└──" if last else "├──"
            lines.append(f"{prefix}{connector} {_label(node)}")
            if isinstance(node, Folder):
                render(node.children, prefix + ("    " if last else "│   "))

    render(tree.children)
    return "\n".join(lines)


def _load_portal(args: argparse.Namespace, settings: Settings) -> DocsPortal:
    """Load the portal for the content directory argument.

    Args:
        args: Parsed arguments.
        settings: Settings supplying the default content directory.

    Returns:
        DocsPortal over the loaded content.
    """
    content_dir = args.content_dir or settings.content_dir
    return DocsPortal.from_directory(content_dir, settings)


def _run_tree(args: argparse.Namespace) -> int:
    """Print the tree visible to the selected viewer.

    Args:
        args: Parsed arguments.

    Returns:
        Exit code, always 0.
    """
    settings = Settings.from_env()
    portal = _load_portal(args, settings)
    ctx = _build_context(args, settings)
    sys.stdout.write(format_tree(portal.tree_for(ctx)) + "\n")
    return 0


def _run_check(args: argparse.Namespace) -> int:
    """Print the decision and effective rule for each --path.

    Args:
        args: Parsed arguments.

    Returns:
        Exit code, 1 when any page is denied.
    """
    settings = Settings.from_env()
    portal = _load_portal(args, settings)
    ctx = _build_context(args, settings)
    denied = 0
    for path in args.paths:
        rule = portal.effective_rule(path)
        allowed = portal.can_view(path, ctx)
        denied += not allowed
        mode = rule.mode.value if rule else "default"
        sys.stdout.write(f"{'allow' if allowed else 'deny '} {path} ({mode})\n")
    return 1 if denied else 0


def main(argv: list[str] | None = None) -> None:
    """Run the wiki-access command line.

    Args:
        argv: Arguments to parse, sys.argv when omitted.

    Raises:
        SystemExit: Always, with the subcommand exit code.
    """
    parser = argparse.ArgumentParser(prog="wiki-access")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    subparsers = parser.add_subparsers(dest="command_name", required=True)

    tree_parser = subparsers.add_parser("tree", help="Print the tree visible to a viewer")
    _add_viewer_flags(tree_parser)
    tree_parser.set_defaults(func=_run_tree)

    check_parser = subparsers.add_parser("check", help="Check whether a viewer may open pages")
    _add_viewer_flags(check_parser)
    check_parser.add_argument("--path", dest="paths", action="append", required=True, help="Page path to check.")
    check_parser.set_defaults(func=_run_check)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        exit_code = args.func(args)
    except ValueError as exc:
        sys.stderr.write(f"wiki-access: {exc}\n")
        exit_code = 2
    raise SystemExit(exit_code)


__all__ = ["format_tree", "main"]
