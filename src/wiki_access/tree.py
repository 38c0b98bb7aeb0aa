"""Per-viewer filtering of the documentation page tree."""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import replace
from typing import cast

from wiki_access.models import AccessRule, Folder, Page, PageNode, PageTree, Separator, ViewerContext
from wiki_access.resolver import RuleResolver
from wiki_access.rules import DEFAULT_CLIENTS_PREFIX, is_allowed

logger = logging.getLogger(__name__)


def prune_separators(nodes: Iterable[PageNode]) -> list[PageNode]:
    """Drop leading, trailing and repeated separators from a sibling list.

    Args:
        nodes: Already filtered siblings, in display order.

    Returns:
        New list where every separator sits between two other nodes.
    """
    pruned: list[PageNode] = []
    previous_is_separator = True
    for node in nodes:
        if isinstance(node, Separator):
            if previous_is_separator:
                continue
            previous_is_separator = True
        else:
            previous_is_separator = False
        pruned.append(node)
    if pruned and isinstance(pruned[-1], Separator):
        pruned.pop()
    return pruned


class TreeFilter:
    """Walks a page tree and keeps the nodes a viewer may see."""

    def __init__(
        self,
        resolver: RuleResolver,
        ctx: ViewerContext,
        clients_prefix: str = DEFAULT_CLIENTS_PREFIX,
    ) -> None:
        """Initialise filter.

        Args:
            resolver: Resolver giving the effective rule of a content path.
            ctx: Viewer to filter for.
            clients_prefix: Path segment under which client folders live.
        """
        self.resolver = resolver
        self.ctx = ctx
        self.clients_prefix = clients_prefix

    def _allows(self, path: str) -> bool:
        """Check the effective rule of a page against the viewer.

        Args:
            path: Content path of a page or folder index.

        Returns:
            True if the viewer may see the page.
        """
        rule = self.resolver.resolve(path)
        return is_allowed(rule, self.ctx, self.resolver.key_for(path), self.clients_prefix)

    def filter_children(self, children: Iterable[PageNode]) -> list[PageNode]:
        """Filter a sibling list and clean up its separators.

        Args:
            children: Siblings in display order.

        Returns:
            Visible siblings with dangling separators removed.
        """
        visible = (self.filter_node(child) for child in children)
        kept = [cast(PageNode, node) for node in visible if node is not None]
        return prune_separators(kept)

    def filter_node(self, node: object) -> object | None:
        """Return the visible version of ``node``, or None if it is hidden."""
        if isinstance(node, Page):
            return node if self._allows(node.path) else None
        if isinstance(node, Folder):
            own_allowed = node.index_path is not None and self._allows(node.index_path)
            children = self.filter_children(node.children)
            if not own_allowed and not children:
                return None
            return replace(node, children=tuple(children))
        if isinstance(node, Separator):
            return node
        logger.debug("Passing through unknown node %r", node)
        return node


def filter_node(
    node: object,
    resolver: RuleResolver,
    ctx: ViewerContext,
    clients_prefix: str = DEFAULT_CLIENTS_PREFIX,
) -> object | None:
    """Filter a single node and its descendants for a viewer."""
    return TreeFilter(resolver, ctx, clients_prefix).filter_node(node)


def filter_tree(
    root: PageTree,
    index: Mapping[str, AccessRule],
    ctx: ViewerContext,
    resolver: RuleResolver | None = None,
    clients_prefix: str = DEFAULT_CLIENTS_PREFIX,
) -> PageTree:
    """Compute the subtree of ``root`` visible to ``ctx``.

    The input tree is left untouched; kept folders are copies carrying only
    their visible children. Node paths are content paths and are used as is.

    Args:
        root: Full documentation tree.
        index: Declared rules keyed by normalized content path.
        ctx: Viewer to filter for.
        resolver: Resolver to reuse across viewers of the same tree. A new
            one is created for this call when omitted.
        clients_prefix: Path segment under which client folders live.

    Returns:
        New PageTree containing only visible nodes.
    """
    if resolver is None:
        resolver = RuleResolver(index)
    walker = TreeFilter(resolver, ctx, clients_prefix)
    return replace(root, children=tuple(walker.filter_children(root.children)))
