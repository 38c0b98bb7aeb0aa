"""Documentation portal: one tree epoch filtered per viewer."""

import logging
from pathlib import Path

from wiki_access.config import Settings
from wiki_access.index import FrontMatterIndex, build_index, normalize_path
from wiki_access.loader import ContentLoader, ContentSnapshot
from wiki_access.models import AccessRule, PageTree, ViewerContext
from wiki_access.resolver import RuleResolver
from wiki_access.rules import is_allowed
from wiki_access.tree import filter_tree

logger = logging.getLogger(__name__)


class DocsPortal:
    """Serves per-viewer documentation trees from one content snapshot.

    The rule cache is shared by every viewer until ``bump`` starts a new
    epoch. Filtered trees are never cached.
    """

    def __init__(self, snapshot: ContentSnapshot, settings: Settings | None = None) -> None:
        """Initialise portal.

        Args:
            snapshot: Page tree and page records to serve.
            settings: Portal settings, defaults to ``Settings()``.
        """
        self.settings = settings or Settings()
        self.snapshot = snapshot
        self.index: FrontMatterIndex = build_index(snapshot.pages, base_url=self.settings.base_url)
        self.resolver = RuleResolver(self.index)
        self.epoch = 0

    @classmethod
    def from_directory(cls, content_dir: Path, settings: Settings | None = None) -> "DocsPortal":
        """Load a content directory and serve it.

        Args:
            content_dir: Root of the documentation content.
            settings: Portal settings.

        Returns:
            DocsPortal for the loaded content.
        """
        return cls(ContentLoader().load(content_dir), settings)

    @property
    def tree(self) -> PageTree:
        """Unfiltered page tree of the current snapshot."""
        return self.snapshot.tree

    def tree_for(self, ctx: ViewerContext) -> PageTree:
        """Return the documentation tree visible to a viewer.

        Args:
            ctx: Viewer to filter for.

        Returns:
            Filtered PageTree.
        """
        return filter_tree(
            self.snapshot.tree,
            self.index,
            ctx,
            resolver=self.resolver,
            clients_prefix=self.settings.clients_prefix,
        )

    def page_key(self, url: str) -> str:
        """Turn a served URL into the content path of the page.

        Args:
            url: Page URL, with or without the portal base URL.

        Returns:
            Normalized content path.
        """
        return normalize_path(url, self.settings.base_url)

    def effective_rule(self, url: str) -> AccessRule | None:
        """Return the rule that applies to the page served at ``url``."""
        return self.resolver.resolve(self.page_key(url))

    def can_view(self, url: str, ctx: ViewerContext) -> bool:
        """Decide whether a viewer may open a single page.

        Args:
            url: Page URL, with or without the portal base URL.
            ctx: Viewer the decision is made for.

        Returns:
            True if the page is visible to the viewer.
        """
        key = self.page_key(url)
        return is_allowed(
            self.resolver.resolve(key),
            ctx,
            key,
            self.settings.clients_prefix,
        )

    def bump(self) -> int:
        """Start a new tree epoch, discarding resolved rules.

        Returns:
            The new epoch number.
        """
        self.resolver = RuleResolver(self.index)
        self.epoch += 1
        logger.info("Documentation tree epoch bumped to %d", self.epoch)
        return self.epoch

    def reload(self, content_dir: Path, loader: ContentLoader | None = None) -> int:
        """Reload the content directory and start a new epoch.

        Args:
            content_dir: Root of the documentation content.
            loader: Loader to use, a default ContentLoader when omitted.

        Returns:
            The new epoch number.
        """
        self.snapshot = (loader or ContentLoader()).load(content_dir)
        self.index = build_index(self.snapshot.pages, base_url=self.settings.base_url)
        return self.bump()
