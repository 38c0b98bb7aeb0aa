"""Effective rule resolution with folder inheritance."""

from collections.abc import Mapping

from wiki_access.index import ROOT_PATH, normalize_path, parent_path
from wiki_access.models import AccessRule


class RuleResolver:
    """Resolves the rule that applies to a page, caching results.

    Resolution does not depend on the viewer, so one resolver can serve
    every viewer of the same tree epoch. Paths are content paths
    (``clients/acme``); served URLs are turned into content paths by the
    caller.
    """

    def __init__(self, index: Mapping[str, AccessRule]) -> None:
        """Initialise resolver.

        Args:
            index: Declared rules keyed by normalized content path.
        """
        self.index = index
        self._cache: dict[str, AccessRule | None] = {}

    @property
    def cache_size(self) -> int:
        """Number of memoized resolutions.

        Returns:
            Count of cached paths.
        """
        return len(self._cache)

    def key_for(self, path: str | None) -> str:
        """Normalize a content path into a cache and index key.

        Args:
            path: Content path of a page, ``index`` suffix allowed.

        Returns:
            Normalized path.
        """
        return normalize_path(path)

    def clear(self) -> None:
        """Drop all memoized resolutions."""
        self._cache.clear()

    def resolve(self, path: str | None) -> AccessRule | None:
        """Return the effective rule of a page.

        The page's own rule wins. Otherwise the closest ancestor folder whose
        index declares an inheritable rule applies; non-inheritable ancestors
        are skipped. The root index is consulted last.

        Args:
            path: Content path of the page, normalized here if needed.

        Returns:
            Effective AccessRule, or None when no rule applies.
        """
        key = self.key_for(path)
        if key in self._cache:
            return self._cache[key]
        rule = self._resolve_uncached(key)
        self._cache[key] = rule
        return rule

    def _resolve_uncached(self, key: str) -> AccessRule | None:
        """Walk from the page up to the root index.

        Args:
            key: Normalized content path.

        Returns:
            Effective AccessRule, or None when no rule applies.
        """
        own = self.index.get(key)
        if own is not None:
            return own

        ancestor = parent_path(key)
        while ancestor is not None:
            rule = self.index.get(ancestor)
            if rule is not None and rule.inheritable:
                return rule
            ancestor = parent_path(ancestor)

        root = self.index.get(ROOT_PATH)
        if root is not None and root.inheritable:
            return root
        return None
