"""Front-matter index: normalized page path to declared access rule."""

import logging
from collections.abc import Iterable, Iterator, Mapping
from urllib.parse import unquote

from wiki_access.models import AccessRule, PageRecord

logger = logging.getLogger(__name__)

ROOT_PATH = "index"
INDEX_SUFFIX = "/index"


def normalize_path(path: str | None, base_url: str = "") -> str:
    """Normalize a page path or URL into an index key.

    ``/wiki/clients/acme/`` with base ``/wiki`` and ``clients/acme/index``
    both become ``clients/acme``. Empty paths become ``index``.

    Args:
        path: Raw page path or URL.
        base_url: Optional URL prefix the pages are served under.

    Returns:
        Normalized path.
    """
    normalized = unquote(path or "").strip("/")
    base = base_url.strip("/")
    if base and (normalized == base or normalized.startswith(base + "/")):
        normalized = normalized[len(base) :].strip("/")
    if normalized.endswith(INDEX_SUFFIX):
        normalized = normalized[: -len(INDEX_SUFFIX)]
    return normalized or ROOT_PATH


def parent_path(path: str) -> str | None:
    """Return the normalized parent of ``path``, or None at the top level."""
    if path == ROOT_PATH or "/" not in path:
        return None
    return path.rsplit("/", 1)[0]


class FrontMatterIndex(Mapping[str, AccessRule]):
    """Read-only mapping of normalized page paths to declared access rules."""

    def __init__(self, rules: Mapping[str, AccessRule] | None = None, base_url: str = "") -> None:
        """Initialise index.

        Args:
            rules: Rules keyed by already-normalized content path.
            base_url: URL prefix stripped from served URLs looked up with ``rule_for``.
        """
        self._rules = dict(rules or {})
        self.base_url = base_url

    def __getitem__(self, key: str) -> AccessRule:
        return self._rules[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def rule_for(self, url: str | None) -> AccessRule | None:
        """Look up the rule a page declares from the URL it is served at.

        Args:
            url: Served URL of the page, with or without the base URL.

        Returns:
            Declared AccessRule, or None if the page declares nothing.
        """
        return self._rules.get(normalize_path(url, self.base_url))


def build_index(pages: Iterable[PageRecord], base_url: str = "") -> FrontMatterIndex:
    """Build the front-matter index for one filtering pass.

    Args:
        pages: Every page of the documentation source.
        base_url: URL prefix pages are served under. Only used by
            ``FrontMatterIndex.rule_for``; page paths are content paths and
            are never stripped.

    Returns:
        FrontMatterIndex containing only pages that declare a rule.
    """
    rules: dict[str, AccessRule] = {}
    for page in pages:
        if page.rule is None:
            continue
        key = normalize_path(page.path)
        if key in rules:
            logger.debug("Duplicate access rule for %s, keeping the last one", key)
        rules[key] = page.rule
    logger.debug("Built front-matter index with %d rules", len(rules))
    return FrontMatterIndex(rules, base_url=base_url)
