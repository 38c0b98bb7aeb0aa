"""Data models for the documentation access filter."""

from dataclasses import dataclass, field
from enum import Enum


class AccessMode(str, Enum):
    """Who a page is meant for."""

    PUBLIC = "public"
    AUTHENTICATED = "authenticated"
    ADMIN = "admin"
    CLIENT = "client"


class MatchPolicy(str, Enum):
    """How a client-scoped rule matches the viewer's client slugs."""

    ANY = "any"
    ALL = "all"


@dataclass(frozen=True)
class AccessRule:
    """Access rule declared in a page's front matter.

    ``clients`` and ``match`` only matter for ``AccessMode.CLIENT``.
    ``inheritable`` only matters when the rule sits on a folder's index page.
    """

    mode: AccessMode
    clients: frozenset[str] = frozenset()
    match: MatchPolicy = MatchPolicy.ANY
    inheritable: bool = True


PUBLIC_RULE = AccessRule(mode=AccessMode.PUBLIC)


@dataclass(frozen=True)
class ViewerContext:
    """Capabilities of the viewer a tree is filtered for."""

    is_authenticated: bool = False
    is_admin: bool = False
    client_slugs: frozenset[str] = frozenset()

    @classmethod
    def anonymous(cls) -> "ViewerContext":
        """Return the context of a visitor without a session."""
        return cls()


@dataclass(frozen=True)
class Page:
    """A documentation page."""

    path: str
    title: str | None = None


@dataclass(frozen=True)
class Separator:
    """A visual separator between sibling nodes."""

    title: str | None = None


@dataclass(frozen=True)
class Folder:
    """A folder of pages, optionally backed by an index page."""

    path: str
    index_path: str | None = None
    children: tuple["PageNode", ...] = ()
    title: str | None = None


PageNode = Page | Folder | Separator


@dataclass(frozen=True)
class PageTree:
    """Root of the documentation tree."""

    children: tuple[PageNode, ...] = ()
    title: str | None = None


@dataclass(frozen=True)
class PageRecord:
    """A page as seen by the front-matter index."""

    path: str
    rule: AccessRule | None = None
    title: str | None = None
    source: str | None = field(default=None, compare=False)
