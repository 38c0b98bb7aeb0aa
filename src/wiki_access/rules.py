"""Access rules: parsing from front matter and evaluation against a viewer."""

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from wiki_access.models import PUBLIC_RULE, AccessMode, AccessRule, MatchPolicy, ViewerContext

logger = logging.getLogger(__name__)

DEFAULT_CLIENTS_PREFIX = "clients"

_MODE_ALIASES = {
    "public": AccessMode.PUBLIC,
    "auth": AccessMode.AUTHENTICATED,
    "authenticated": AccessMode.AUTHENTICATED,
    "admin": AccessMode.ADMIN,
    "client": AccessMode.CLIENT,
    "clients": AccessMode.CLIENT,
    "client-scoped": AccessMode.CLIENT,
}

_TRUE_STRINGS = frozenset({"true", "yes", "on", "1"})
_FALSE_STRINGS = frozenset({"false", "no", "off", "0"})


def resolve_clients(
    rule: AccessRule,
    path: str | None = None,
    clients_prefix: str = DEFAULT_CLIENTS_PREFIX,
) -> frozenset[str]:
    """Return the client slugs a client-scoped rule applies to.

    Explicit clients win. Otherwise the slug is taken from the page path:
    the segment right after ``clients_prefix`` (``clients/acme/faq`` gives
    ``acme``).

    Args:
        rule: Rule being evaluated.
        path: Normalized path of the page the rule is evaluated for.
        clients_prefix: Path segment under which client folders live.

    Returns:
        Set of client slugs, empty when none can be determined.
    """
    if rule.clients:
        return rule.clients
    if not path:
        return frozenset()
    parts = [part for part in path.split("/") if part]
    for position, part in enumerate(parts[:-1]):
        if part == clients_prefix:
            return frozenset({parts[position + 1]})
    return frozenset()


def is_allowed(
    rule: AccessRule | None,
    ctx: ViewerContext,
    path: str | None = None,
    clients_prefix: str = DEFAULT_CLIENTS_PREFIX,
) -> bool:
    """Decide whether a viewer satisfies an access rule.

    Admins see everything. Pages without a rule are public.

    Args:
        rule: Effective rule of the page, or None when nothing applies.
        ctx: Viewer the decision is made for.
        path: Normalized path of the page, used to derive client slugs.
        clients_prefix: Path segment under which client folders live.

    Returns:
        True if the viewer may see the page.
    """
    if ctx.is_admin:
        return True
    if rule is None:
        return True
    if rule.mode == AccessMode.PUBLIC:
        return True
    if rule.mode == AccessMode.AUTHENTICATED:
        return ctx.is_authenticated
    if rule.mode == AccessMode.ADMIN:
        return False
    if rule.mode == AccessMode.CLIENT:
        needed = resolve_clients(rule, path, clients_prefix)
        if not needed:
            return False
        if rule.match == MatchPolicy.ALL:
            return needed <= ctx.client_slugs
        return bool(needed & ctx.client_slugs)
    return True


def _as_bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    return default


def _as_clients(value: Any) -> frozenset[str]:
    if value is None:
        return frozenset()
    if isinstance(value, str):
        items: Iterable[Any] = value.split(",")
    elif isinstance(value, Iterable):
        items = value
    else:
        return frozenset()
    return frozenset(str(item).strip() for item in items if str(item).strip())


def _as_match(value: Any) -> MatchPolicy:
    if isinstance(value, str) and value.strip().lower() == MatchPolicy.ALL.value:
        return MatchPolicy.ALL
    return MatchPolicy.ANY


def _rule_from_access(access: Mapping[str, Any]) -> AccessRule | None:
    raw_mode = access.get("mode")
    clients = _as_clients(access.get("clients"))
    match = _as_match(access.get("match", access.get("matchPolicy")))
    inheritable = _as_bool(access.get("inherit", access.get("inheritable")), default=True)

    if raw_mode is None:
        if not clients:
            return None
        mode = AccessMode.CLIENT
    else:
        key = str(raw_mode).strip().lower()
        if key in (MatchPolicy.ANY.value, MatchPolicy.ALL.value):
            # Older rules used ``mode`` for the match policy of a client list.
            mode = AccessMode.CLIENT
            match = MatchPolicy(key)
        elif key in _MODE_ALIASES:
            mode = _MODE_ALIASES[key]
        else:
            logger.warning("Unrecognized access mode %r, treating as public", raw_mode)
            mode = AccessMode.PUBLIC

    return AccessRule(mode=mode, clients=clients, match=match, inheritable=inheritable)


def rule_from_front_matter(data: Mapping[str, Any] | None) -> AccessRule | None:
    """Build the access rule declared by a page's front matter.

    A structured ``access`` block wins over the ``public: true`` shortcut.

    Args:
        data: Parsed front matter of the page.

    Returns:
        Declared AccessRule, or None if the page declares nothing.
    """
    if not data:
        return None
    access = data.get("access")
    if isinstance(access, Mapping):
        rule = _rule_from_access(access)
        if rule is not None:
            return rule
    elif isinstance(access, str) and access.strip():
        flat = {key: data.get(key) for key in ("clients", "match", "inherit") if key in data}
        return _rule_from_access({"mode": access, **flat})
    if _as_bool(data.get("public"), default=False):
        return PUBLIC_RULE
    return None
