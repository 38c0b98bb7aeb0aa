"""Builds the viewer context from session identity and team membership."""

import logging
import sqlite3
from collections.abc import Callable, Iterable

from wiki_access.models import ViewerContext

logger = logging.getLogger(__name__)

AdminCheck = Callable[[str], bool]
MembershipLookup = Callable[[str], Iterable[str]]


class ViewerContextBuilder:
    """Assembles a ViewerContext for the subject of the current session."""

    def __init__(self, admin_check: AdminCheck, membership_lookup: MembershipLookup) -> None:
        """Initialise builder.

        Args:
            admin_check: Returns True when a subject id belongs to an admin.
            membership_lookup: Returns the client slugs a subject is a team member of.
        """
        self.admin_check = admin_check
        self.membership_lookup = membership_lookup

    def build(self, subject_id: str | None) -> ViewerContext:
        """Build the context for a session subject.

        Args:
            subject_id: Authenticated subject id, or None without a session.

        Returns:
            ViewerContext for the subject.
        """
        if not subject_id:
            return ViewerContext.anonymous()
        return ViewerContext(
            is_authenticated=True,
            is_admin=self._check_admin(subject_id),
            client_slugs=self._lookup_clients(subject_id),
        )

    def _check_admin(self, subject_id: str) -> bool:
        try:
            return bool(self.admin_check(subject_id))
        except (sqlite3.Error, LookupError):
            logger.exception("Admin check failed for %s", subject_id)
            return False

    def _lookup_clients(self, subject_id: str) -> frozenset[str]:
        try:
            slugs = self.membership_lookup(subject_id)
        except (sqlite3.Error, LookupError):
            logger.exception("Client membership lookup failed for %s", subject_id)
            return frozenset()
        return frozenset(slug for slug in slugs if slug)
