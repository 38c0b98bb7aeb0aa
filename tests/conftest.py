"""Shared fixtures: a documentation content directory with mixed access rules."""

import json
from pathlib import Path

import pytest


@pytest.fixture
def wiki_dir(tmp_path: Path) -> Path:
    """Create a wiki content directory.

    Layout::

        index.mdx            public root
        welcome.mdx          no rule
        timesheets.mdx       authenticated
        admin/index.mdx      admin, not inheritable
        admin/bible.mdx      no rule (falls back to the public root)
        clients/index.mdx    client-scoped by path, inheritable
        clients/acme/...     acme pages
        clients/beta/...     beta pages

    Args:
        tmp_path: Pytest temporary directory fixture.

    Returns:
        Path to the content directory.
    """
    docs = tmp_path / "wiki"
    for folder in ("admin", "clients/acme", "clients/beta"):
        (docs / folder).mkdir(parents=True)

    (docs / "index.mdx").write_text("---\ntitle: Wiki\npublic: true\n---\n")
    (docs / "meta.json").write_text(json.dumps({"pages": ["welcome", "timesheets", "---Teams---", "..."]}))
    (docs / "welcome.mdx").write_text("---\ntitle: Welcome\n---\n")
    (docs / "timesheets.mdx").write_text("---\ntitle: Timesheets\naccess:\n  mode: auth\n---\n")
    (docs / "admin" / "index.mdx").write_text("---\ntitle: Admin\naccess:\n  mode: admin\n  inherit: false\n---\n")
    (docs / "admin" / "bible.mdx").write_text("---\ntitle: Bible\n---\n")
    (docs / "clients" / "index.mdx").write_text("---\ntitle: Clients\naccess:\n  mode: client\n---\n")
    (docs / "clients" / "acme" / "index.mdx").write_text("---\ntitle: Acme\n---\n")
    (docs / "clients" / "acme" / "mandate.mdx").write_text("---\ntitle: Acme Mandate\n---\n")
    (docs / "clients" / "beta" / "faq.rst").write_text("Beta FAQ\n========\n\nQuestions.\n")
    return docs
