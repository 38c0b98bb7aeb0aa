"""Tests for the content directory loader."""

import json
from pathlib import Path

import pytest

from wiki_access.loader import ContentLoader
from wiki_access.models import AccessMode, Folder, Page, Separator


@pytest.fixture
def loader() -> ContentLoader:
    """Create a loader instance.

    Returns:
        ContentLoader instance.
    """
    return ContentLoader()


@pytest.fixture
def content_dir(tmp_path: Path) -> Path:
    """Create a small documentation content directory.

    Args:
        tmp_path: Pytest temporary directory fixture.

    Returns:
        Path to the content directory.
    """
    docs = tmp_path / "docs"
    clients = docs / "clients"
    clients.mkdir(parents=True)

    (docs / "index.mdx").write_text("---\ntitle: Wiki\npublic: true\n---\n")
    (docs / "welcome.mdx").write_text("---\ntitle: Welcome\n---\n")
    (docs / "timesheets.mdx").write_text("---\ntitle: Timesheets\naccess:\n  mode: auth\n---\n")
    (docs / "notes.txt").write_text("not a page")
    (clients / "index.mdx").write_text("---\ntitle: Clients\naccess:\n  mode: client\n---\n")
    (clients / "acme.mdx").write_text("---\ntitle: Acme\n---\n")
    (clients / "beta.mdx").write_text("---\ntitle: Beta\n---\n")
    return docs


def test_load_builds_tree_and_pages(loader: ContentLoader, content_dir: Path) -> None:
    """Test loading a directory without meta files."""
    snapshot = loader.load(content_dir)

    assert snapshot.tree.title == "Wiki"
    assert snapshot.tree.children == (
        Folder(
            path="clients",
            index_path="clients/index",
            title="Clients",
            children=(Page(path="clients/acme", title="Acme"), Page(path="clients/beta", title="Beta")),
        ),
        Page(path="timesheets", title="Timesheets"),
        Page(path="welcome", title="Welcome"),
    )
    paths = {page.path for page in snapshot.pages}
    assert paths == {"index", "welcome", "timesheets", "clients/index", "clients/acme", "clients/beta"}


def test_load_reads_rules(loader: ContentLoader, content_dir: Path) -> None:
    """Test that front matter rules end up on the page records."""
    snapshot = loader.load(content_dir)
    rules = {page.path: page.rule for page in snapshot.pages}

    assert rules["welcome"] is None
    assert rules["timesheets"].mode == AccessMode.AUTHENTICATED
    assert rules["clients/index"].mode == AccessMode.CLIENT


def test_meta_json_orders_children_and_adds_separators(loader: ContentLoader, content_dir: Path) -> None:
    """Test ordering children and separators from meta.json."""
    (content_dir / "meta.json").write_text(
        json.dumps({"title": "Knowledge Base", "pages": ["welcome", "---Internal---", "...", "---", "missing"]})
    )

    snapshot = loader.load(content_dir)

    assert snapshot.tree.title == "Knowledge Base"
    assert [type(node) for node in snapshot.tree.children] == [Page, Separator, Folder, Page]
    assert snapshot.tree.children[0] == Page(path="welcome", title="Welcome")
    assert snapshot.tree.children[1] == Separator(title="Internal")
    assert snapshot.tree.children[3] == Page(path="timesheets", title="Timesheets")


def test_meta_json_without_rest_marker_hides_unlisted(loader: ContentLoader, content_dir: Path) -> None:
    """Test that unlisted entries are left out without a rest marker."""
    (content_dir / "clients" / "meta.json").write_text(json.dumps({"title": "Our Clients", "pages": ["beta"]}))

    snapshot = loader.load(content_dir)
    clients = snapshot.tree.children[0]

    assert isinstance(clients, Folder)
    assert clients.title == "Our Clients"
    assert clients.children == (Page(path="clients/beta", title="Beta"),)


def test_unreadable_meta_json_is_ignored(loader: ContentLoader, content_dir: Path) -> None:
    """Test that a broken meta file falls back to default ordering."""
    (content_dir / "meta.json").write_text("{not json")

    snapshot = loader.load(content_dir)

    assert len(snapshot.tree.children) == 3


def test_unparsable_page_is_skipped(loader: ContentLoader, content_dir: Path) -> None:
    """Test that pages failing to parse are left out of the tree."""
    (content_dir / "broken.md").write_bytes(b"\xff\xfe\xfa")

    snapshot = loader.load(content_dir)

    assert "broken" not in {page.path for page in snapshot.pages}
    assert Page(path="broken", title="Broken") not in snapshot.tree.children


def test_folder_without_index(loader: ContentLoader, tmp_path: Path) -> None:
    """Test a folder that has no index page."""
    ops = tmp_path / "docs" / "ops"
    ops.mkdir(parents=True)
    (ops / "runbook.rst").write_text("Runbook\n=======\n\nSteps.\n")

    snapshot = loader.load(tmp_path / "docs")

    assert snapshot.tree.children == (
        Folder(path="ops", title="Ops", children=(Page(path="ops/runbook", title="Runbook"),)),
    )


def test_page_named_like_folder_becomes_its_index(loader: ContentLoader, tmp_path: Path) -> None:
    """Test that guide.md next to guide/ is the folder index instead of replacing it."""
    docs = tmp_path / "docs"
    (docs / "guide").mkdir(parents=True)
    (docs / "guide.md").write_text("---\ntitle: Guide\naccess:\n  mode: auth\n---\n")
    (docs / "guide" / "setup.md").write_text("# Setup\n")

    snapshot = loader.load(docs)

    assert snapshot.tree.children == (
        Folder(
            path="guide",
            index_path="guide",
            title="Guide",
            children=(Page(path="guide/setup", title="Setup"),),
        ),
    )
    assert {page.path for page in snapshot.pages} == {"guide", "guide/setup"}


def test_page_named_like_indexed_folder_is_kept(loader: ContentLoader, tmp_path: Path) -> None:
    """Test that a page colliding with a folder that has an index is kept separately."""
    docs = tmp_path / "docs"
    (docs / "guide").mkdir(parents=True)
    (docs / "guide.md").write_text("# Guide Page\n")
    (docs / "guide" / "index.md").write_text("# Guide\n")
    (docs / "guide" / "setup.md").write_text("# Setup\n")

    snapshot = loader.load(docs)

    assert snapshot.tree.children == (
        Folder(
            path="guide",
            index_path="guide/index",
            title="Guide",
            children=(Page(path="guide/setup", title="Setup"),),
        ),
        Page(path="guide", title="Guide Page"),
    )


def test_meta_json_with_byte_order_mark(loader: ContentLoader, content_dir: Path) -> None:
    """Test that a meta.json saved with a UTF-8 BOM is still read."""
    (content_dir / "meta.json").write_bytes(b"\xef\xbb\xbf" + json.dumps({"title": "Handbook"}).encode())

    snapshot = loader.load(content_dir)

    assert snapshot.tree.title == "Handbook"


def test_load_nonexistent_path(loader: ContentLoader, tmp_path: Path) -> None:
    """Test that loading a missing directory raises ValueError."""
    with pytest.raises(ValueError, match="does not exist"):
        loader.load(tmp_path / "nonexistent")
