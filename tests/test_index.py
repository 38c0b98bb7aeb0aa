"""Tests for the front-matter index."""

import pytest

from wiki_access.index import build_index, normalize_path, parent_path
from wiki_access.models import AccessMode, AccessRule, PageRecord

AUTH = AccessRule(mode=AccessMode.AUTHENTICATED)
ADMIN = AccessRule(mode=AccessMode.ADMIN)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("clients/acme", "clients/acme"),
        ("/clients/acme/", "clients/acme"),
        ("clients/index", "clients"),
        ("/clients/acme/index/", "clients/acme"),
        ("", "index"),
        ("///", "index"),
        (None, "index"),
        ("index", "index"),
        ("/index", "index"),
        ("clients/caf%C3%A9", "clients/café"),
    ],
)
def test_normalize_path(raw: str | None, expected: str) -> None:
    """Test path normalization rules."""
    assert normalize_path(raw) == expected


def test_normalize_path_strips_base_url() -> None:
    """Test that the base URL prefix is removed."""
    assert normalize_path("/wiki/clients/acme", "/wiki") == "clients/acme"
    assert normalize_path("/wiki", "/wiki") == "index"
    assert normalize_path("/wikipedia/page", "/wiki") == "wikipedia/page"


def test_parent_path() -> None:
    """Test parent computation on normalized paths."""
    assert parent_path("clients/acme/billing") == "clients/acme"
    assert parent_path("clients") is None
    assert parent_path("index") is None


def test_build_index_only_keeps_declared_rules() -> None:
    """Test that pages without a rule are absent from the index."""
    index = build_index(
        [
            PageRecord(path="clients/index", rule=AUTH),
            PageRecord(path="clients/acme"),
            PageRecord(path="handbook", rule=ADMIN),
        ]
    )

    assert dict(index) == {"clients": AUTH, "handbook": ADMIN}
    assert "clients/acme" not in index
    assert len(index) == 2


def test_build_index_last_duplicate_wins() -> None:
    """Test that later pages overwrite earlier ones with the same path."""
    index = build_index([PageRecord(path="faq/index", rule=AUTH), PageRecord(path="faq", rule=ADMIN)])

    assert index["faq"] == ADMIN


def test_rule_for_normalizes_lookups() -> None:
    """Test looking up rules with served URLs."""
    index = build_index([PageRecord(path="clients/index", rule=AUTH)], base_url="/wiki")

    assert index.rule_for("/wiki/clients/") == AUTH
    assert index.rule_for("clients/index") == AUTH
    assert index.rule_for("/wiki/other") is None


def test_build_index_keeps_content_folder_named_like_base_url() -> None:
    """Test that a content folder named like the base URL keeps its own key."""
    index = build_index(
        [PageRecord(path="wiki/index", rule=ADMIN), PageRecord(path="handbook")],
        base_url="/wiki",
    )

    assert dict(index) == {"wiki": ADMIN}
    assert "index" not in index
    assert index.rule_for("/wiki/wiki") == ADMIN
    assert index.rule_for("/wiki") is None
