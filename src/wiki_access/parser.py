"""Parser for documentation page front matter (Markdown/MDX and RST)."""

import logging
import re
from pathlib import Path, PurePosixPath
from typing import Any

import docutils.frontend  # type: ignore[import-untyped]
import docutils.nodes  # type: ignore[import-untyped]
import docutils.parsers.rst  # type: ignore[import-untyped]
import docutils.utils  # type: ignore[import-untyped]
import yaml

from wiki_access.models import PageRecord
from wiki_access.rules import rule_from_front_matter

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIXES = frozenset({".md", ".mdx"})
RST_SUFFIXES = frozenset({".rst", ".rest"})
PAGE_SUFFIXES = MARKDOWN_SUFFIXES | RST_SUFFIXES

_FRONT_MATTER = re.compile(r"\A---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|\Z)", re.DOTALL)
_MARKDOWN_HEADING = re.compile(r"^#\s+(.+?)\s*#*\s*$", re.MULTILINE)


class FieldListVisitor(docutils.nodes.GenericNodeVisitor):  # type: ignore[misc]
    """Visitor collecting the leading field list and first title of an RST page."""

    def __init__(self, document: docutils.nodes.document) -> None:
        """Initialise field list visitor.

        Args:
            document: Docutils document tree.
        """
        super().__init__(document)
        self.fields: dict[str, str] | None = None
        self.title: str | None = None

    def visit_title(self, node: docutils.nodes.title) -> None:
        """Remember the first section title of the document.

        Args:
            node: Title node being visited.
        """
        if self.title is None:
            self.title = node.astext()

    def visit_field_list(self, node: docutils.nodes.field_list) -> None:
        """Record the first document-level field list as front matter.

        Raises:
            docutils.nodes.SkipNode: Always raised, field bodies are not walked.
        """
        if self.fields is None and isinstance(node.parent, (docutils.nodes.document, docutils.nodes.section)):
            fields: dict[str, str] = {}
            for field in node.findall(docutils.nodes.field):
                name = field.next_node(docutils.nodes.field_name)
                body = field.next_node(docutils.nodes.field_body)
                if name is not None:
                    fields[name.astext().strip().lower()] = body.astext().strip() if body is not None else ""
            self.fields = fields
        raise docutils.nodes.SkipNode

    def default_visit(self, node: docutils.nodes.Node) -> None:
        """Default visit handler (no-op)."""

    def default_departure(self, node: docutils.nodes.Node) -> None:
        """Default departure handler (no-op)."""


class FrontMatterParser:
    """Reads documentation pages and extracts their access front matter."""

    def parse_file(self, file_path: Path, base_path: Path) -> PageRecord | None:
        """Parse a page file into a PageRecord.

        Args:
            file_path: Path to the page file.
            base_path: Root of the content directory.

        Returns:
            PageRecord instance or None if parsing fails.
        """
        try:
            source = file_path.read_text(encoding="utf-8-sig")
            if file_path.suffix.lower() in RST_SUFFIXES:
                front_matter, heading = self._parse_rst(source, file_path)
            else:
                front_matter, heading = self._parse_markdown(source)
        except (OSError, UnicodeDecodeError, yaml.YAMLError, docutils.utils.SystemMessage) as exc:
            logger.warning("Could not parse %s: %s", file_path, exc)
            return None

        relative_path = file_path.relative_to(base_path)
        title = front_matter.get("title") or heading or self._fallback_title(file_path)
        return PageRecord(
            path=self.page_path(relative_path),
            rule=rule_from_front_matter(front_matter),
            title=str(title),
            source=relative_path.as_posix(),
        )

    @staticmethod
    def page_path(relative_path: Path) -> str:
        """Compute the page path (``clients/acme``) of a content file.

        Args:
            relative_path: Path of the file relative to the content directory.

        Returns:
            Slash separated page path without file extension.
        """
        return PurePosixPath(relative_path.as_posix()).with_suffix("").as_posix()

    def _parse_markdown(self, source: str) -> tuple[dict[str, Any], str | None]:
        """Split YAML front matter from a Markdown/MDX page.

        Args:
            source: Page source text.

        Returns:
            Front matter mapping and the first level-one heading, if any.
        """
        front_matter: dict[str, Any] = {}
        body = source
        match = _FRONT_MATTER.match(source)
        if match:
            loaded = yaml.safe_load(match.group(1))
            if isinstance(loaded, dict):
                front_matter = loaded
            body = source[match.end() :]
        heading = _MARKDOWN_HEADING.search(body)
        return front_matter, heading.group(1) if heading else None

    def _parse_rst(self, source: str, file_path: Path) -> tuple[dict[str, Any], str | None]:
        """Read the leading field list of an RST page as front matter.

        Args:
            source: RST source text.
            file_path: Path to the file (for error reporting).

        Returns:
            Field mapping and the first section title, if any.
        """
        parser = docutils.parsers.rst.Parser()
        components = (docutils.parsers.rst.Parser,)
        settings = docutils.frontend.get_default_settings(*components)
        settings.report_level = 5  # Suppress warnings
        document = docutils.utils.new_document(str(file_path), settings)
        parser.parse(source, document)

        visitor = FieldListVisitor(document)
        document.walk(visitor)
        return dict(visitor.fields or {}), visitor.title

    def _fallback_title(self, file_path: Path) -> str:
        """Derive a title from the file name.

        ``index`` files take the name of their directory.

        Args:
            file_path: Path to the page file.

        Returns:
            Title cased name with dashes and underscores turned into spaces.
        """
        stem = file_path.stem
        if stem == "index":
            stem = file_path.parent.name or stem
        return stem.replace("-", " ").replace("_", " ").title()
