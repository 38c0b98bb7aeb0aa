"""Loads a documentation content directory into a page tree and page records."""

import json
import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from wiki_access.models import Folder, Page, PageNode, PageRecord, PageTree, Separator
from wiki_access.parser import PAGE_SUFFIXES, FrontMatterParser

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContentSnapshot:
    """Page tree and page records read from one content directory."""

    tree: PageTree
    pages: tuple[PageRecord, ...]


class ContentLoader:
    """Builds the page tree of a documentation content directory.

    Directories become folders, an ``index`` page inside a directory is the
    folder's index, and an optional ``meta.json`` orders the children.
    """

    META_FILE = "meta.json"
    INDEX_STEM = "index"
    REST_MARKER = "..."

    def __init__(self, parser: FrontMatterParser | None = None) -> None:
        """Initialise loader.

        Args:
            parser: Parser used for page front matter.
        """
        self.parser = parser or FrontMatterParser()

    def load(self, content_dir: Path) -> ContentSnapshot:
        """Read every page under ``content_dir``.

        Args:
            content_dir: Root of the documentation content.

        Returns:
            ContentSnapshot with the page tree and all parsed pages.

        Raises:
            ValueError: If the content directory does not exist.
        """
        if not content_dir.is_dir():
            msg = f"Content directory does not exist: {content_dir}"
            raise ValueError(msg)

        pages: list[PageRecord] = []
        meta = self._read_meta(content_dir)
        children, root_index = self._load_directory(content_dir, content_dir, pages)
        title = meta.get("title") or (root_index.title if root_index else None)
        logger.info("Loaded %d pages from %s", len(pages), content_dir)
        return ContentSnapshot(tree=PageTree(children=children, title=title), pages=tuple(pages))

    def _load_directory(
        self,
        directory: Path,
        content_dir: Path,
        pages: list[PageRecord],
    ) -> tuple[tuple[PageNode, ...], PageRecord | None]:
        """Build the children of one directory.

        A page named like a sibling directory (``guide.md`` next to
        ``guide/``) becomes that folder's index when the folder has none.
        Otherwise both are kept and the page is listed under its file name.

        Args:
            directory: Directory being loaded.
            content_dir: Root of the documentation content.
            pages: Accumulator for every parsed page.

        Returns:
            Ordered children and the directory's index page, if any.
        """
        entries: dict[str, PageNode] = {}
        index_page: PageRecord | None = None
        leaves: list[tuple[Path, PageRecord]] = []

        for path in sorted(directory.iterdir()):
            if path.is_dir():
                entries[path.name] = self._load_folder(path, content_dir, pages)
                continue
            if path.suffix.lower() not in PAGE_SUFFIXES:
                continue
            record = self.parser.parse_file(path, content_dir)
            if record is None:
                logger.warning("Failed to parse: %s", path)
                continue
            pages.append(record)
            if path.stem == self.INDEX_STEM:
                index_page = record
            else:
                leaves.append((path, record))

        for path, record in leaves:
            existing = entries.get(path.stem)
            if existing is None:
                entries[path.stem] = Page(path=record.path, title=record.title)
            elif isinstance(existing, Folder) and existing.index_path is None:
                logger.info("Using %s as the index of folder %s", path, existing.path)
                title = self._read_meta(directory / path.stem).get("title") or record.title
                entries[path.stem] = replace(existing, index_path=record.path, title=title or existing.title)
            else:
                logger.warning("%s collides with entry %s, listing it as %s", path, path.stem, path.name)
                entries[path.name] = Page(path=record.path, title=record.title)

        order = self._read_meta(directory).get("pages")
        return self._order_children(entries, order, directory), index_page

    def _load_folder(self, directory: Path, content_dir: Path, pages: list[PageRecord]) -> Folder:
        """Load a subdirectory as a folder node.

        Args:
            directory: Subdirectory to load.
            content_dir: Root of the documentation content.
            pages: Accumulator for every parsed page.

        Returns:
            Folder titled from meta.json, its index page, or the directory name.
        """
        children, index_page = self._load_directory(directory, content_dir, pages)
        meta = self._read_meta(directory)
        title = meta.get("title") or (index_page.title if index_page else None)
        if not title:
            title = directory.name.replace("-", " ").replace("_", " ").title()
        return Folder(
            path=directory.relative_to(content_dir).as_posix(),
            index_path=index_page.path if index_page else None,
            children=children,
            title=str(title),
        )

    def _order_children(
        self,
        entries: dict[str, PageNode],
        order: Any,
        directory: Path,
    ) -> tuple[PageNode, ...]:
        """Order children following a ``meta.json`` page list.

        ``---Title---`` entries become separators and ``...`` expands to the
        entries not listed explicitly. Without a page list, folders come first.

        Args:
            entries: Children keyed by file or directory name.
            order: The ``pages`` list of ``meta.json``, if any.
            directory: Directory being ordered (for logging).

        Returns:
            Ordered children.
        """
        if not isinstance(order, list):
            folders = [node for node in entries.values() if isinstance(node, Folder)]
            leaves = [node for node in entries.values() if not isinstance(node, Folder)]
            return tuple(folders + leaves)

        listed = {str(item) for item in order}
        ordered: list[PageNode] = []
        for item in order:
            name = str(item)
            if name == self.REST_MARKER:
                ordered.extend(node for key, node in entries.items() if key not in listed)
            elif name.startswith("---") and name.endswith("---") and len(name) >= 6:
                ordered.append(Separator(title=name[3:-3].strip() or None))
            elif name in entries:
                ordered.append(entries[name])
            elif name != self.INDEX_STEM:
                logger.debug("meta.json in %s lists unknown entry %s", directory, name)
        return tuple(ordered)

    def _read_meta(self, directory: Path) -> dict[str, Any]:
        """Read the optional meta.json of a directory.

        Args:
            directory: Directory that may hold a meta.json.

        Returns:
            Parsed mapping, empty when missing or unreadable.
        """
        meta_path = directory / self.META_FILE
        if not meta_path.is_file():
            return {}
        try:
            meta = json.loads(meta_path.read_text(encoding="utf-8-sig"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable %s: %s", meta_path, exc)
            return {}
        return meta if isinstance(meta, dict) else {}
