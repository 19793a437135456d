"""Content store: the set of documents found under a content root.

The store is read-only input for the duration of a build. A scan never
aborts on a single bad note; problems are collected as BuildIssue records.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from fnmatch import fnmatch
from pathlib import Path

from .config import SITE_CONFIG_FILENAME, ConfigurationError
from .models import BuildIssue, Document
from .parser import ParseError, parse_document

log = logging.getLogger(__name__)


def _is_hidden(rel_path: Path) -> bool:
    return any(part.startswith(("_", ".")) for part in rel_path.parts)


def _is_excluded(rel_path: str, patterns: list[str]) -> bool:
    return any(fnmatch(rel_path, pattern) for pattern in patterns)


@dataclass
class ContentStore:
    """Documents and media assets under a content root."""

    root: Path
    documents: dict[str, Document] = field(default_factory=dict)
    """Slug -> document, in scan order."""

    assets: dict[str, Path] = field(default_factory=dict)
    """Relative POSIX path -> file, for every non-markdown file."""

    issues: list[BuildIssue] = field(default_factory=list)

    @classmethod
    def scan(cls, root: Path, exclude: list[str] | None = None) -> ContentStore:
        """Read every note under root.

        Files are visited in sorted path order so duplicate-slug resolution
        (first wins) is deterministic. Hidden and underscore-prefixed paths
        are skipped, as are paths matching the exclude globs.

        Raises:
            ConfigurationError: If root is not a directory.
        """
        if not root.exists() or not root.is_dir():
            raise ConfigurationError(f"Content root is not a directory: {root}")

        store = cls(root=root)
        patterns = exclude or []

        for file_path in sorted(p for p in root.rglob("*") if p.is_file()):
            rel = file_path.relative_to(root)
            rel_str = rel.as_posix()
            if _is_hidden(rel) or _is_excluded(rel_str, patterns):
                continue
            if rel_str == SITE_CONFIG_FILENAME:
                continue

            if file_path.suffix.lower() != ".md":
                store.assets[rel_str] = file_path
                continue

            try:
                document = parse_document(file_path, root)
            except ParseError as e:
                log.warning("Skipping %s: %s", rel_str, e.message)
                store.issues.append(BuildIssue(kind="parse_error", path=rel_str, message=e.message))
                continue

            existing = store.documents.get(document.slug)
            if existing is not None:
                message = (
                    f"Slug '{document.slug}' already used by {existing.path}; keeping the first"
                )
                log.warning("%s: %s", rel_str, message)
                store.issues.append(BuildIssue(kind="duplicate_slug", path=rel_str, message=message))
                continue

            store.documents[document.slug] = document

        log.info(
            "Scanned %s: %d documents, %d assets, %d issues",
            root,
            len(store.documents),
            len(store.assets),
            len(store.issues),
        )
        return store

    def get(self, slug: str) -> Document | None:
        return self.documents.get(slug)

    def published(self, include_drafts: bool = False) -> list[Document]:
        """Documents that belong in the rendered output, in scan order."""
        return [doc for doc in self.documents.values() if include_drafts or not doc.draft]

    def find_asset(self, name: str, source_path: str | None = None) -> str | None:
        """Locate an embedded asset by name.

        Lookup order: relative to the source note's folder, relative to the
        root, then a unique filename match anywhere in the store (first in
        sorted order on ties).

        Returns:
            The asset's relative POSIX path, or None if not found.
        """
        name = name.strip().replace("\\", "/").strip("/")
        if not name:
            return None

        if source_path:
            parent = Path(source_path).parent.as_posix()
            if parent not in ("", "."):
                candidate = f"{parent}/{name}"
                if candidate in self.assets:
                    return candidate

        if name in self.assets:
            return name

        basename = name.rsplit("/", 1)[-1].lower()
        for rel in self.assets:
            if rel.rsplit("/", 1)[-1].lower() == basename:
                return rel

        return None
