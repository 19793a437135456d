"""Static site generator for a notes directory.

Main orchestrator that scans the content store, resolves wiki-links and
writes a complete static HTML site with tag pages, a link graph, a search
index and theme assets.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import NamedTuple

from ..config import DEFAULT_OUTPUT_DIR, DEFAULT_SITE_TITLE, normalize_base_url
from ..graph import graph_to_json, resolve_links, unresolved_issues
from ..models import BuildIssue, Document, LinkGraph, PublishResult
from ..parser.md_renderer import create_markdown
from ..parser.title_index import TitleIndex, build_title_index
from ..store import ContentStore
from .renderer import MEDIA_DIR, StaticWikilinkRenderer

log = logging.getLogger(__name__)


@dataclass
class PublishConfig:
    """Configuration for site generation."""

    output_dir: Path = field(default_factory=lambda: Path(DEFAULT_OUTPUT_DIR))
    base_url: str = ""
    site_title: str = DEFAULT_SITE_TITLE
    include_drafts: bool = False
    exclude: list[str] = field(default_factory=list)
    clean: bool = True  # Remove output dir before build

    def __post_init__(self) -> None:
        self.output_dir = Path(self.output_dir)
        self.base_url = normalize_base_url(self.base_url)


class PageRef(NamedTuple):
    slug: str
    title: str


@dataclass
class EntryData:
    """Processed document for rendering."""

    slug: str
    title: str
    html_content: str
    document: Document
    tags: list[str]
    draft: bool = False
    backlinks: list[PageRef] = field(default_factory=list)


class SiteGenerator:
    """Generates a static HTML site from a notes directory.

    Orchestrates the full publishing pipeline:
    1. Scan the content store (parse errors and duplicate slugs are reported)
    2. Resolve wiki-links into the link graph
    3. Render markdown with resolved links, math and embeds
    4. Write document, index, tag and graph pages
    5. Write the search index, copy embedded media and theme assets
    """

    def __init__(self, config: PublishConfig, content_root: Path):
        """Initialize generator.

        Args:
            config: Publishing configuration
            content_root: Directory of markdown notes
        """
        self.config = config
        self.content_root = content_root
        self.store: ContentStore | None = None
        self.title_index: TitleIndex = {}
        self.graph = LinkGraph()
        self.entries: dict[str, EntryData] = {}
        self.issues: list[BuildIssue] = []
        self.tags_index: dict[str, list[str]] = {}  # tag -> [slugs]
        self.used_assets: set[str] = set()

    def generate(self) -> PublishResult:
        """Generate the complete static site.

        Raises:
            ConfigurationError: If the content root is not a directory.

        Returns:
            PublishResult with statistics and a summary of issues
        """
        # Phase 1: Read the store and resolve links across all of it
        self.store = ContentStore.scan(self.content_root, exclude=self._scan_exclude())
        self.issues.extend(self.store.issues)

        documents = list(self.store.documents.values())
        self.title_index = build_title_index(documents)
        self.graph = resolve_links(documents, self.title_index)

        published = self.store.published(include_drafts=self.config.include_drafts)
        drafts_skipped = len(documents) - len(published)
        published_slugs = {doc.slug for doc in published}
        published_paths = {doc.path for doc in published}
        self.issues.extend(
            issue
            for issue in unresolved_issues(self.graph, self.store.documents)
            if issue.path in published_paths
        )

        # Phase 2: Clean output directory
        output_dir = self.config.output_dir
        if self.config.clean and output_dir.exists():
            shutil.rmtree(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        # Phase 3: Render every published document
        for doc in published:
            self._process_document(doc, published_slugs)

        # Phase 4: Pages
        self._render_all_pages()

        # Phase 5: Graph, search index and assets
        (output_dir / "graph.json").write_text(graph_to_json(self.graph, published), encoding="utf-8")
        search_index_path = self._generate_search_index()
        self._copy_media()
        self._copy_theme_assets()

        log.info(
            "Published %d documents to %s (%d drafts skipped, %d issues)",
            len(self.entries),
            output_dir,
            drafts_skipped,
            len(self.issues),
        )

        return PublishResult(
            documents_published=len(self.entries),
            drafts_skipped=drafts_skipped,
            issues=self.issues,
            output_dir=str(output_dir),
            search_index_path=search_index_path,
        )

    def _scan_exclude(self) -> list[str]:
        """Exclude globs, plus the output directory when it is inside the content root.

        Otherwise a previous build's media copies are scanned as assets.
        """
        patterns = list(self.config.exclude)
        try:
            rel = self.config.output_dir.resolve().relative_to(self.content_root.resolve())
        except ValueError:
            return patterns
        if rel.parts:
            log.debug("Output directory %s is inside the content root, skipping it", rel)
            patterns.append(f"{rel.as_posix()}/*")
        return patterns

    def _process_document(self, doc: Document, published_slugs: set[str]) -> None:
        html_content = self._render_markdown(doc, published_slugs)

        backlinks = [
            PageRef(slug, self.store.documents[slug].title)
            for slug in sorted(self.graph.backlinks.get(doc.slug, []))
            if slug in published_slugs and slug != doc.slug
        ]

        self.entries[doc.slug] = EntryData(
            slug=doc.slug,
            title=doc.title,
            html_content=html_content,
            document=doc,
            tags=list(doc.tags),
            draft=doc.draft,
            backlinks=backlinks,
        )

        for tag in doc.tags:
            self.tags_index.setdefault(tag, []).append(doc.slug)

    def _render_markdown(self, doc: Document, published_slugs: set[str]) -> str:
        """Render a document body with resolved wikilinks.

        Returns:
            Rendered HTML string
        """
        # Renderer class factory that captures this document's context
        title_index = self.title_index
        store = self.store
        base_url = self.config.base_url
        issues = self.issues
        used_assets = self.used_assets

        class ConfiguredRenderer(StaticWikilinkRenderer):
            def __init__(self, parser=None):
                super().__init__(
                    parser,
                    title_index=title_index,
                    published=published_slugs,
                    store=store,
                    source=doc,
                    base_url=base_url,
                    issues=issues,
                    used_assets=used_assets,
                )

        md = create_markdown(renderer_cls=ConfiguredRenderer)
        return md.render(doc.body)

    def _render_all_pages(self) -> None:
        """Render all HTML pages."""
        from .templates import (
            render_entry_page,
            render_graph_page,
            render_index_page,
            render_tag_page,
            tag_slug,
        )

        output_dir = self.config.output_dir
        site_title = self.config.site_title
        base_url = self.config.base_url

        for slug, entry in self.entries.items():
            html = render_entry_page(entry=entry, site_title=site_title, base_url=base_url)
            (output_dir / f"{slug}.html").write_text(html, encoding="utf-8")

        index_html = render_index_page(
            entries=list(self.entries.values()),
            tags_index=self.tags_index,
            site_title=site_title,
            base_url=base_url,
        )
        (output_dir / "index.html").write_text(index_html, encoding="utf-8")

        graph_html = render_graph_page(site_title=site_title, base_url=base_url)
        (output_dir / "graph.html").write_text(graph_html, encoding="utf-8")

        tags_dir = output_dir / "tags"
        tags_dir.mkdir(exist_ok=True)

        for tag, slugs in sorted(self.tags_index.items()):
            tag_entries = [self.entries[s] for s in slugs if s in self.entries]
            tag_html = render_tag_page(
                tag=tag,
                entries=tag_entries,
                site_title=site_title,
                base_url=base_url,
            )
            (tags_dir / f"{tag_slug(tag)}.html").write_text(tag_html, encoding="utf-8")

    def _generate_search_index(self) -> str:
        """Generate the search index.

        Returns:
            Path to the generated search index file
        """
        from .search_index import build_search_index

        index_path = self.config.output_dir / "search-index.json"
        index_path.write_text(build_search_index(self.entries), encoding="utf-8")
        return str(index_path)

    def _copy_media(self) -> None:
        """Copy embedded media files, keeping their relative paths."""
        media_dir = self.config.output_dir / MEDIA_DIR
        for rel_path in sorted(self.used_assets):
            destination = media_dir / rel_path
            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(self.store.assets[rel_path], destination)

    def _copy_theme_assets(self) -> None:
        """Copy CSS and JS theme assets to output directory."""
        assets_dir = self.config.output_dir / "assets"
        assets_dir.mkdir(exist_ok=True)

        # Theme files are bundled with the package
        theme_dir = Path(__file__).parent / "theme"

        for asset in sorted(theme_dir.glob("*")):
            if asset.is_file():
                shutil.copyfile(asset, assets_dir / asset.name)
