"""Static-site renderer that resolves wiki-links against the content store."""

from __future__ import annotations

import logging
from pathlib import PurePosixPath
from urllib.parse import quote

from markdown_it.common.utils import escapeHtml

from ..config import IMAGE_EXTENSIONS
from ..graph import is_media_reference
from ..models import BuildIssue, Document, ResolvedTarget
from ..parser.links import WikiLink
from ..parser.markdown import slugify
from ..parser.md_renderer import WikilinkRenderer
from ..parser.title_index import TitleIndex, resolve_link_target
from ..store import ContentStore

log = logging.getLogger(__name__)

MEDIA_DIR = "media"


def media_url(base_url: str, asset_path: str) -> str:
    return f"{base_url}/{MEDIA_DIR}/{quote(asset_path)}"


class StaticWikilinkRenderer(WikilinkRenderer):
    """Renders [[...]] as site hyperlinks and ![[...]] as copied media.

    - Resolved links to published documents become `<a class="wikilink">`
    - Unresolved links, and links to documents left out of the build (drafts),
      become `<em class="wikilink-unresolved">`
    - Embedded media is recorded in `used_assets` for the generator to copy;
      missing media becomes a placeholder span and a `missing_asset` issue
    """

    def __init__(
        self,
        parser=None,
        *,
        title_index: TitleIndex,
        published: set[str],
        store: ContentStore,
        source: Document,
        base_url: str = "",
        issues: list[BuildIssue] | None = None,
        used_assets: set[str] | None = None,
    ):
        super().__init__(parser)
        self.title_index = title_index
        self.published = published
        self.store = store
        self.source = source
        self.base_url = base_url
        self.issues = issues if issues is not None else []
        self.used_assets = used_assets if used_assets is not None else set()

    def wikilink(self, tokens, idx, options, env) -> str:
        link: WikiLink = tokens[idx].meta["link"]

        if not link.target:
            return self.render_anchor_link(link)
        if is_media_reference(link):
            return self.render_embed(link)

        target = resolve_link_target(link.target, self.title_index)
        text = escapeHtml(link.display)

        if isinstance(target, ResolvedTarget) and target.slug in self.published:
            href = f"{self.base_url}/{target.slug}.html"
            if link.anchor:
                href += f"#{slugify(link.anchor)}"
            css = "wikilink embed" if link.embed else "wikilink"
            return f'<a class="{css}" href="{href}">{text}</a>'

        if isinstance(target, ResolvedTarget):
            log.debug("%s links to unpublished document %s", self.source.path, target.slug)

        return f'<em class="wikilink-unresolved">{text}</em>'

    def render_embed(self, link: WikiLink) -> str:
        """Render ![[file]] as an image or a file link."""
        asset = self.store.find_asset(link.target, self.source.path)
        name = escapeHtml(link.target)

        if asset is None:
            message = f"Embedded asset not found: {link.target}"
            log.warning("%s: %s", self.source.path, message)
            self.issues.append(
                BuildIssue(kind="missing_asset", path=self.source.path, message=message)
            )
            return f'<span class="embed-missing" title="Missing asset">{name}</span>'

        self.used_assets.add(asset)
        url = escapeHtml(media_url(self.base_url, asset))
        suffix = PurePosixPath(asset).suffix.lower()

        if suffix in IMAGE_EXTENSIONS:
            # Obsidian-style ![[image.png|300]] sets the width
            if link.label and link.label.isdigit():
                return f'<img src="{url}" alt="{name}" width="{link.label}">'
            alt = escapeHtml(link.label or PurePosixPath(link.target).stem)
            return f'<img src="{url}" alt="{alt}">'

        return f'<a class="embed-file" href="{url}">{escapeHtml(link.label or link.target)}</a>'
