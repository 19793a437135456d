"""Link graph built from wiki-links across the whole store.

The graph is derived, never stored: it is recomputed on every resolution
pass. Cycles and self-references are kept as written.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import PurePosixPath
from typing import TYPE_CHECKING

from .config import ATTACHMENT_EXTENSIONS, IMAGE_EXTENSIONS
from .models import BuildIssue, Document, Link, LinkGraph, ResolvedTarget
from .parser import WikiLink, extract_wikilinks
from .parser.title_index import TitleIndex, build_title_index, resolve_link_target

if TYPE_CHECKING:
    from .store import ContentStore

MEDIA_EXTENSIONS = IMAGE_EXTENSIONS | ATTACHMENT_EXTENSIONS


def is_media_reference(link: WikiLink) -> bool:
    """True for ![[file.png]]-style embeds of non-note files."""
    return link.embed and PurePosixPath(link.target).suffix.lower() in MEDIA_EXTENSIONS


def _append_unique(index: dict[str, list[str]], key: str, value: str) -> None:
    values = index.setdefault(key, [])
    if value not in values:
        values.append(value)


def resolve_links(
    documents: Iterable[Document],
    title_index: TitleIndex | None = None,
) -> LinkGraph:
    """Resolve every [[...]] token in every document body.

    Args:
        documents: Store documents in scan order.
        title_index: Prebuilt index (built from documents when omitted).

    Returns:
        LinkGraph with links in document order, and forward, backlink and
        unresolved indices. Same-page [[#Section]] links and media embeds
        are not part of the graph.
    """
    documents = list(documents)
    if title_index is None:
        title_index = build_title_index(documents)

    graph = LinkGraph()

    for doc in documents:
        for token in extract_wikilinks(doc.body):
            if not token.target or is_media_reference(token):
                continue

            target = resolve_link_target(token.target, title_index)
            graph.links.append(
                Link(
                    source=doc.slug,
                    target=token.target,
                    label=token.label,
                    anchor=token.anchor,
                    embed=token.embed,
                    resolved=target,
                )
            )

            if isinstance(target, ResolvedTarget):
                _append_unique(graph.forward, doc.slug, target.slug)
                _append_unique(graph.backlinks, target.slug, doc.slug)
            else:
                _append_unique(graph.unresolved, doc.slug, target.label)

    return graph


def unresolved_issues(graph: LinkGraph, documents: dict[str, Document]) -> list[BuildIssue]:
    """Report unresolved links for review. These are never errors."""
    issues = []
    for slug, labels in graph.unresolved.items():
        doc = documents.get(slug)
        path = doc.path if doc else slug
        for label in labels:
            issues.append(
                BuildIssue(
                    kind="unresolved_link",
                    path=path,
                    message=f"[[{label}]] does not match any document",
                )
            )
    return issues


def graph_to_json(graph: LinkGraph, documents: Iterable[Document]) -> str:
    """Serialize the graph of the given documents for the site graph page.

    Only edges whose endpoints are both in documents are kept. Output is
    sorted so repeated builds are byte-identical.
    """
    documents = list(documents)
    known = {doc.slug for doc in documents}

    nodes = [
        {"id": doc.slug, "title": doc.title, "tags": list(doc.tags), "url": f"{doc.slug}.html"}
        for doc in sorted(documents, key=lambda d: d.slug)
    ]

    edges = sorted(
        {
            (source, target)
            for source, targets in graph.forward.items()
            if source in known
            for target in targets
            if target in known
        }
    )

    data = {
        "nodes": nodes,
        "edges": [{"source": source, "target": target} for source, target in edges],
    }
    return json.dumps(data, indent=2, sort_keys=True, ensure_ascii=False)


def media_issues(documents: Iterable[Document], store: ContentStore) -> list[BuildIssue]:
    """Report ![[file]] embeds whose file is not in the store."""
    issues = []
    for doc in documents:
        for token in extract_wikilinks(doc.body):
            if is_media_reference(token) and store.find_asset(token.target, doc.path) is None:
                issues.append(
                    BuildIssue(
                        kind="missing_asset",
                        path=doc.path,
                        message=f"Embedded asset not found: {token.target}",
                    )
                )
    return issues
