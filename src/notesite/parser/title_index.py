"""Title-to-slug index for resolving wiki-style links.

Enables resolution of [[Title]], [[Alias]], [[slug]] and path-style
[[folder/note]] links. All lookups are case-insensitive.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import PurePosixPath

from ..models import Document, LinkTarget, ResolvedTarget, UnresolvedTarget
from .links import normalize_link

log = logging.getLogger(__name__)

TitleIndex = dict[str, str]


def _register(index: TitleIndex, key: str, slug: str) -> None:
    key = key.lower().strip()
    if not key:
        return
    if key in index:
        if index[key] != slug:
            log.debug("Link key %r already maps to %s, ignoring %s", key, index[key], slug)
        return
    index[key] = slug


def build_title_index(documents: Iterable[Document]) -> TitleIndex:
    """Build an index mapping titles, aliases, slugs and paths to slugs.

    Keys are registered in passes so a document title always beats another
    document's alias, slug or filename. Within a pass the first document
    wins, which keeps resolution deterministic for a given store.

    Args:
        documents: Store documents in scan order.

    Returns:
        Dict mapping lowercase key to slug.
    """
    documents = list(documents)
    index: TitleIndex = {}

    for doc in documents:
        _register(index, doc.title, doc.slug)

    for doc in documents:
        for alias in doc.aliases:
            _register(index, alias, doc.slug)

    for doc in documents:
        _register(index, doc.slug, doc.slug)

    for doc in documents:
        path = PurePosixPath(doc.path).with_suffix("")
        _register(index, str(path), doc.slug)
        _register(index, path.name, doc.slug)

    return index


def resolve_link_target(target: str, title_index: TitleIndex) -> LinkTarget:
    """Resolve a link target against the index.

    Args:
        target: The link target from [[target]].
        title_index: Index built by build_title_index.

    Returns:
        ResolvedTarget with the document slug, or UnresolvedTarget carrying
        the target text.
    """
    normalized = normalize_link(target)
    slug = title_index.get(normalized.lower())
    if slug is not None:
        return ResolvedTarget(slug=slug)
    return UnresolvedTarget(label=normalized)
