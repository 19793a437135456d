"""Search index for client-side search.

The index is a JSON list of documents; assets/search.js builds a Lunr.js
index from it in the browser.
"""

from __future__ import annotations

import html
import json
import re
from typing import TYPE_CHECKING

from ..config import SEARCH_TEXT_LIMIT

if TYPE_CHECKING:
    from .generator import EntryData

_TAG_PATTERN = re.compile(r"<[^>]+>")
_SPACE_PATTERN = re.compile(r"\s+")


def html_to_text(markup: str) -> str:
    """Strip tags and collapse whitespace."""
    text = html.unescape(_TAG_PATTERN.sub(" ", markup))
    return _SPACE_PATTERN.sub(" ", text).strip()


def build_search_index(entries: dict[str, "EntryData"]) -> str:
    """Build the search index JSON.

    Args:
        entries: Slug -> entry data for every published document.

    Returns:
        JSON string, sorted by slug for reproducible output.
    """
    docs = [
        {
            "id": slug,
            "title": entry.title,
            "tags": list(entry.tags),
            "text": html_to_text(entry.html_content)[:SEARCH_TEXT_LIMIT],
            "url": f"{slug}.html",
        }
        for slug, entry in sorted(entries.items())
    ]
    return json.dumps(docs, indent=2, sort_keys=True, ensure_ascii=False)
