"""Markdown parsing with frontmatter and link extraction."""

from .links import WikiLink, extract_links, extract_wikilinks, normalize_link
from .markdown import ParseError, parse_document, parse_frontmatter_text, slugify
from .title_index import TitleIndex, build_title_index, resolve_link_target

__all__ = [
    "parse_document",
    "parse_frontmatter_text",
    "ParseError",
    "slugify",
    "WikiLink",
    "extract_links",
    "extract_wikilinks",
    "normalize_link",
    "TitleIndex",
    "build_title_index",
    "resolve_link_target",
]
