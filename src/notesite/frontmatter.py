"""Frontmatter building utilities for notes.

Serializes FrontMatter back to a YAML block that parse_frontmatter_text reads
into the same title, tags, aliases and draft flag.
"""

import yaml

from .models import Document, FrontMatter


def _yaml_quote_if_needed(value: str) -> str:
    """Quote a string value if it contains YAML special characters.

    Uses PyYAML to determine if quoting is needed by testing if the value
    roundtrips correctly through YAML parsing. Values like `yes`, `123`,
    `a: b` or a leading `*` need quoting.
    """
    test_yaml = f"key: {value}"
    try:
        parsed = yaml.safe_load(test_yaml)
        if isinstance(parsed, dict) and parsed.get("key") == value:
            return value
    except yaml.YAMLError:
        pass
    dumped = yaml.safe_dump({"key": value}, default_flow_style=False, allow_unicode=True).strip()
    # 'key: VALUE' -> 'VALUE'
    return dumped[5:]


def _format_yaml_list(items: list[str]) -> str:
    """Format a list as indented YAML list items, no trailing newline."""
    return "\n".join(f"  - {_yaml_quote_if_needed(item)}" for item in items)


def build_frontmatter(front_matter: FrontMatter) -> str:
    """Build YAML frontmatter string.

    Optional fields are only written when they differ from their defaults.

    Returns:
        Frontmatter including --- delimiters and a trailing blank line.
    """
    parts = ["---"]

    if front_matter.title is not None:
        parts.append(f"title: {_yaml_quote_if_needed(front_matter.title)}")

    if front_matter.tags:
        parts.append("tags:")
        parts.append(_format_yaml_list(front_matter.tags))

    if front_matter.aliases:
        parts.append("aliases:")
        parts.append(_format_yaml_list(front_matter.aliases))

    if front_matter.draft:
        parts.append("draft: true")

    parts.append("---\n\n")

    return "\n".join(parts)


def front_matter_for(document: Document) -> FrontMatter:
    """Front matter that reproduces a parsed document's metadata."""
    return FrontMatter(
        title=document.title,
        tags=list(document.tags),
        draft=document.draft,
        aliases=list(document.aliases),
    )


def serialize_document(document: Document) -> str:
    """Full file text (front matter plus body) for a document."""
    return build_frontmatter(front_matter_for(document)) + document.body
