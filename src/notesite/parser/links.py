"""Wiki-link extraction.

Handles [[Target]], [[Target|Label]], [[Target#Section]] and the embed form
![[asset.png]]. Tokens inside fenced code blocks and inline code spans are
ignored.
"""

import re
from typing import NamedTuple

# Captures an optional leading "!" (embed) and the content between brackets
LINK_PATTERN = re.compile(r"(!?)\[\[([^\[\]\n]+?)\]\]")

_FENCE_PATTERN = re.compile(
    r"^[ \t]*(?P<fence>`{3,}|~{3,}).*?^[ \t]*(?P=fence)[ \t]*$", re.MULTILINE | re.DOTALL
)
_INLINE_CODE_PATTERN = re.compile(r"(`+)(?!`).+?(?<!`)\1(?!`)")


class WikiLink(NamedTuple):
    """A single [[...]] token as written in a note."""

    target: str  # Normalized target ("" for same-page [[#Section]])
    label: str | None = None
    anchor: str | None = None
    embed: bool = False

    @property
    def display(self) -> str:
        if self.label:
            return self.label
        if self.target and self.anchor:
            return f"{self.target} > {self.anchor}"
        return self.target or self.anchor or ""


def normalize_link(link: str) -> str:
    """Normalize a link target.

    - Strips whitespace
    - Removes .md extension
    - Normalizes path separators and strips surrounding slashes
    """
    link = link.strip()

    if link.endswith(".md"):
        link = link[:-3]

    link = link.replace("\\", "/")

    return link.strip("/").strip()


def parse_wikilink(inner: str, embed: bool = False) -> WikiLink:
    """Parse the text between [[ and ]].

    Args:
        inner: e.g. "Target#Section|Label".
        embed: Whether the token was written as ![[...]].
    """
    target_part, sep, label = inner.partition("|")
    label = label.strip() if sep else None

    target_part, sep, anchor = target_part.partition("#")
    anchor = anchor.strip() if sep else None

    return WikiLink(
        target=normalize_link(target_part),
        label=label or None,
        anchor=anchor or None,
        embed=embed,
    )


def _mask_code(content: str) -> str:
    """Blank out code so links inside it are not matched."""

    def blank(match: re.Match) -> str:
        return re.sub(r"[^\n]", " ", match.group(0))

    content = _FENCE_PATTERN.sub(blank, content)
    return _INLINE_CODE_PATTERN.sub(blank, content)


def extract_wikilinks(content: str) -> list[WikiLink]:
    """Extract every wiki-link token in document order, duplicates included."""
    if not content:
        return []

    links: list[WikiLink] = []
    for match in LINK_PATTERN.finditer(_mask_code(content)):
        link = parse_wikilink(match.group(2), embed=bool(match.group(1)))
        if link.target or link.anchor:
            links.append(link)
    return links


def extract_links(content: str) -> list[str]:
    """Extract link targets from markdown content.

    Returns:
        List of unique, normalized link targets in order of first appearance.
        Same-page [[#Section]] links are omitted.
    """
    seen: set[str] = set()
    targets: list[str] = []

    for link in extract_wikilinks(content):
        if link.target and link.target not in seen:
            seen.add(link.target)
            targets.append(link.target)

    return targets
