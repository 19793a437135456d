"""Markdown parsing with YAML frontmatter support."""

import hashlib
import re
from pathlib import Path

import frontmatter
import yaml
from pydantic import ValidationError

from ..models import Document, FrontMatter

_handler = frontmatter.YAMLHandler()


class ParseError(Exception):
    """Raised when a note cannot be parsed."""

    def __init__(self, path: Path | str, message: str) -> None:
        self.path = path
        self.message = message
        super().__init__(f"{path}: {message}")


def slugify(title: str) -> str:
    """Convert title to URL-friendly slug (lowercase, hyphens, alphanumeric only)."""
    slug = title.lower()
    slug = re.sub(r"[\s_]+", "-", slug)
    slug = re.sub(r"[^a-z0-9-]", "", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


def parse_frontmatter_text(text: str, path: Path | str = "<string>") -> tuple[FrontMatter, str]:
    """Split a note into validated front matter and raw body.

    A note without a leading `---` block has empty front matter.

    Args:
        text: Full file contents.
        path: Used in error messages only.

    Returns:
        Tuple of (front_matter, body).

    Raises:
        ParseError: If the YAML is malformed, is not a mapping, or has fields
            of the wrong type.
    """
    text = text.lstrip("\ufeff")

    if not _handler.detect(text):
        return FrontMatter(), text

    try:
        raw_fm, body = _handler.split(text)
    except ValueError as e:
        raise ParseError(path, "Front matter block is not closed with '---'") from e

    try:
        data = yaml.safe_load(raw_fm)
    except yaml.YAMLError as e:
        raise ParseError(path, f"Failed to parse front matter: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ParseError(path, f"Front matter must be a mapping, got {type(data).__name__}")

    try:
        front_matter = FrontMatter.model_validate(data)
    except ValidationError as e:
        errors = []
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            errors.append(f"  - {loc}: {error['msg']}")
        raise ParseError(path, "Invalid front matter:\n" + "\n".join(errors)) from e

    return front_matter, body.lstrip("\n")


def parse_document(path: Path, root: Path) -> Document:
    """Parse a markdown file into a Document.

    The title falls back to the file stem, and the slug is derived from the title.
    When neither title nor stem slugifies, the slug is `note-` plus a hash of
    the relative path.

    Raises:
        ParseError: If the file cannot be read or has invalid front matter.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ParseError(path, f"Cannot read file: {e}") from e

    rel_path = path.relative_to(root).as_posix()
    front_matter, body = parse_frontmatter_text(text, rel_path)

    title = (front_matter.title or "").strip() or path.stem
    # Titles with no ASCII letters or digits get a stable per-path slug
    slug = slugify(title) or slugify(path.stem)
    if not slug:
        slug = "note-" + hashlib.sha1(rel_path.encode("utf-8")).hexdigest()[:8]

    return Document(
        slug=slug,
        path=rel_path,
        title=title,
        tags=front_matter.tags,
        draft=front_matter.draft,
        aliases=front_matter.aliases,
        body=body,
    )
