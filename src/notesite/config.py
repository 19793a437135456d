"""Configuration management for notesite.

This module contains the configurable constants for a site build and the
loader for the optional `notesite.yaml` file at the content root.

Example notesite.yaml:
    title: My Notes
    base_url: /notes
    include_drafts: false
    output_dir: _site
    exclude:
      - templates/*
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

log = logging.getLogger(__name__)

# Site config filename (looked up in the content root only)
SITE_CONFIG_FILENAME = "notesite.yaml"

# Default output directory, relative to the working directory
DEFAULT_OUTPUT_DIR = "_site"

DEFAULT_SITE_TITLE = "Notes"

# Extensions treated as embeddable images for ![[asset]]
IMAGE_EXTENSIONS = frozenset({".png", ".jpg", ".jpeg", ".gif", ".svg", ".webp", ".avif", ".bmp"})

# Other media copied to the output when embedded (rendered as download links)
ATTACHMENT_EXTENSIONS = frozenset({".pdf", ".mp4", ".webm", ".mp3", ".ogg", ".wav", ".txt", ".csv"})

# Characters of plain text kept per document in the search index
SEARCH_TEXT_LIMIT = 5000


class ConfigurationError(Exception):
    """Raised when the content root or site config cannot be used."""

    pass


@dataclass
class SiteConfig:
    """Settings read from notesite.yaml."""

    title: str = DEFAULT_SITE_TITLE
    base_url: str = ""
    include_drafts: bool = False
    output_dir: str = DEFAULT_OUTPUT_DIR
    exclude: list[str] = field(default_factory=list)
    """Glob patterns (relative POSIX paths) skipped during the scan."""

    source_file: Path | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any], source_file: Path | None = None) -> "SiteConfig":
        exclude = data.get("exclude") or []
        if isinstance(exclude, str):
            exclude = [exclude]
        return cls(
            title=str(data.get("title") or DEFAULT_SITE_TITLE),
            base_url=normalize_base_url(str(data.get("base_url") or "")),
            include_drafts=bool(data.get("include_drafts", False)),
            output_dir=str(data.get("output_dir") or DEFAULT_OUTPUT_DIR),
            exclude=[str(pattern) for pattern in exclude],
            source_file=source_file,
        )


def normalize_base_url(base_url: str) -> str:
    """Strip trailing slashes so `{base_url}/{slug}.html` stays well formed."""
    return base_url.strip().rstrip("/")


def get_content_root() -> Path:
    """Get the content root directory.

    Discovery order:
    1. NOTESITE_CONTENT_ROOT environment variable
    2. Current working directory

    Raises:
        ConfigurationError: If the directory does not exist.
    """
    root = os.environ.get("NOTESITE_CONTENT_ROOT")
    path = Path(root) if root else Path.cwd()
    if not path.is_dir():
        raise ConfigurationError(
            f"Content root not found: {path}\n"
            "  Pass --content-root or set NOTESITE_CONTENT_ROOT to a directory of notes"
        )
    return path


def load_site_config(content_root: Path) -> SiteConfig:
    """Load notesite.yaml from the content root.

    A missing file yields the defaults.

    Raises:
        ConfigurationError: If the file exists but is not a YAML mapping.
    """
    config_file = content_root / SITE_CONFIG_FILENAME
    if not config_file.exists():
        return SiteConfig()

    try:
        data = yaml.safe_load(config_file.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Cannot read {config_file}: {e}") from e

    # Empty or all-comments file
    if data is None:
        return SiteConfig(source_file=config_file)

    if not isinstance(data, dict):
        raise ConfigurationError(f"{config_file}: expected a mapping, got {type(data).__name__}")

    log.debug("Loaded site config from %s", config_file)
    return SiteConfig.from_dict(data, source_file=config_file)
