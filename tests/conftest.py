"""Shared test fixtures for the notesite test suite.

Design:
- content_root: isolated notes directory in a temp dir
- kalman_root: small corpus with cross-linked notes, a draft and an image
- runner: CliRunner for command tests
"""

import os
from collections.abc import Generator
from pathlib import Path

import pytest
from click.testing import CliRunner

# Smallest valid PNG (1x1 transparent pixel)
PNG_BYTES = (
    b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01\x08\x06"
    b"\x00\x00\x00\x1f\x15\xc4\x89\x00\x00\x00\rIDATx\x9cc\xf8\x0f\x00\x00\x01\x01"
    b"\x00\x05\x18\xd8N\x00\x00\x00\x00IEND\xaeB`\x82"
)


# ─────────────────────────────────────────────────────────────────────────────
# Helper Functions (for test code, not fixtures)
# ─────────────────────────────────────────────────────────────────────────────


def create_note(
    root: Path,
    path: str,
    title: str | None,
    body: str = "",
    tags: list[str] | None = None,
    draft: bool = False,
    aliases: list[str] | None = None,
) -> Path:
    """Write a note with front matter.

    Usage in tests:
        from conftest import create_note
        create_note(content_root, "kalman.md", "Kalman Filter", "Body", ["math"])
    """
    note_path = root / path
    note_path.parent.mkdir(parents=True, exist_ok=True)

    lines = ["---"]
    if title is not None:
        lines.append(f"title: {title}")
    if tags:
        lines.append(f"tags: [{', '.join(tags)}]")
    if aliases:
        lines.append(f"aliases: [{', '.join(aliases)}]")
    if draft:
        lines.append("draft: true")
    lines.append("---")
    lines.append("")
    lines.append(body)

    note_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return note_path


def read_tree(root: Path) -> dict[str, bytes]:
    """All files under root keyed by relative path."""
    return {
        str(p.relative_to(root)): p.read_bytes() for p in sorted(root.rglob("*")) if p.is_file()
    }


# ─────────────────────────────────────────────────────────────────────────────
# Core Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def runner() -> CliRunner:
    """CLI runner with isolated environment."""
    return CliRunner()


@pytest.fixture
def content_root(tmp_path: Path) -> Generator[Path, None, None]:
    """Empty notes directory, with NOTESITE_CONTENT_ROOT cleared."""
    root = tmp_path / "notes"
    root.mkdir()

    original = os.environ.pop("NOTESITE_CONTENT_ROOT", None)
    yield root
    if original is not None:
        os.environ["NOTESITE_CONTENT_ROOT"] = original


@pytest.fixture
def kalman_root(content_root: Path) -> Path:
    """Corpus shaped like a personal site.

    Creates:
    - posts/kalman-filter.md  (links to itself via a section and to TCP, embeds a figure)
    - resume.md               (links to [[Kalman Filter]] and [[result type]])
    - notes/result-type.md    (alias "Result", links back to Resume)
    - drafts/wip.md           (draft: true, links to Kalman Filter)
    - posts/figures/gain.png
    """
    create_note(
        content_root,
        "posts/kalman-filter.md",
        "Kalman Filter",
        "# Kalman Filter\n\n"
        "The gain is $K_k = P_k H^T (H P_k H^T + R)^{-1}$.\n\n"
        "$$\n\\hat{x}_k = \\hat{x}_{k|k-1} + K_k (z_k - H \\hat{x}_{k|k-1})\n$$\n\n"
        "## Update Step\n\n"
        "See [[#Update Step]] and the transport in [[TCP]].\n\n"
        "![[gain.png]]\n",
        tags=["math", "estimation"],
    )
    create_note(
        content_root,
        "resume.md",
        "Resume",
        "Wrote about the [[Kalman Filter]] and a [[result type|Result type]].\n",
        tags=["about"],
    )
    create_note(
        content_root,
        "notes/result-type.md",
        "Result Type",
        "Emulating a sum type. Author: [[Resume]].\n",
        tags=["code"],
        aliases=["Result"],
    )
    create_note(
        content_root,
        "drafts/wip.md",
        "Work In Progress",
        "Follow-up on [[Kalman Filter]].\n",
        draft=True,
    )
    figures = content_root / "posts" / "figures"
    figures.mkdir(parents=True)
    (figures / "gain.png").write_bytes(PNG_BYTES)
    return content_root
