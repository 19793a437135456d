"""Tests for the content store scan."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from conftest import create_note
from notesite.config import ConfigurationError
from notesite.store import ContentStore


class TestScan:
    """Tests for ContentStore.scan."""

    def test_reads_documents_and_assets(self, kalman_root: Path):
        store = ContentStore.scan(kalman_root)

        assert set(store.documents) == {"kalman-filter", "resume", "result-type", "work-in-progress"}
        assert list(store.assets) == ["posts/figures/gain.png"]
        assert store.issues == []

    def test_scan_order_is_sorted_by_path(self, kalman_root: Path):
        store = ContentStore.scan(kalman_root)

        paths = [doc.path for doc in store.documents.values()]
        assert paths == sorted(paths)

    def test_parse_error_does_not_abort_scan(self, content_root: Path, caplog):
        create_note(content_root, "good.md", "Good")
        (content_root / "bad.md").write_text("---\ntitle: [oops\n---\nBody\n", encoding="utf-8")
        create_note(content_root, "zeta.md", "Zeta")

        with caplog.at_level(logging.WARNING, logger="notesite"):
            store = ContentStore.scan(content_root)

        assert set(store.documents) == {"good", "zeta"}
        assert len(store.issues) == 1
        assert store.issues[0].kind == "parse_error"
        assert store.issues[0].path == "bad.md"
        assert "bad.md" in caplog.text

    def test_duplicate_slug_first_wins(self, content_root: Path, caplog):
        create_note(content_root, "a/kalman.md", "Kalman Filter", "first")
        create_note(content_root, "b/kalman.md", "kalman filter", "second")

        with caplog.at_level(logging.WARNING, logger="notesite"):
            store = ContentStore.scan(content_root)

        assert store.documents["kalman-filter"].path == "a/kalman.md"
        assert [issue.kind for issue in store.issues] == ["duplicate_slug"]
        assert store.issues[0].path == "b/kalman.md"
        assert "a/kalman.md" in store.issues[0].message
        assert "keeping the first" in caplog.text

    def test_skips_hidden_and_underscore_paths(self, content_root: Path):
        create_note(content_root, "visible.md", "Visible")
        create_note(content_root, ".obsidian/config.md", "Hidden")
        create_note(content_root, "_site/old.md", "Built")
        create_note(content_root, "_template.md", "Template")

        store = ContentStore.scan(content_root)

        assert list(store.documents) == ["visible"]

    def test_exclude_globs(self, content_root: Path):
        create_note(content_root, "keep.md", "Keep")
        create_note(content_root, "templates/daily.md", "Daily")

        store = ContentStore.scan(content_root, exclude=["templates/*"])

        assert list(store.documents) == ["keep"]

    def test_site_config_is_not_an_asset(self, content_root: Path):
        (content_root / "notesite.yaml").write_text("title: Notes\n", encoding="utf-8")

        store = ContentStore.scan(content_root)

        assert store.assets == {}

    def test_missing_root_raises(self, tmp_path: Path):
        with pytest.raises(ConfigurationError):
            ContentStore.scan(tmp_path / "nope")


class TestPublished:
    """Tests for draft filtering."""

    def test_drafts_excluded_by_default(self, kalman_root: Path):
        store = ContentStore.scan(kalman_root)

        slugs = [doc.slug for doc in store.published()]

        assert "work-in-progress" not in slugs
        assert len(slugs) == 3

    def test_drafts_included_on_request(self, kalman_root: Path):
        store = ContentStore.scan(kalman_root)

        slugs = [doc.slug for doc in store.published(include_drafts=True)]

        assert "work-in-progress" in slugs


class TestFindAsset:
    """Tests for embedded asset lookup."""

    @pytest.fixture
    def store(self, content_root: Path) -> ContentStore:
        create_note(content_root, "posts/kf.md", "KF")
        for rel in ("posts/plot.png", "plot.png", "media/figures/gain.png"):
            path = content_root / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(b"png")
        return ContentStore.scan(content_root)

    def test_relative_to_source_folder_first(self, store: ContentStore):
        assert store.find_asset("plot.png", "posts/kf.md") == "posts/plot.png"

    def test_relative_to_root(self, store: ContentStore):
        assert store.find_asset("plot.png", "other/note.md") == "plot.png"
        assert store.find_asset("media/figures/gain.png") == "media/figures/gain.png"

    def test_filename_anywhere(self, store: ContentStore):
        assert store.find_asset("GAIN.png", "posts/kf.md") == "media/figures/gain.png"

    def test_missing(self, store: ContentStore):
        assert store.find_asset("absent.png", "posts/kf.md") is None
        assert store.find_asset("  ") is None
