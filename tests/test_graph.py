"""Tests for link resolution and the link graph."""

from __future__ import annotations

import json
from pathlib import Path

from conftest import create_note
from notesite.graph import graph_to_json, media_issues, resolve_links, unresolved_issues
from notesite.models import Document, ResolvedTarget, UnresolvedTarget
from notesite.store import ContentStore


def _doc(slug: str, title: str, body: str) -> Document:
    return Document(slug=slug, path=f"{slug}.md", title=title, body=body)


class TestResolveLinks:
    """Tests for resolve_links."""

    def test_resume_links_to_kalman_filter(self):
        docs = [
            _doc("kalman-filter", "Kalman Filter", "Estimation."),
            _doc("resume", "Resume", "I wrote about the [[Kalman Filter]]."),
        ]

        graph = resolve_links(docs)

        assert len(graph.links) == 1
        link = graph.links[0]
        assert link.source == "resume"
        assert link.resolved == ResolvedTarget(slug="kalman-filter")
        assert link.is_resolved
        assert graph.forward == {"resume": ["kalman-filter"]}
        assert graph.backlinks == {"kalman-filter": ["resume"]}

    def test_unmatched_target_is_unresolved(self):
        graph = resolve_links([_doc("kalman-filter", "Kalman Filter", "Over [[TCP]].")])

        link = graph.links[0]
        assert link.resolved == UnresolvedTarget(label="TCP")
        assert not link.is_resolved
        assert graph.unresolved == {"kalman-filter": ["TCP"]}
        assert graph.forward == {}

    def test_case_insensitive_match(self):
        docs = [
            _doc("kalman-filter", "Kalman Filter", ""),
            _doc("resume", "Resume", "[[kalman FILTER]]"),
        ]

        assert resolve_links(docs).links[0].resolved == ResolvedTarget(slug="kalman-filter")

    def test_cycles_and_self_references_allowed(self):
        docs = [
            _doc("a", "A", "[[B]] and [[A]]"),
            _doc("b", "B", "[[A]]"),
        ]

        graph = resolve_links(docs)

        assert graph.forward == {"a": ["b", "a"], "b": ["a"]}
        assert graph.backlinks == {"b": ["a"], "a": ["a", "b"]}

    def test_repeated_links_kept_but_edges_unique(self):
        graph = resolve_links(
            [_doc("a", "A", "[[B]] [[B|again]]"), _doc("b", "B", "")]
        )

        assert len(graph.links) == 2
        assert graph.links[1].label == "again"
        assert graph.forward == {"a": ["b"]}

    def test_media_embeds_and_local_anchors_excluded(self):
        graph = resolve_links([_doc("a", "A", "![[plot.png]] [[#Intro]] ![[B]]"), _doc("b", "B", "")])

        assert [(link.target, link.embed) for link in graph.links] == [("B", True)]

    def test_resolution_is_deterministic(self, kalman_root: Path):
        first = resolve_links(ContentStore.scan(kalman_root).documents.values())
        second = resolve_links(ContentStore.scan(kalman_root).documents.values())

        assert first == second

    def test_outgoing(self, kalman_root: Path):
        graph = resolve_links(ContentStore.scan(kalman_root).documents.values())

        targets = [link.target for link in graph.outgoing("resume")]

        assert targets == ["Kalman Filter", "result type"]


class TestIssues:
    """Tests for unresolved and media issue reporting."""

    def test_unresolved_issues(self, kalman_root: Path):
        store = ContentStore.scan(kalman_root)
        graph = resolve_links(store.documents.values())

        issues = unresolved_issues(graph, store.documents)

        assert [(i.kind, i.path) for i in issues] == [("unresolved_link", "posts/kalman-filter.md")]
        assert "[[TCP]]" in issues[0].message

    def test_media_issues(self, content_root: Path):
        create_note(content_root, "a.md", "A", "![[here.png]] ![[gone.png]]")
        (content_root / "here.png").write_bytes(b"png")
        store = ContentStore.scan(content_root)

        issues = media_issues(store.documents.values(), store)

        assert [i.message for i in issues] == ["Embedded asset not found: gone.png"]


class TestGraphToJson:
    """Tests for graph_to_json."""

    def test_only_given_documents_appear(self, kalman_root: Path):
        store = ContentStore.scan(kalman_root)
        graph = resolve_links(store.documents.values())

        data = json.loads(graph_to_json(graph, store.published()))

        ids = [node["id"] for node in data["nodes"]]
        assert ids == ["kalman-filter", "result-type", "resume"]
        assert {"source": "resume", "target": "kalman-filter"} in data["edges"]
        assert all(edge["source"] != "work-in-progress" for edge in data["edges"])
