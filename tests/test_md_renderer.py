"""Tests for markdown rendering: wikilinks, math and headings."""

from __future__ import annotations

import pytest

from notesite.parser.md_renderer import MarkdownResult, render_markdown


class TestRenderMarkdown:
    """Tests for render_markdown function."""

    def test_returns_markdown_result(self):
        result = render_markdown("See [[target]] here.")

        assert isinstance(result, MarkdownResult)
        assert isinstance(result.html, str)
        assert isinstance(result.links, list)

    def test_extracts_wikilinks(self):
        result = render_markdown("[[foo]] and [[bar|Display]]")

        assert result.links == ["foo", "bar"]

    def test_renders_wikilinks_to_html(self):
        result = render_markdown("See [[target]]")

        assert 'class="wikilink"' in result.html
        assert 'data-path="target"' in result.html

    def test_label_is_display_text(self):
        result = render_markdown("[[Kalman Filter|the filter]]")

        assert ">the filter</a>" in result.html

    def test_link_text_is_escaped(self):
        result = render_markdown("[[A <b> note]]")

        assert "<b>" not in result.html
        assert "A &lt;b&gt; note" in result.html

    def test_renders_tables(self):
        content = """
| Header 1 | Header 2 |
|----------|----------|
| Cell 1   | Cell 2   |
"""
        result = render_markdown(content)

        assert "<table>" in result.html
        assert "<th>Header 1</th>" in result.html
        assert "<td>Cell 1</td>" in result.html

    def test_code_is_not_linked(self):
        result = render_markdown("`[[inline]]`\n\n```\n[[fenced]]\n```\n")

        assert "wikilink" not in result.html
        assert "[[inline]]" in result.html
        assert "[[fenced]]" in result.html
        assert result.links == []

    def test_empty_content_returns_empty(self):
        result = render_markdown("")

        assert result.html == ""
        assert result.links == []


class TestMath:
    """Math is passed through verbatim for client-side typesetting."""

    def test_inline_math_preserved(self):
        result = render_markdown("Gain $K_k = P_k * H^T$ here.")

        assert '<span class="math math-inline">\\(K_k = P_k * H^T\\)</span>' in result.html
        assert "<em>" not in result.html

    def test_display_block_preserved(self):
        content = "Before\n\n$$\n\\hat{x}_k = a_k * b_k\n$$\n\nAfter\n"

        result = render_markdown(content)

        assert '<div class="math math-display">\\[\\hat{x}_k = a_k * b_k\\]</div>' in result.html
        assert "<p>After</p>" in result.html

    def test_single_line_display_block(self):
        result = render_markdown("$$ x^2 $$\n")

        assert '<div class="math math-display">\\[ x^2 \\]</div>' in result.html

    def test_display_block_interrupts_paragraph(self):
        result = render_markdown("Text\n$$\ny = x\n$$\n")

        assert "<p>Text</p>" in result.html
        assert '<div class="math math-display">' in result.html

    def test_math_is_html_escaped(self):
        result = render_markdown("$a < b$")

        assert "\\(a &lt; b\\)" in result.html

    def test_wikilink_syntax_inside_math_untouched(self):
        result = render_markdown("$[[x]]$")

        assert "wikilink" not in result.html

    @pytest.mark.parametrize(
        "content",
        [
            "Costs $5 and $10 today.",
            "A lone $ sign.",
            "Escaped \\$x\\$ dollars.",
        ],
    )
    def test_dollar_signs_that_are_not_math(self, content: str):
        result = render_markdown(content)

        assert "math" not in result.html

    def test_unclosed_display_block_is_text(self):
        result = render_markdown("$$\nnever closed\n")

        assert 'class="math' not in result.html
        assert "never closed" in result.html


class TestHeadings:
    """Headings get ids so [[Note#Section]] links land on them."""

    def test_heading_ids(self):
        result = render_markdown("# Kalman Filter\n\n## Update Step\n")

        assert '<h1 id="kalman-filter">Kalman Filter</h1>' in result.html
        assert '<h2 id="update-step">Update Step</h2>' in result.html

    def test_duplicate_heading_ids_numbered(self):
        result = render_markdown("## Notes\n\n## Notes\n")

        assert 'id="notes"' in result.html
        assert 'id="notes-1"' in result.html

    def test_same_page_anchor_link(self):
        result = render_markdown("[[#Update Step]]")

        assert '<a class="wikilink" href="#update-step">Update Step</a>' in result.html
