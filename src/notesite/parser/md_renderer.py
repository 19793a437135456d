"""Markdown rendering with wiki-links and preserved math.

Extends markdown-it-py with:
- an inline rule turning [[...]] and ![[...]] into `wikilink` tokens
- block and inline rules keeping $$...$$ and $...$ verbatim as `math_block`
  and `math_inline` tokens, so Markdown never touches `_` or `*` inside them

The base WikilinkRenderer emits preview links (`data-path` only). The site
publisher subclasses it to resolve targets against the store.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from markdown_it import MarkdownIt
from markdown_it.common.utils import escapeHtml
from markdown_it.renderer import RendererHTML
from markdown_it.rules_block import StateBlock
from markdown_it.rules_inline import StateInline

from .links import WikiLink, parse_wikilink
from .markdown import slugify

# ─────────────────────────────────────────────────────────────────────────────
# Parser rules
# ─────────────────────────────────────────────────────────────────────────────


def _wikilink_rule(state: StateInline, silent: bool) -> bool:
    """Parse [[target|label]] and ![[embed]] into a wikilink token."""
    src = state.src
    pos = state.pos

    embed = src.startswith("![[", pos)
    if not embed and not src.startswith("[[", pos):
        return False

    start = pos + (3 if embed else 2)
    end = src.find("]]", start, state.posMax)
    if end == -1:
        return False

    inner = src[start:end]
    if not inner.strip() or "[" in inner or "\n" in inner:
        return False

    link = parse_wikilink(inner, embed=embed)
    if not link.target and not link.anchor:
        return False

    if not silent:
        token = state.push("wikilink", "", 0)
        token.content = inner
        token.markup = "![[" if embed else "[["
        token.meta = {"link": link}

    state.pos = end + 2
    return True


def _math_inline_rule(state: StateInline, silent: bool) -> bool:
    """Parse $...$ (and $$...$$ inside a paragraph) as raw math.

    An opening single `$` must not be followed by whitespace and the closing
    one must not follow whitespace or precede a digit, so prices like
    "$5 and $10" stay plain text.
    """
    src = state.src
    pos = state.pos
    if src[pos] != "$":
        return False

    display = src.startswith("$$", pos)
    delim = "$$" if display else "$"
    start = pos + len(delim)
    if start >= state.posMax:
        return False
    if not display and src[start] in " \t\n":
        return False

    search = start
    while True:
        end = src.find(delim, search, state.posMax)
        if end == -1:
            return False
        if src[end - 1] == "\\":
            search = end + 1
            continue
        if not display:
            after = end + 1
            if src[end - 1] in " \t\n" or (after < state.posMax and src[after].isdigit()):
                search = end + 1
                continue
        break

    if end == start:
        return False

    if not silent:
        token = state.push("math_inline_double" if display else "math_inline", "math", 0)
        token.content = src[start:end]
        token.markup = delim

    state.pos = end + len(delim)
    return True


def _math_block_rule(state: StateBlock, startLine: int, endLine: int, silent: bool) -> bool:
    """Parse a $$ ... $$ display block, on one line or spanning several."""
    pos = state.bMarks[startLine] + state.tShift[startLine]
    maximum = state.eMarks[startLine]

    # Indented code block
    if state.sCount[startLine] - state.blkIndent >= 4:
        return False
    if not state.src.startswith("$$", pos):
        return False

    first = state.src[pos + 2 : maximum].rstrip()
    lines: list[str] = []
    next_line = startLine
    found = False

    if first.endswith("$$"):
        lines.append(first[:-2])
        found = True
    else:
        if first.strip():
            lines.append(first)
        next_line = startLine + 1
        while next_line < endLine:
            line_start = state.bMarks[next_line] + state.tShift[next_line]
            line_end = state.eMarks[next_line]
            if line_start < line_end and state.sCount[next_line] < state.blkIndent:
                break
            line = state.src[line_start:line_end].rstrip()
            if line.endswith("$$"):
                lines.append(line[:-2])
                found = True
                break
            lines.append(line)
            next_line += 1

    if not found:
        return False
    if silent:
        return True

    state.line = next_line + 1
    token = state.push("math_block", "math", 0)
    token.block = True
    token.content = "\n".join(lines).strip("\n")
    token.markup = "$$"
    token.map = [startLine, state.line]
    return True


# ─────────────────────────────────────────────────────────────────────────────
# Renderer
# ─────────────────────────────────────────────────────────────────────────────


class WikilinkRenderer(RendererHTML):
    """HTML renderer for wikilink and math tokens.

    Methods named after token types are picked up by RendererHTML as rules.
    """

    def wikilink(self, tokens, idx, options, env) -> str:
        link: WikiLink = tokens[idx].meta["link"]
        if not link.target:
            return self.render_anchor_link(link)
        css = "wikilink embed" if link.embed else "wikilink"
        target = escapeHtml(link.target)
        return f'<a class="{css}" href="{target}" data-path="{target}">{escapeHtml(link.display)}</a>'

    def render_anchor_link(self, link: WikiLink) -> str:
        """Same-page [[#Section]] link."""
        anchor = link.anchor or ""
        return (
            f'<a class="wikilink" href="#{slugify(anchor)}">'
            f"{escapeHtml(link.label or anchor)}</a>"
        )

    def math_inline(self, tokens, idx, options, env) -> str:
        return f'<span class="math math-inline">\\({escapeHtml(tokens[idx].content)}\\)</span>'

    def math_inline_double(self, tokens, idx, options, env) -> str:
        return f'<span class="math math-display">\\[{escapeHtml(tokens[idx].content)}\\]</span>'

    def math_block(self, tokens, idx, options, env) -> str:
        return f'<div class="math math-display">\\[{escapeHtml(tokens[idx].content)}\\]</div>\n'

    def heading_open(self, tokens, idx, options, env) -> str:
        # Stable ids so [[Note#Section]] can target headings
        inline = tokens[idx + 1]
        base = slugify(inline.content) or "section"
        used: dict[str, int] = env.setdefault("heading_ids", {})
        count = used.get(base, 0)
        used[base] = count + 1
        tokens[idx].attrSet("id", base if count == 0 else f"{base}-{count}")
        return self.renderToken(tokens, idx, options, env)


def create_markdown(renderer_cls: type[RendererHTML] = WikilinkRenderer) -> MarkdownIt:
    """Create a configured markdown-it parser."""
    md = MarkdownIt(renderer_cls=renderer_cls)
    md.enable(["table", "strikethrough"])
    md.block.ruler.before(
        "fence",
        "math_block",
        _math_block_rule,
        {"alt": ["paragraph", "reference", "blockquote", "list"]},
    )
    md.inline.ruler.before("link", "wikilink", _wikilink_rule)
    md.inline.ruler.before("escape", "math_inline", _math_inline_rule)
    return md


@dataclass
class MarkdownResult:
    """Rendered HTML plus the wiki-link targets found while parsing."""

    html: str
    links: list[str] = field(default_factory=list)


def collect_links(md: MarkdownIt, content: str) -> list[str]:
    """Unique wikilink targets from parsed tokens, in order of appearance."""
    seen: set[str] = set()
    links: list[str] = []
    for token in md.parse(content):
        for child in token.children or []:
            if child.type != "wikilink":
                continue
            target = child.meta["link"].target
            if target and target not in seen:
                seen.add(target)
                links.append(target)
    return links


def render_markdown(content: str) -> MarkdownResult:
    """Render markdown to HTML with preview wikilinks.

    Args:
        content: Markdown body (without front matter).

    Returns:
        MarkdownResult with html and the unique link targets.
    """
    if not content:
        return MarkdownResult(html="", links=[])

    md = create_markdown()
    return MarkdownResult(html=md.render(content), links=collect_links(md, content))
