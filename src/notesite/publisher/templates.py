"""HTML templates for static site generation.

Uses Jinja2 for templating with inline template definitions.
Templates include: base layout, document page, index page, tag pages and
the graph page.
"""

from __future__ import annotations

import hashlib
from typing import TYPE_CHECKING

from jinja2 import BaseLoader, Environment, select_autoescape
from markupsafe import Markup, escape

from ..parser.markdown import slugify

if TYPE_CHECKING:
    from .generator import EntryData


def _base_wrapper(title: str, site_title: str, base_url: str, content: str) -> str:
    """Wrap content in the base HTML template.

    Plain string formatting keeps Jinja away from rendered note content that
    might contain {{ }} syntax.
    """
    page_title = escape(title)
    site = escape(site_title)
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{page_title} - {site}</title>
    <link rel="stylesheet" href="{base_url}/assets/style.css">
    <link rel="stylesheet" href="https://cdn.jsdelivr.net/npm/katex@0.16.9/dist/katex.min.css">
    <script defer src="https://cdn.jsdelivr.net/npm/katex@0.16.9/dist/katex.min.js"></script>
    <script defer src="https://cdn.jsdelivr.net/npm/katex@0.16.9/dist/contrib/auto-render.min.js"></script>
    <script src="https://cdn.jsdelivr.net/npm/lunr@2.3.9/lunr.min.js"></script>
</head>
<body>
    <nav class="nav">
        <a href="{base_url}/" class="nav-brand">{site}</a>
        <a href="{base_url}/graph.html" class="nav-link">Graph</a>
        <div class="search-container">
            <input type="text" id="search-input" placeholder="Search..." autocomplete="off">
            <div id="search-results"></div>
        </div>
    </nav>
    <main class="main">
        {content}
    </main>
    <script>window.BASE_URL = "{base_url}";</script>
    <script src="{base_url}/assets/search.js"></script>
    <script>
    document.addEventListener("DOMContentLoaded", function () {{
        renderMathInElement(document.body, {{
            delimiters: [
                {{left: "\\\\[", right: "\\\\]", display: true}},
                {{left: "\\\\(", right: "\\\\)", display: false}}
            ],
            throwOnError: false
        }});
    }});
    </script>
</body>
</html>
"""


# Document page - a single note with metadata and backlinks
ENTRY_TEMPLATE = """
<article class="entry">
    <header class="entry-header">
        <h1>{{ entry.title }}</h1>
        <div class="entry-meta">
            {% if entry.draft %}
            <span class="draft-badge">Draft</span>
            {% endif %}
            {% if entry.tags %}
            <div class="entry-tags">
                {% for tag in entry.tags %}
                <a href="{{ base_url }}/tags/{{ tag | tag_slug }}.html" class="tag">{{ tag }}</a>
                {% endfor %}
            </div>
            {% endif %}
        </div>
    </header>
    <div class="entry-content">
        {{ html_content }}
    </div>
    {% if entry.backlinks %}
    <footer class="entry-backlinks">
        <h2>Backlinks</h2>
        <ul>
            {% for ref in entry.backlinks %}
            <li><a href="{{ base_url }}/{{ ref.slug }}.html">{{ ref.title }}</a></li>
            {% endfor %}
        </ul>
    </footer>
    {% endif %}
</article>
"""

# Index page - every document plus the tag cloud
INDEX_TEMPLATE = """
<div class="index">
    <h1>{{ site_title }}</h1>
    <section class="entries">
        <h2>Notes</h2>
        <ul class="entry-list">
            {% for entry in entries %}
            <li>
                <a href="{{ base_url }}/{{ entry.slug }}.html">{{ entry.title }}</a>
                {% if entry.draft %}<span class="draft-badge">Draft</span>{% endif %}
            </li>
            {% endfor %}
        </ul>
        <p class="entry-count">{{ entries | length }} notes</p>
    </section>
    {% if tags_with_counts %}
    <section class="tags-cloud">
        <h2>Tags</h2>
        <div class="tags">
            {% for tag, count in tags_with_counts %}
            <a href="{{ base_url }}/tags/{{ tag | tag_slug }}.html" class="tag">
                {{ tag }} ({{ count }})
            </a>
            {% endfor %}
        </div>
    </section>
    {% endif %}
</div>
"""

# Tag page - lists all documents with a specific tag
TAG_TEMPLATE = """
<div class="tag-page">
    <h1>Tag: {{ tag }}</h1>
    <p class="tag-count">{{ entries | length }} notes</p>
    <ul class="entry-list">
        {% for entry in entries %}
        <li><a href="{{ base_url }}/{{ entry.slug }}.html">{{ entry.title }}</a></li>
        {% endfor %}
    </ul>
    <p><a href="{{ base_url }}/">Back to index</a></p>
</div>
"""


def tag_slug(tag: str) -> str:
    """File name (without .html) of a tag page.

    A tag that already is its own slug keeps it. Any other tag gets a hash
    suffix, so `c`, `c++`, `C` and `c#` each get their own page.
    """
    slug = slugify(tag)
    if slug == tag:
        return slug
    digest = hashlib.sha1(tag.encode("utf-8")).hexdigest()[:8]
    return f"{slug}-{digest}" if slug else f"tag-{digest}"


def _get_env() -> Environment:
    """Create Jinja2 environment with autoescape enabled."""
    env = Environment(
        loader=BaseLoader(),
        autoescape=select_autoescape(default=True, default_for_string=True),
    )
    env.filters["tag_slug"] = tag_slug
    return env


def sort_entries(entries: list["EntryData"]) -> list["EntryData"]:
    """Alphabetical by title, slug breaking ties."""
    return sorted(entries, key=lambda e: (e.title.lower(), e.slug))


def render_entry_page(entry: "EntryData", site_title: str, base_url: str) -> str:
    """Render a single document page.

    Args:
        entry: Entry data including rendered content and backlinks
        site_title: Site name for the header and <title>
        base_url: Base URL for links

    Returns:
        Complete HTML page string
    """
    tmpl = _get_env().from_string(ENTRY_TEMPLATE)
    content = tmpl.render(
        entry=entry,
        base_url=base_url,
        # Already rendered HTML, mark safe to prevent double escaping
        html_content=Markup(entry.html_content),
    )
    return _base_wrapper(entry.title, site_title, base_url, content)


def render_index_page(
    entries: list["EntryData"],
    tags_index: dict[str, list[str]],
    site_title: str,
    base_url: str,
) -> str:
    """Render the main index page.

    Args:
        entries: All entry data
        tags_index: Dict mapping tag -> list of entry slugs
        site_title: Site name
        base_url: Base URL for links

    Returns:
        Complete HTML page string
    """
    ordered = sort_entries(entries)

    # Sorted by count then name
    tags_with_counts = sorted(
        [(tag, len(slugs)) for tag, slugs in tags_index.items()],
        key=lambda x: (-x[1], x[0]),
    )

    tmpl = _get_env().from_string(INDEX_TEMPLATE)
    content = tmpl.render(
        site_title=site_title,
        base_url=base_url,
        entries=ordered,
        tags_with_counts=tags_with_counts,
    )
    return _base_wrapper("Home", site_title, base_url, content)


def render_tag_page(
    tag: str,
    entries: list["EntryData"],
    site_title: str,
    base_url: str,
) -> str:
    """Render a tag listing page."""
    tmpl = _get_env().from_string(TAG_TEMPLATE)
    content = tmpl.render(tag=tag, base_url=base_url, entries=sort_entries(entries))
    return _base_wrapper(f"Tag: {tag}", site_title, base_url, content)


def render_graph_page(site_title: str, base_url: str) -> str:
    """Render the graph visualization page.

    Graph data is loaded from graph.json by a D3.js force simulation.
    """
    content = """
<div class="graph-container">
    <div id="graph"></div>
    <div id="graph-tooltip" class="graph-tooltip"></div>
</div>
<script src="https://cdn.jsdelivr.net/npm/d3@7/dist/d3.min.js"></script>
<script src="{base_url}/assets/graph.js"></script>
""".replace("{base_url}", base_url)
    return _base_wrapper("Graph", site_title, base_url, content)
