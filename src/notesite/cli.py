#!/usr/bin/env python3
"""
notesite: build a static site from a directory of interlinked notes

Usage:
    notesite build -o _site             # Render the site
    notesite check                      # Report issues without writing
    notesite links "Kalman Filter"      # Show a note's links and backlinks
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, NoReturn

import click

from . import __version__ as NOTESITE_VERSION
from .config import ConfigurationError, SiteConfig, get_content_root, load_site_config


def output(data: Any, as_json: bool = False) -> None:
    """Output data as JSON or formatted text."""
    if as_json:
        click.echo(json.dumps(data, indent=2, default=str))
    else:
        click.echo(data)


def _fail(message: str) -> NoReturn:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _load_context(content_root: str | None) -> tuple[Path, SiteConfig]:
    """Resolve the content root and its notesite.yaml, exiting on errors."""
    try:
        root = Path(content_root) if content_root else get_content_root()
        return root, load_site_config(root)
    except ConfigurationError as e:
        _fail(str(e))


def _print_issues(issues: list, limit: int = 20) -> None:
    if not issues:
        return
    click.echo(f"\n⚠ Issues ({len(issues)}):")
    for issue in issues[:limit]:
        click.echo(f"  - [{issue.kind}] {issue.path}: {issue.message}")
    if len(issues) > limit:
        click.echo(f"  ... and {len(issues) - limit} more")


content_root_option = click.option(
    "--content-root",
    "-c",
    type=click.Path(exists=True, file_okay=False),
    envvar="NOTESITE_CONTENT_ROOT",
    help="Directory of markdown notes (default: current directory)",
)


@click.group()
@click.version_option(version=NOTESITE_VERSION, prog_name="notesite")
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    envvar="NOTESITE_QUIET",
    help="Suppress info logging, show only warnings and errors",
)
def cli(quiet: bool):
    """notesite: render interlinked markdown notes as a static site.

    \b
    Notes are markdown files with optional front matter:
      ---
      title: Kalman Filter
      tags: [math, estimation]
      draft: false
      ---

    \b
    Cross-reference other notes with [[Title]] or [[Title|label]],
    embed images with ![[diagram.png]]. Links to titles that do not
    exist are rendered as emphasized text.
    """
    if quiet:
        from ._logging import set_quiet_mode

        set_quiet_mode(True)


@cli.command()
@content_root_option
@click.option(
    "--output",
    "-o",
    "output_dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Output directory (default: _site, or output_dir in notesite.yaml)",
)
@click.option(
    "--base-url",
    "-b",
    default=None,
    help="Base URL for links (e.g., /notes for subdirectory hosting)",
)
@click.option("--title", default=None, help="Site title for header and page titles")
@click.option("--include-drafts", is_flag=True, help="Include draft notes in output")
@click.option("--no-clean", is_flag=True, help="Don't remove output directory before build")
@click.option("--strict", is_flag=True, help="Exit with status 1 if any issue was reported")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def build(
    content_root: str | None,
    output_dir: str | None,
    base_url: str | None,
    title: str | None,
    include_drafts: bool,
    no_clean: bool,
    strict: bool,
    as_json: bool,
):
    """Generate the static HTML site.

    Options given on the command line override notesite.yaml.

    \b
    Examples:
      notesite build                         # Build ./ into ./_site
      notesite build -c notes -o public      # Explicit source and output
      notesite build --base-url /notes       # Subdirectory hosting
      notesite build --include-drafts        # Preview drafts
    """
    from .publisher.generator import PublishConfig, SiteGenerator

    root, site_config = _load_context(content_root)

    config = PublishConfig(
        output_dir=Path(output_dir or site_config.output_dir),
        base_url=site_config.base_url if base_url is None else base_url,
        site_title=title or site_config.title,
        include_drafts=include_drafts or site_config.include_drafts,
        exclude=site_config.exclude,
        clean=not no_clean,
    )

    try:
        result = SiteGenerator(config, root).generate()
    except ConfigurationError as e:
        _fail(str(e))
    except OSError as e:
        _fail(f"Cannot write site: {e}")

    if as_json:
        output(result.model_dump(), as_json=True)
    else:
        click.echo(f"Published {result.documents_published} notes to {result.output_dir}")
        if result.drafts_skipped:
            click.echo(f"Skipped {result.drafts_skipped} drafts (use --include-drafts)")
        _print_issues(result.issues)
        click.echo("\nTo preview locally:")
        click.echo(f"  cd {result.output_dir} && python -m http.server")

    if strict and result.issues:
        sys.exit(1)


@cli.command()
@content_root_option
@click.option("--include-drafts", is_flag=True, help="Also check draft notes")
@click.option("--strict", is_flag=True, help="Exit with status 1 if any issue was found")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def check(content_root: str | None, include_drafts: bool, strict: bool, as_json: bool):
    """Scan notes and report issues without writing anything.

    Reports front matter errors, duplicate slugs, unresolved [[links]] and
    missing embedded files. Unresolved links are expected for notes that
    mention concepts without a page, so only --strict turns issues into a
    failing exit status.
    """
    from .graph import media_issues, resolve_links, unresolved_issues
    from .store import ContentStore

    root, site_config = _load_context(content_root)
    include_drafts = include_drafts or site_config.include_drafts

    try:
        store = ContentStore.scan(root, exclude=site_config.exclude)
    except ConfigurationError as e:
        _fail(str(e))

    documents = store.published(include_drafts=include_drafts)
    graph = resolve_links(store.documents.values())
    checked = {doc.path for doc in documents}

    issues = list(store.issues)
    issues.extend(i for i in unresolved_issues(graph, store.documents) if i.path in checked)
    issues.extend(media_issues(documents, store))

    if as_json:
        output(
            {
                "documents": len(documents),
                "issues": [issue.model_dump() for issue in issues],
            },
            as_json=True,
        )
    else:
        click.echo(f"Checked {len(documents)} notes in {root}")
        if issues:
            _print_issues(issues, limit=len(issues))
        else:
            click.echo("No issues found")

    if strict and issues:
        sys.exit(1)


@cli.command()
@click.argument("name")
@content_root_option
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def links(name: str, content_root: str | None, as_json: bool):
    """Show outgoing links, backlinks and unresolved links of a note.

    NAME may be a title, alias, slug or path (case-insensitive).

    \b
    Examples:
      notesite links "Kalman Filter"
      notesite links resume --json
    """
    from .graph import resolve_links
    from .models import ResolvedTarget
    from .parser.title_index import build_title_index, resolve_link_target
    from .store import ContentStore

    root, site_config = _load_context(content_root)
    store = ContentStore.scan(root, exclude=site_config.exclude)
    documents = list(store.documents.values())
    title_index = build_title_index(documents)

    target = resolve_link_target(name, title_index)
    if not isinstance(target, ResolvedTarget):
        _fail(f"No note matches '{name}'")

    doc = store.documents[target.slug]
    graph = resolve_links(documents, title_index)
    data = {
        "slug": doc.slug,
        "title": doc.title,
        "path": doc.path,
        "outgoing": graph.forward.get(doc.slug, []),
        "backlinks": graph.backlinks.get(doc.slug, []),
        "unresolved": graph.unresolved.get(doc.slug, []),
    }

    if as_json:
        output(data, as_json=True)
        return

    click.echo(f"{doc.title} ({doc.path})")
    for heading, key in (
        ("Outgoing", "outgoing"),
        ("Backlinks", "backlinks"),
        ("Unresolved", "unresolved"),
    ):
        click.echo(f"\n{heading}:")
        if not data[key]:
            click.echo("  (none)")
        for item in data[key]:
            click.echo(f"  - {item}")


# ─────────────────────────────────────────────────────────────────────────────
# Entry Point
# ─────────────────────────────────────────────────────────────────────────────


def main():
    """Entry point for notesite CLI."""
    from ._logging import configure_logging

    configure_logging()
    cli()


if __name__ == "__main__":
    main()
