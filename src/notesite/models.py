"""Pydantic models for the notes site."""

from typing import Annotated, Literal

from pydantic import BaseModel, Field, field_validator


def _split_labels(value: object) -> object:
    """Accept `tags: a, b` as shorthand for a YAML list."""
    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    if isinstance(value, list):
        # `tags: [2024]` loads as an int
        return [
            str(item) if isinstance(item, (int, float)) and not isinstance(item, bool) else item
            for item in value
        ]
    return value


def _dedupe(values: list[str]) -> list[str]:
    seen: set[str] = set()
    result: list[str] = []
    for value in values:
        value = value.strip()
        if value and value not in seen:
            seen.add(value)
            result.append(value)
    return result


class FrontMatter(BaseModel):
    """Front matter block at the top of a note.

    Only the known keys are kept; anything else in the YAML block is ignored.
    """

    title: str | None = None
    tags: list[str] = Field(default_factory=list)  # Set semantics, first appearance order
    draft: bool = False
    aliases: list[str] = Field(default_factory=list)  # Extra names accepted by [[...]]

    @field_validator("title", mode="before")
    @classmethod
    def _coerce_title(cls, value: object) -> object:
        # YAML turns `title: 2024` or `title: yes` into non-strings
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("tags", "aliases", mode="before")
    @classmethod
    def _split(cls, value: object) -> object:
        return _split_labels(value)

    @field_validator("tags", "aliases")
    @classmethod
    def _unique(cls, value: list[str]) -> list[str]:
        return _dedupe(value)


class Document(BaseModel):
    """A parsed note owned by the content store."""

    slug: str
    path: str  # Relative POSIX path, including .md
    title: str
    tags: list[str] = Field(default_factory=list)
    draft: bool = False
    aliases: list[str] = Field(default_factory=list)
    body: str = ""


class ResolvedTarget(BaseModel):
    """Link target that points at a document in the store."""

    kind: Literal["document"] = "document"
    slug: str


class UnresolvedTarget(BaseModel):
    """Link target with no matching document (an external concept)."""

    kind: Literal["unresolved"] = "unresolved"
    label: str


LinkTarget = Annotated[ResolvedTarget | UnresolvedTarget, Field(discriminator="kind")]


class Link(BaseModel):
    """A directed edge derived from a [[...]] token."""

    source: str  # Source document slug
    target: str  # Raw target text from the token
    label: str | None = None  # Display text from [[target|label]]
    anchor: str | None = None  # Section from [[target#anchor]]
    embed: bool = False  # ![[...]] form
    resolved: LinkTarget

    @property
    def is_resolved(self) -> bool:
        return isinstance(self.resolved, ResolvedTarget)


class LinkGraph(BaseModel):
    """Link graph for the whole store, recomputed on every resolution pass."""

    links: list[Link] = Field(default_factory=list)
    forward: dict[str, list[str]] = Field(default_factory=dict)  # slug -> target slugs
    backlinks: dict[str, list[str]] = Field(default_factory=dict)  # slug -> source slugs
    unresolved: dict[str, list[str]] = Field(default_factory=dict)  # slug -> labels

    def outgoing(self, slug: str) -> list[Link]:
        return [link for link in self.links if link.source == slug]


IssueKind = Literal["parse_error", "duplicate_slug", "unresolved_link", "missing_asset"]


class BuildIssue(BaseModel):
    """A non-fatal problem found during a scan or build."""

    kind: IssueKind
    path: str
    message: str


class PublishResult(BaseModel):
    """Result of site generation."""

    documents_published: int
    drafts_skipped: int = 0
    issues: list[BuildIssue] = Field(default_factory=list)
    output_dir: str
    search_index_path: str

    @property
    def broken_links(self) -> list[BuildIssue]:
        return [issue for issue in self.issues if issue.kind == "unresolved_link"]
