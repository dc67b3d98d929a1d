"""Markdown export and import for documents and versions.

Exported files start with a YAML frontmatter block::

    ---
    title: Summarize a paper
    type: prompt
    description: Short abstract
    tags: [research, summary]
    ---

    <content>

Import is lenient: missing or malformed frontmatter is accepted and the file
is then taken as bare content.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any

import yaml
from pydantic import BaseModel, Field

from querino.models.document import ArtefactKind

if TYPE_CHECKING:
    from querino.models.document import Document
    from querino.models.version import VersionRecord

logger = logging.getLogger(__name__)

DEFAULT_SLUG = "querino-export"

_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_HEADING = re.compile(r"^#\s+(.+)$", re.MULTILINE)
_MD_SUFFIX = re.compile(r"\.md$", re.IGNORECASE)
# Opening and closing delimiters must each be a line of their own.
_FRONTMATTER = re.compile(r"\A---[ \t]*\n(.*?)^---[ \t]*$\n?", re.DOTALL | re.MULTILINE)


class MarkdownFrontmatter(BaseModel):
    title: str
    type: ArtefactKind = ArtefactKind.PROMPT
    description: str | None = None
    tags: list[str] = Field(default_factory=list)
    framework: str | None = None


class ParsedMarkdown(BaseModel):
    frontmatter: MarkdownFrontmatter
    content: str

    def editable_fields(self) -> dict[str, Any]:
        """Fields in the shape ``Document.apply_fields`` accepts."""
        return {
            "title": self.frontmatter.title,
            "description": self.frontmatter.description,
            "content": self.content,
            "tags": list(self.frontmatter.tags),
        }


def slugify(title: str) -> str:
    """Lowercase ``title`` and join its alphanumeric runs with ``-``."""
    slug = _NON_ALNUM.sub("-", (title or "").strip().lower()).strip("-")
    return slug or DEFAULT_SLUG


def unslugify(slug: str) -> str:
    return " ".join(word[:1].upper() + word[1:] for word in slug.split("-"))


def build_markdown(
    title: str,
    content: str,
    *,
    kind: ArtefactKind = ArtefactKind.PROMPT,
    description: str | None = None,
    tags: list[str] | None = None,
    framework: str | None = None,
) -> str:
    meta: dict[str, Any] = {"title": title, "type": kind.value}
    if description:
        meta["description"] = description
    if tags:
        meta["tags"] = list(tags)
    if framework:
        meta["framework"] = framework
    frontmatter = yaml.safe_dump(
        meta,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=None,
        width=1_000_000,
    )
    return f"---\n{frontmatter}---\n\n{content}"


def document_to_markdown(document: Document) -> str:
    return build_markdown(
        document.title,
        document.content,
        kind=document.kind,
        description=document.description,
        tags=document.tags,
    )


def version_to_markdown(version: VersionRecord, kind: ArtefactKind = ArtefactKind.PROMPT) -> str:
    snapshot = version.snapshot
    return build_markdown(
        snapshot.get("title") or "",
        snapshot.get("content") or "",
        kind=kind,
        description=snapshot.get("description"),
        tags=snapshot.get("tags"),
    )


def markdown_filename(title: str, version_number: int | None = None) -> str:
    suffix = f"-v{version_number}" if version_number is not None else ""
    return f"{slugify(title)}{suffix}.md"


def _derive_title(content: str, filename: str | None) -> str:
    match = _HEADING.search(content)
    if match:
        return match.group(1).strip()
    if filename:
        return unslugify(_MD_SUFFIX.sub("", filename))
    return "Untitled"


def _as_kind(value: object) -> ArtefactKind:
    try:
        return ArtefactKind(str(value))
    except ValueError:
        return ArtefactKind.PROMPT


def _as_text(value: object) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def _as_tags(value: object) -> list[str]:
    if isinstance(value, list):
        return [str(item) for item in value if item is not None and item != ""]
    if isinstance(value, str) and value:
        return [value]
    return []


def _load_frontmatter(text: str) -> tuple[dict[str, Any], str] | None:
    match = _FRONTMATTER.match(text)
    if match is None:
        return None
    try:
        meta = yaml.safe_load(match.group(1))
    except yaml.YAMLError:
        logger.warning("Ignoring malformed markdown frontmatter", exc_info=True)
        return None
    if meta is None:
        meta = {}
    if not isinstance(meta, dict):
        return None
    return meta, text[match.end() :].strip()


def parse_markdown(markdown: str, filename: str | None = None) -> ParsedMarkdown:
    """Split ``markdown`` into frontmatter and content."""
    text = markdown.strip()
    loaded = _load_frontmatter(text)
    if loaded is None:
        return ParsedMarkdown(
            frontmatter=MarkdownFrontmatter(title=_derive_title(text, filename)),
            content=text,
        )

    meta, content = loaded
    return ParsedMarkdown(
        frontmatter=MarkdownFrontmatter(
            title=_as_text(meta.get("title")) or _derive_title(content, filename),
            type=_as_kind(meta.get("type", ArtefactKind.PROMPT.value)),
            description=_as_text(meta.get("description")),
            tags=_as_tags(meta.get("tags")),
            framework=_as_text(meta.get("framework")),
        ),
        content=content,
    )
