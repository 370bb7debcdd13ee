"""CLAUDE.md assembler: shared docs + project docs → one document.

Pipeline:
  1. Read enabled shared docs ordered by (display_order, id).
  2. Read enabled project docs for the project, same ordering.
  3. Render each as "# {title}\\n\\n{content}".
  4. Join all shared sections, then all project sections, with SEPARATOR.

Always computed fresh from the store, never cached. For a given database
state the body is byte-identical across calls. The publish variant wraps the
body in a do-not-edit marker and a timestamped footer; the footer is the only
non-deterministic part, and strip_publish_wrapper() removes it again.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from consoleblue.db.models import ProjectDoc, SharedDoc
from consoleblue.db.repository import Repository

SEPARATOR = "\n\n---\n\n"

GENERATED_MARKER = (
    "<!-- AUTO-GENERATED by ConsoleBlue. Do not edit this file directly; "
    "changes will be overwritten on the next push. -->"
)

_FOOTER_PREFIX = "_Generated by ConsoleBlue at "


@dataclass
class DocRef:
    title: str
    slug: str


@dataclass
class DocAssemblyPreview:
    assembled_content: str
    shared_docs: list[DocRef] = field(default_factory=list)
    project_docs: list[DocRef] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.assembled_content


def assemble(repo: Repository, project_id: int) -> DocAssemblyPreview:
    """Assemble the current document body for *project_id*.

    Args:
        repo: Repository over an open connection.
        project_id: Numeric project id (existence is the caller's concern).

    Returns:
        DocAssemblyPreview. No enabled docs at all → empty string body.
    """
    shared = repo.list_shared_docs(enabled_only=True)
    local = repo.list_project_docs(project_id, enabled_only=True)

    sections = [_render_section(d) for d in shared]
    sections += [_render_section(d) for d in local]

    return DocAssemblyPreview(
        assembled_content=SEPARATOR.join(sections),
        shared_docs=[DocRef(title=d.title, slug=d.slug) for d in shared],
        project_docs=[DocRef(title=d.title, slug=d.slug) for d in local],
    )


def render_for_publish(body: str, generated_at: datetime | None = None) -> str:
    """Wrap *body* with the do-not-edit marker and a timestamp footer."""
    stamp = (generated_at or datetime.now(timezone.utc)).astimezone(timezone.utc)
    footer = f"{_FOOTER_PREFIX}{stamp.isoformat(timespec='seconds')}_"
    parts = [GENERATED_MARKER]
    if body:
        parts.append(body)
    return "\n\n".join(parts) + SEPARATOR + footer + "\n"


def strip_publish_wrapper(text: str) -> str:
    """Return the body of a publish-variant document (marker and footer removed).

    Text without the marker is returned unchanged.
    """
    if not text.startswith(GENERATED_MARKER):
        return text
    inner = text[len(GENERATED_MARKER):]
    cut = inner.rfind(SEPARATOR + _FOOTER_PREFIX)
    if cut != -1:
        inner = inner[:cut]
    return inner.removeprefix("\n\n")


def _render_section(doc: SharedDoc | ProjectDoc) -> str:
    return f"# {doc.title}\n\n{doc.content}"
