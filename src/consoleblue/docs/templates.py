"""Starter-doc templates rendered from project metadata.

Registry structure (fixed at import time, never mutated):
  company-identity      policy     brand + ownership
  project-overview      handbook   description, URLs, repository, status
  tech-stack            handbook   only when the project has tags
  getting-started       procedure  clone/checkout steps, or repo-linking steps
  project-restrictions  policy     editing rules + status-specific limits
  unique-features       handbook   only when the project has custom settings
  general-direction     policy     status-driven direction paragraph

The declaration index of each template is the initial display_order of the
project doc it produces. Regeneration recognises generator-owned docs purely
by slug membership in TEMPLATE_SLUGS.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from consoleblue.db.models import Project
from consoleblue.errors import ValidationError

_DEFAULT_OWNER = "triadblue"
_DEFAULT_BRANCH = "main"


@dataclass(frozen=True)
class Template:
    slug: str
    title: str
    category: str  # policy | procedure | handbook
    render: Callable[[Project], str | None]  # None → not applicable to this project


@dataclass
class GeneratedDoc:
    slug: str
    title: str
    content: str
    category: str
    display_order: int


# ------------------------------------------------------------------
# Snapshot validation
# ------------------------------------------------------------------


def validate_snapshot(project: Project) -> None:
    """Fail fast on snapshot fields that would otherwise render wrong output.

    Raises:
        ValidationError: naming the offending field.
    """
    for name in ("slug", "display_name", "status"):
        value = getattr(project, name, None)
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(name, "is required and must be a non-empty string")

    if not isinstance(project.tags, list):
        raise ValidationError("tags", f"must be a list, got {type(project.tags).__name__}")
    for i, tag in enumerate(project.tags):
        if not isinstance(tag, str):
            raise ValidationError(f"tags[{i}]", f"must be a string, got {type(tag).__name__}")

    if not isinstance(project.custom_settings, dict):
        raise ValidationError(
            "custom_settings",
            f"must be a mapping, got {type(project.custom_settings).__name__}",
        )


# ------------------------------------------------------------------
# Render helpers
# ------------------------------------------------------------------


def _repo_url(project: Project) -> str | None:
    if not project.github_repo:
        return None
    owner = project.github_owner or _DEFAULT_OWNER
    return f"https://github.com/{owner}/{project.github_repo}"


_STATUS_DIRECTION: dict[str, str] = {
    "active": (
        "This project is in active use. Prioritise stability and backwards "
        "compatibility; ship improvements in small, reviewable increments."
    ),
    "development": (
        "This project is under active development. Expect interfaces to change; "
        "favour moving quickly over long-term compatibility, but keep the main "
        "branch deployable."
    ),
    "maintenance": (
        "This project is in maintenance mode. Limit work to bug fixes, security "
        "patches and dependency updates; new features need explicit approval."
    ),
    "planned": (
        "This project is still being planned. Focus on scaffolding, documentation "
        "and design decisions rather than production features."
    ),
    "archived": (
        "This project is archived. Treat the codebase as read-only; do not start "
        "new work without first reactivating the project in ConsoleBlue."
    ),
}

_STATUS_RESTRICTIONS: dict[str, str] = {
    "maintenance": "Do not add new features; bug fixes and security updates only.",
    "archived": "Do not modify this project; it is archived and kept for reference.",
    "planned": "Do not deploy anything to production until the project is activated.",
}


def _render_company_identity(project: Project) -> str:
    lines = [f"{project.display_name} is a project managed in ConsoleBlue."]

    colors = [
        ("Primary", project.color_primary),
        ("Accent", project.color_accent),
        ("Background", project.color_background),
    ]
    color_lines = [f"- **{label}:** `{value}`" for label, value in colors if value]
    if color_lines:
        lines += ["", "Brand colors:", "", *color_lines]
        lines += ["", "Use these colors for any user-facing UI in this project."]

    return "\n".join(lines)


def _render_project_overview(project: Project) -> str:
    lines = [f"**Project:** {project.display_name} (`{project.slug}`)"]

    if project.description:
        lines += ["", project.description]

    links: list[str] = []
    if project.production_url:
        links.append(f"**Production URL:** {project.production_url}")
    if project.subdomain_url:
        links.append(f"**Subdomain:** {project.subdomain_url}")
    repo_url = _repo_url(project)
    if repo_url:
        links.append(f"**Repository:** {repo_url}")
    if links:
        lines += ["", *links]

    lines += ["", f"**Status:** {project.status}"]
    return "\n".join(lines)


def _render_tech_stack(project: Project) -> str | None:
    if not project.tags:
        return None
    lines = ["The following technologies and tools are used in this project:", ""]
    lines += [f"- {tag}" for tag in project.tags]
    return "\n".join(lines)


def _render_getting_started(project: Project) -> str:
    lines = ["Follow these steps to work with this project:", ""]
    repo_url = _repo_url(project)
    if repo_url:
        lines += [
            f"1. Clone the repository: `git clone {repo_url}.git`",
            f"2. Checkout the default branch: `git checkout {project.default_branch or _DEFAULT_BRANCH}`",
            "3. Install dependencies (see repository README for details)",
            "4. Configure environment variables as needed",
            "5. Start the development server",
        ]
    else:
        lines += [
            "1. Review project settings in ConsoleBlue",
            "2. Link a GitHub repository to enable code access",
            "3. Add project-specific documentation as needed",
        ]
    return "\n".join(lines)


def _render_project_restrictions(project: Project) -> str:
    lines = [
        "- Do not edit CLAUDE.md by hand; it is assembled by ConsoleBlue and "
        "overwritten on every push. Change the source docs in ConsoleBlue instead.",
        "- Never commit secrets, tokens or credentials to the repository.",
    ]
    if project.github_repo:
        branch = project.default_branch or _DEFAULT_BRANCH
        lines.append(f"- Land changes on `{branch}` through reviewed commits only.")
    status_rule = _STATUS_RESTRICTIONS.get(project.status)
    if status_rule:
        lines.append(f"- {status_rule}")
    return "\n".join(lines)


def _render_unique_features(project: Project) -> str | None:
    if not project.custom_settings:
        return None
    lines = ["Project-specific settings configured in ConsoleBlue:", ""]
    for key in sorted(project.custom_settings):
        lines.append(f"- **{key}:** {project.custom_settings[key]}")
    return "\n".join(lines)


def _render_general_direction(project: Project) -> str:
    lines = [
        f"Keep all work on {project.display_name} consistent with the shared "
        "ConsoleBlue guidelines above."
    ]
    # Unknown statuses get no paragraph.
    paragraph = _STATUS_DIRECTION.get(project.status)
    if paragraph:
        lines += ["", paragraph]
    return "\n".join(lines)


# ------------------------------------------------------------------
# Registry
# ------------------------------------------------------------------

TEMPLATES: tuple[Template, ...] = (
    Template("company-identity", "Company Identity", "policy", _render_company_identity),
    Template("project-overview", "Project Overview", "handbook", _render_project_overview),
    Template("tech-stack", "Tech Stack", "handbook", _render_tech_stack),
    Template("getting-started", "Getting Started", "procedure", _render_getting_started),
    Template("project-restrictions", "Project Restrictions", "policy", _render_project_restrictions),
    Template("unique-features", "Unique Features", "handbook", _render_unique_features),
    Template("general-direction", "General Direction", "policy", _render_general_direction),
)

TEMPLATE_SLUGS: frozenset[str] = frozenset(t.slug for t in TEMPLATES)


def list_templates() -> list[tuple[str, str, str]]:
    """Return (slug, title, category) for every registered template, in order."""
    return [(t.slug, t.title, t.category) for t in TEMPLATES]


def generate(project: Project) -> list[GeneratedDoc]:
    """Render all applicable templates for *project*. Pure: no I/O, no side effects.

    Args:
        project: Project snapshot. slug, display_name and status are required.

    Returns:
        Generated docs in registry order; display_order is the template's
        declaration index, so skipped templates leave gaps.

    Raises:
        ValidationError: If the snapshot is malformed.
    """
    validate_snapshot(project)

    docs: list[GeneratedDoc] = []
    for index, template in enumerate(TEMPLATES):
        content = template.render(project)
        if content is None:
            continue
        docs.append(
            GeneratedDoc(
                slug=template.slug,
                title=template.title,
                content=content,
                category=template.category,
                display_order=index,
            )
        )
    return docs
