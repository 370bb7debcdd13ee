"""Domain models for the ConsoleBlue database layer."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

PROJECT_STATUSES: tuple[str, ...] = (
    "active",
    "archived",
    "maintenance",
    "development",
    "planned",
)


@dataclass(frozen=True)
class Project:
    """Read-only project snapshot. The docs pipeline never mutates it."""

    id: int
    slug: str
    display_name: str
    status: str = "active"
    description: str | None = None
    github_repo: str | None = None
    github_owner: str | None = None
    default_branch: str | None = "main"
    color_primary: str | None = "#0000FF"
    color_accent: str | None = "#FF44CC"
    color_background: str | None = None
    tags: list[str] = field(default_factory=list)
    subdomain_url: str | None = None
    production_url: str | None = None
    custom_settings: dict[str, Any] = field(default_factory=dict)
    created_at: str | None = None
    updated_at: str | None = None


@dataclass
class Operator:
    id: int
    email: str
    display_name: str | None = None
    is_active: bool = True


@dataclass
class SharedDoc:
    id: int | None
    slug: str
    title: str
    content: str = ""
    display_order: int = 0
    enabled: bool = True
    created_at: str | None = None
    updated_at: str | None = None


@dataclass
class ProjectDoc:
    id: int | None
    project_id: int
    slug: str
    title: str
    content: str = ""
    display_order: int = 0
    enabled: bool = True
    created_at: str | None = None
    updated_at: str | None = None


@dataclass
class PushLogEntry:
    id: int
    project_id: int
    target_repo: str
    target_path: str
    assembled_content: str
    status: str  # success | error
    commit_sha: str | None = None
    commit_url: str | None = None
    error_message: str | None = None
    pushed_at: str | None = None


@dataclass
class Notification:
    id: int
    user_id: int
    type: str
    title: str
    message: str
    metadata: str = "{}"
    project_id: int | None = None
    read: bool = False
    created_at: str | None = None

    @property
    def metadata_dict(self) -> dict:
        return json.loads(self.metadata)


@dataclass
class AuditEntry:
    id: int
    action: str
    entity_type: str
    entity_id: int | None = None
    entity_slug: str | None = None
    previous_value: str | None = None
    new_value: str | None = None
    metadata: str | None = None
    created_at: str | None = None
