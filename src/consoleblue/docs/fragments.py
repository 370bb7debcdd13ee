"""Shared and project doc fragments: validated create/update/delete/reorder.

Every mutation is validated before it touches the store and is followed by a
best-effort audit record. Deletion is permanent and affects the next assembly
immediately.
"""

from __future__ import annotations

import sqlite3
from dataclasses import asdict
from typing import Any

from consoleblue.db.models import Project, ProjectDoc, SharedDoc
from consoleblue.db.repository import Repository
from consoleblue.docs.validators import validate_doc_fields
from consoleblue.errors import ConflictError, NotFoundError, ValidationError
from consoleblue.sinks import AuditSink


def require_project(repo: Repository, id_or_slug: int | str) -> Project:
    """Return the project or raise NotFoundError."""
    project = repo.get_project(id_or_slug)
    if project is None:
        raise NotFoundError(f"Project '{id_or_slug}' not found")
    return project


class SharedDocs:
    """Global fragments included in every assembled document."""

    def __init__(self, repo: Repository, audit: AuditSink | None = None) -> None:
        self._repo = repo
        self._audit = audit or AuditSink(repo)

    def list_docs(self) -> list[SharedDoc]:
        return self._repo.list_shared_docs()

    def get(self, doc_id: int) -> SharedDoc:
        doc = self._repo.get_shared_doc(doc_id)
        if doc is None:
            raise NotFoundError(f"Shared doc {doc_id} not found")
        return doc

    def create(
        self,
        slug: str,
        title: str,
        content: str = "",
        display_order: int | None = None,
        enabled: bool = True,
    ) -> SharedDoc:
        fields: dict[str, Any] = {"slug": slug, "title": title, "content": content, "enabled": enabled}
        if display_order is not None:
            fields["display_order"] = display_order
        validate_doc_fields(fields)

        if self._repo.get_shared_doc_by_slug(slug) is not None:
            raise ConflictError(f'Shared doc with slug "{slug}" already exists')
        if display_order is None:
            display_order = self._repo.next_shared_display_order()

        try:
            doc_id = self._repo.add_shared_doc(
                SharedDoc(
                    id=None,
                    slug=slug,
                    title=title,
                    content=content,
                    display_order=display_order,
                    enabled=enabled,
                )
            )
        except sqlite3.IntegrityError as exc:
            raise ConflictError(f'Shared doc with slug "{slug}" already exists') from exc

        doc = self.get(doc_id)
        self._audit.record("create", "shared_doc", doc.id, doc.slug, new_value=asdict(doc))
        return doc

    def update(self, doc_id: int, **fields: Any) -> SharedDoc:
        if not fields:
            raise ValidationError("fields", "provide at least one field to update")
        validate_doc_fields(fields, partial=True)
        existing = self.get(doc_id)

        new_slug = fields.get("slug")
        if new_slug and new_slug != existing.slug and self._repo.get_shared_doc_by_slug(new_slug):
            raise ConflictError(f'Shared doc with slug "{new_slug}" already exists')

        try:
            updated = self._repo.update_shared_doc(doc_id, **fields)
        except sqlite3.IntegrityError as exc:
            raise ConflictError(f'Shared doc with slug "{new_slug}" already exists') from exc
        if updated is None:
            raise NotFoundError(f"Shared doc {doc_id} not found")

        self._audit.record(
            "update",
            "shared_doc",
            doc_id,
            updated.slug,
            previous_value=asdict(existing),
            new_value=asdict(updated),
        )
        return updated

    def delete(self, doc_id: int) -> SharedDoc:
        deleted = self._repo.delete_shared_doc(doc_id)
        if deleted is None:
            raise NotFoundError(f"Shared doc {doc_id} not found")
        self._audit.record("delete", "shared_doc", doc_id, deleted.slug, previous_value=asdict(deleted))
        return deleted

    def reorder(self, doc_ids: list[int]) -> list[SharedDoc]:
        """Set display_order to each id's position in *doc_ids*."""
        _check_reorder_ids(doc_ids)
        for position, doc_id in enumerate(doc_ids):
            self._repo.update_shared_doc(doc_id, display_order=position)
        self._audit.record("reorder", "shared_doc", new_value={"docIds": doc_ids})
        return self._repo.list_shared_docs()


class ProjectDocs:
    """Fragments scoped to one project. Slugs are unique per project only."""

    def __init__(self, repo: Repository, audit: AuditSink | None = None) -> None:
        self._repo = repo
        self._audit = audit or AuditSink(repo)

    def list_docs(self, project_id_or_slug: int | str) -> list[ProjectDoc]:
        project = require_project(self._repo, project_id_or_slug)
        return self._repo.list_project_docs(project.id)

    def get(self, project_id_or_slug: int | str, doc_id: int) -> ProjectDoc:
        project = require_project(self._repo, project_id_or_slug)
        return self._get(project, doc_id)

    def create(
        self,
        project_id_or_slug: int | str,
        slug: str,
        title: str,
        content: str = "",
        display_order: int | None = None,
        enabled: bool = True,
    ) -> ProjectDoc:
        fields: dict[str, Any] = {"slug": slug, "title": title, "content": content, "enabled": enabled}
        if display_order is not None:
            fields["display_order"] = display_order
        validate_doc_fields(fields)
        project = require_project(self._repo, project_id_or_slug)

        if self._repo.get_project_doc_by_slug(project.id, slug) is not None:
            raise ConflictError(
                f'Project doc with slug "{slug}" already exists for this project'
            )
        if display_order is None:
            display_order = self._repo.next_project_display_order(project.id)

        try:
            doc_id = self._repo.add_project_doc(
                ProjectDoc(
                    id=None,
                    project_id=project.id,
                    slug=slug,
                    title=title,
                    content=content,
                    display_order=display_order,
                    enabled=enabled,
                )
            )
        except sqlite3.IntegrityError as exc:
            raise ConflictError(
                f'Project doc with slug "{slug}" already exists for this project'
            ) from exc

        doc = self._get(project, doc_id)
        self._audit.record(
            "create",
            "project_doc",
            doc.id,
            doc.slug,
            new_value=asdict(doc),
            metadata=_project_meta(project),
        )
        return doc

    def update(self, project_id_or_slug: int | str, doc_id: int, **fields: Any) -> ProjectDoc:
        if not fields:
            raise ValidationError("fields", "provide at least one field to update")
        validate_doc_fields(fields, partial=True)
        project = require_project(self._repo, project_id_or_slug)
        existing = self._get(project, doc_id)

        new_slug = fields.get("slug")
        if (
            new_slug
            and new_slug != existing.slug
            and self._repo.get_project_doc_by_slug(project.id, new_slug)
        ):
            raise ConflictError(
                f'Project doc with slug "{new_slug}" already exists for this project'
            )

        try:
            updated = self._repo.update_project_doc(project.id, doc_id, **fields)
        except sqlite3.IntegrityError as exc:
            raise ConflictError(
                f'Project doc with slug "{new_slug}" already exists for this project'
            ) from exc
        if updated is None:
            raise NotFoundError(f"Project doc {doc_id} not found")

        self._audit.record(
            "update",
            "project_doc",
            doc_id,
            updated.slug,
            previous_value=asdict(existing),
            new_value=asdict(updated),
            metadata=_project_meta(project),
        )
        return updated

    def delete(self, project_id_or_slug: int | str, doc_id: int) -> ProjectDoc:
        project = require_project(self._repo, project_id_or_slug)
        deleted = self._repo.delete_project_doc(project.id, doc_id)
        if deleted is None:
            raise NotFoundError(f"Project doc {doc_id} not found")
        self._audit.record(
            "delete",
            "project_doc",
            doc_id,
            deleted.slug,
            previous_value=asdict(deleted),
            metadata=_project_meta(project),
        )
        return deleted

    def reorder(self, project_id_or_slug: int | str, doc_ids: list[int]) -> list[ProjectDoc]:
        """Set display_order to each id's position. Ids from other projects are ignored."""
        _check_reorder_ids(doc_ids)
        project = require_project(self._repo, project_id_or_slug)
        for position, doc_id in enumerate(doc_ids):
            self._repo.update_project_doc(project.id, doc_id, display_order=position)
        self._audit.record(
            "reorder",
            "project_doc",
            new_value={"docIds": doc_ids},
            metadata=_project_meta(project),
        )
        return self._repo.list_project_docs(project.id)

    def _get(self, project: Project, doc_id: int) -> ProjectDoc:
        doc = self._repo.get_project_doc(project.id, doc_id)
        if doc is None:
            raise NotFoundError(f"Project doc {doc_id} not found")
        return doc


def _check_reorder_ids(doc_ids: list[int]) -> None:
    if not doc_ids:
        raise ValidationError("doc_ids", "must provide at least one doc ID")
    if any(not isinstance(i, int) or isinstance(i, bool) or i <= 0 for i in doc_ids):
        raise ValidationError("doc_ids", "must be positive integers")
    if len(set(doc_ids)) != len(doc_ids):
        raise ValidationError("doc_ids", "must not contain duplicates")


def _project_meta(project: Project) -> dict[str, Any]:
    return {"projectId": project.id, "projectSlug": project.slug}
