"""Starter-doc generation workflows: new project, regenerate, force.

  generate_for_new_project   insert missing template docs, skip existing ones
  regenerate_for_project     refresh content of template docs that exist; never creates
  generate_starter_docs      operator entry point; Conflict unless forced

When a run creates or changes docs, every active operator is notified and,
if the project has a repository and GitHub is configured, the document is
auto-pushed. Auto-push failures are recorded in push history by the
Publisher and logged here; they never fail the generation itself.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from consoleblue.db.models import Project, ProjectDoc
from consoleblue.db.repository import Repository
from consoleblue.docs.fragments import require_project
from consoleblue.docs.publisher import DEFAULT_TARGET_PATH, Publisher
from consoleblue.docs.templates import GeneratedDoc, generate
from consoleblue.errors import ConflictError, ConsoleBlueError
from consoleblue.sinks import NotificationSink

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    project_slug: str
    docs_created: int = 0
    docs_updated: int = 0
    docs_skipped: int = 0
    notifications_sent: int = 0
    auto_pushed: bool = False
    commit_sha: str | None = None
    commit_url: str | None = None


@dataclass
class RegenerationResult:
    project_slug: str
    docs_updated: int = 0


class DocGenerator:
    """Turns project metadata into persisted project docs."""

    def __init__(
        self,
        repo: Repository,
        publisher: Publisher | None = None,
        notifications: NotificationSink | None = None,
        auto_push: bool = True,
        target_path: str = DEFAULT_TARGET_PATH,
    ) -> None:
        self._repo = repo
        self._publisher = publisher
        self._notifications = notifications or NotificationSink(repo)
        self._auto_push = auto_push
        self._target_path = target_path

    def generate_for_new_project(self, project_id_or_slug: int | str) -> GenerationResult:
        """Create template docs that do not exist yet for the project.

        Existing slugs are skipped untouched. Safe to call repeatedly: the
        second call creates nothing and therefore neither notifies nor pushes.

        Raises:
            NotFoundError: Unknown project.
            ValidationError: Malformed project snapshot.
        """
        project = require_project(self._repo, project_id_or_slug)
        result = GenerationResult(project_slug=project.slug)

        for doc in generate(project):
            if self._repo.insert_project_doc_if_absent(_to_project_doc(project, doc)):
                result.docs_created += 1
            else:
                result.docs_skipped += 1

        logger.info(
            "Generated docs for %s: %d created, %d skipped",
            project.slug,
            result.docs_created,
            result.docs_skipped,
        )
        if result.docs_created:
            self._announce_and_push(project, result)
        return result

    def regenerate_for_project(self, project_id_or_slug: int | str) -> RegenerationResult:
        """Re-render content for template docs that already exist.

        Only ``content`` changes; title, display_order and enabled are kept.
        Missing template docs are not created. No auto-push.

        Raises:
            NotFoundError: Unknown project.
            ValidationError: Malformed project snapshot.
        """
        project = require_project(self._repo, project_id_or_slug)
        result = RegenerationResult(project_slug=project.slug)

        for doc in generate(project):
            if self._repo.update_project_doc_content(project.id, doc.slug, doc.content):
                result.docs_updated += 1

        logger.info("Regenerated %d docs for %s", result.docs_updated, project.slug)
        return result

    def generate_starter_docs(
        self, project_id_or_slug: int | str, force: bool = False
    ) -> GenerationResult:
        """Operator-triggered generation.

        Without *force*, any existing project doc is a conflict and nothing is
        written. With *force*, template docs are upserted by slug: content,
        title and display_order are overwritten, missing ones are created, and
        docs with non-template slugs are never touched.

        Raises:
            NotFoundError: Unknown project.
            ConflictError: The project already has docs and *force* is False.
            ValidationError: Malformed project snapshot.
        """
        project = require_project(self._repo, project_id_or_slug)

        if not force:
            existing = self._repo.count_project_docs(project.id)
            if existing:
                raise ConflictError(
                    f"Project '{project.slug}' already has {existing} doc(s); "
                    "use force to overwrite the generated ones"
                )
            return self.generate_for_new_project(project.id)

        result = GenerationResult(project_slug=project.slug)
        for doc in generate(project):
            if self._repo.upsert_project_doc(_to_project_doc(project, doc)):
                result.docs_created += 1
            else:
                result.docs_updated += 1

        logger.info(
            "Force-generated docs for %s: %d created, %d overwritten",
            project.slug,
            result.docs_created,
            result.docs_updated,
        )
        if result.docs_created or result.docs_updated:
            self._announce_and_push(project, result)
        return result

    # ------------------------------------------------------------------
    # Side effects
    # ------------------------------------------------------------------

    def _announce_and_push(self, project: Project, result: GenerationResult) -> None:
        result.notifications_sent += self._notifications.broadcast(
            type="docs_generated",
            title=f"New docs generated for {project.display_name}",
            message=(
                f"{result.docs_created} starter doc(s) created"
                + (f", {result.docs_updated} overwritten" if result.docs_updated else "")
                + f" for {project.display_name}. Review them before the next push."
            ),
            metadata={
                "projectId": project.id,
                "projectSlug": project.slug,
                "docsCreated": result.docs_created,
                "docsUpdated": result.docs_updated,
                "requiresAck": True,
            },
            project_id=project.id,
        )

        if not self._auto_push or self._publisher is None:
            return
        if not self._publisher.can_publish(project):
            logger.debug("Skipping auto-push for %s: no repo or no GitHub token", project.slug)
            return

        try:
            pushed = self._publisher.publish(project.id, target_path=self._target_path)
        except ConsoleBlueError as exc:
            logger.warning("Auto-push for %s failed: %s", project.slug, exc)
            return

        result.auto_pushed = True
        result.commit_sha = pushed.commit_sha
        result.commit_url = pushed.commit_url
        result.notifications_sent += pushed.notifications_sent


def _to_project_doc(project: Project, doc: GeneratedDoc) -> ProjectDoc:
    return ProjectDoc(
        id=None,
        project_id=project.id,
        slug=doc.slug,
        title=doc.title,
        content=doc.content,
        display_order=doc.display_order,
        enabled=True,
    )
