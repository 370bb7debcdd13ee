"""Tests for starter-doc generation: new project, regenerate, force."""

from __future__ import annotations

import pytest

from consoleblue.db.models import ProjectDoc
from consoleblue.docs.generator import DocGenerator
from consoleblue.docs.publisher import Publisher
from consoleblue.docs.templates import TEMPLATE_SLUGS
from consoleblue.errors import ConflictError, NotFoundError, ValidationError
from consoleblue.sinks import NotificationSink


def _generator(repo, client, auto_push=True) -> DocGenerator:
    sink = NotificationSink(repo)
    publisher = Publisher(repo, client, notifications=sink)
    return DocGenerator(repo, publisher=publisher, notifications=sink, auto_push=auto_push)


@pytest.fixture
def acme(repo):
    """Project with no repository: generation never pushes."""
    return repo.add_project("acme", "Acme")


@pytest.fixture
def web(repo):
    return repo.add_project("web", "Web Shop", github_repo="web-shop", tags=["python"])


def _notifications_of(repo, type_):
    return [n for n in repo.list_notifications() if n.type == type_]


# ------------------------------------------------------------------
# generate_for_new_project
# ------------------------------------------------------------------

def test_generate_creates_applicable_docs(repo, fake_vcs, acme):
    result = _generator(repo, fake_vcs).generate_for_new_project(acme)
    assert result.docs_created == 5
    assert result.docs_skipped == 0
    assert {d.slug for d in repo.list_project_docs(acme)} <= TEMPLATE_SLUGS


def test_generate_is_idempotent(repo, fake_vcs, acme):
    gen = _generator(repo, fake_vcs)
    gen.generate_for_new_project(acme)
    before = repo.list_project_docs(acme)

    again = gen.generate_for_new_project("acme")

    assert again.docs_created == 0
    assert again.docs_skipped == 5
    assert repo.list_project_docs(acme) == before


def test_generate_skips_existing_slug_untouched(repo, fake_vcs, acme):
    repo.add_project_doc(
        ProjectDoc(id=None, project_id=acme, slug="project-overview", title="Mine", content="custom")
    )
    result = _generator(repo, fake_vcs).generate_for_new_project(acme)
    assert result.docs_created == 4
    assert result.docs_skipped == 1
    assert repo.get_project_doc_by_slug(acme, "project-overview").content == "custom"


def test_generate_notifies_active_operators_once(repo, fake_vcs, acme):
    op = repo.add_operator("a@example.com")
    gen = _generator(repo, fake_vcs)

    result = gen.generate_for_new_project(acme)
    gen.generate_for_new_project(acme)

    notes = _notifications_of(repo, "docs_generated")
    assert len(notes) == 1
    assert result.notifications_sent == 1
    meta = notes[0].metadata_dict
    assert notes[0].user_id == op
    assert meta["requiresAck"] is True
    assert meta["docsCreated"] == 5
    assert meta["projectSlug"] == "acme"


def test_generate_without_repo_does_not_push(repo, fake_vcs, acme):
    result = _generator(repo, fake_vcs).generate_for_new_project(acme)
    assert result.auto_pushed is False
    assert fake_vcs.commits == []
    assert repo.count_push_log(acme) == 0


def test_generate_with_repo_auto_pushes(repo, fake_vcs, web):
    repo.add_operator("a@example.com")
    result = _generator(repo, fake_vcs).generate_for_new_project(web)

    assert result.auto_pushed is True
    assert result.commit_sha == f"{1:040x}"
    (entry,) = repo.list_push_log(web, limit=10)
    assert entry.status == "success"
    assert entry.commit_sha == result.commit_sha
    assert entry.commit_url == result.commit_url
    assert len(_notifications_of(repo, "docs_pushed")) == 1
    assert result.notifications_sent == 2


def test_generate_auto_push_disabled(repo, fake_vcs, web):
    result = _generator(repo, fake_vcs, auto_push=False).generate_for_new_project(web)
    assert result.auto_pushed is False
    assert repo.count_push_log(web) == 0


def test_generate_without_token_skips_push(repo, fake_vcs, web):
    fake_vcs.configured = False
    result = _generator(repo, fake_vcs).generate_for_new_project(web)
    assert result.docs_created == 6
    assert result.auto_pushed is False
    assert repo.count_push_log(web) == 0


def test_generate_swallows_push_failure(repo, unreachable_vcs, web):
    result = _generator(repo, unreachable_vcs).generate_for_new_project(web)

    assert result.docs_created == 6
    assert result.auto_pushed is False
    assert result.commit_sha is None
    (entry,) = repo.list_push_log(web, limit=10)
    assert entry.status == "error"


def test_second_generate_does_not_push_again(repo, fake_vcs, web):
    gen = _generator(repo, fake_vcs)
    gen.generate_for_new_project(web)
    gen.generate_for_new_project(web)
    assert len(fake_vcs.commits) == 1


def test_generate_unknown_project(repo, fake_vcs):
    with pytest.raises(NotFoundError):
        _generator(repo, fake_vcs).generate_for_new_project("missing")


def test_generate_malformed_snapshot_writes_nothing(repo, tmp_db, fake_vcs, acme):
    tmp_db.execute("UPDATE projects SET custom_settings = '[1, 2]' WHERE id = ?", (acme,))
    tmp_db.commit()
    with pytest.raises(ValidationError):
        _generator(repo, fake_vcs).generate_for_new_project(acme)
    assert repo.count_project_docs(acme) == 0


# ------------------------------------------------------------------
# regenerate_for_project
# ------------------------------------------------------------------

def test_regenerate_updates_content_only(repo, fake_vcs, tmp_db, acme):
    gen = _generator(repo, fake_vcs)
    gen.generate_for_new_project(acme)
    doc = repo.get_project_doc_by_slug(acme, "project-overview")
    repo.update_project_doc(acme, doc.id, title="Renamed", display_order=42, enabled=False)
    tmp_db.execute("UPDATE projects SET description = 'Now with a description' WHERE id = ?", (acme,))
    tmp_db.commit()

    result = gen.regenerate_for_project(acme)

    assert result.docs_updated == 5
    after = repo.get_project_doc(acme, doc.id)
    assert "Now with a description" in after.content
    assert (after.title, after.display_order, after.enabled) == ("Renamed", 42, False)


def test_regenerate_never_creates(repo, fake_vcs, acme):
    result = _generator(repo, fake_vcs).regenerate_for_project(acme)
    assert result.docs_updated == 0
    assert repo.count_project_docs(acme) == 0


def test_regenerate_leaves_custom_docs(repo, fake_vcs, acme):
    repo.add_project_doc(ProjectDoc(id=None, project_id=acme, slug="notes", title="Notes", content="mine"))
    _generator(repo, fake_vcs).regenerate_for_project(acme)
    assert repo.get_project_doc_by_slug(acme, "notes").content == "mine"


def test_regenerate_does_not_push(repo, fake_vcs, web):
    gen = _generator(repo, fake_vcs)
    gen.generate_for_new_project(web)
    gen.regenerate_for_project(web)
    assert len(fake_vcs.commits) == 1


# ------------------------------------------------------------------
# generate_starter_docs (force semantics)
# ------------------------------------------------------------------

def test_starter_docs_without_existing_behaves_like_new(repo, fake_vcs, acme):
    result = _generator(repo, fake_vcs).generate_starter_docs(acme)
    assert result.docs_created == 5


def test_starter_docs_conflict_without_force(repo, fake_vcs, acme):
    gen = _generator(repo, fake_vcs)
    gen.generate_for_new_project(acme)
    with pytest.raises(ConflictError):
        gen.generate_starter_docs(acme)


def test_starter_docs_custom_doc_is_conflict(repo, fake_vcs, acme):
    repo.add_project_doc(ProjectDoc(id=None, project_id=acme, slug="runbook", title="Runbook"))
    with pytest.raises(ConflictError):
        _generator(repo, fake_vcs).generate_starter_docs(acme)
    assert [d.slug for d in repo.list_project_docs(acme)] == ["runbook"]
    assert fake_vcs.commits == []


def test_force_overwrites_and_creates(repo, fake_vcs, acme):
    repo.add_project_doc(
        ProjectDoc(
            id=None,
            project_id=acme,
            slug="company-identity",
            title="Old",
            content="hand edited",
            display_order=50,
            enabled=False,
        )
    )
    repo.add_project_doc(ProjectDoc(id=None, project_id=acme, slug="notes", title="Notes", content="mine"))

    result = _generator(repo, fake_vcs).generate_starter_docs(acme, force=True)

    assert result.docs_updated == 1
    assert result.docs_created == 4
    identity = repo.get_project_doc_by_slug(acme, "company-identity")
    assert identity.title == "Company Identity"
    assert identity.content.startswith("Acme is a project managed in ConsoleBlue.")
    assert identity.display_order == 0
    assert identity.enabled is False
    assert repo.get_project_doc_by_slug(acme, "notes").content == "mine"


def test_force_notifies_and_pushes(repo, fake_vcs, web):
    repo.add_operator("a@example.com")
    gen = _generator(repo, fake_vcs)
    gen.generate_for_new_project(web)

    result = gen.generate_starter_docs(web, force=True)

    assert result.docs_updated == 6
    assert result.auto_pushed is True
    assert len(fake_vcs.commits) == 2
    assert len(_notifications_of(repo, "docs_generated")) == 2
