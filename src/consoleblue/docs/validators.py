"""Input validation for doc fragments and publish requests."""

from __future__ import annotations

import re
from pathlib import PurePosixPath

from consoleblue.errors import ValidationError

SLUG_RE = re.compile(r"^[a-z0-9][a-z0-9-]*[a-z0-9]$")
SLUG_MAX = 100
TITLE_MAX = 200
TARGET_PATH_MAX = 500
COMMIT_MESSAGE_MAX = 500


def validate_slug(slug: str) -> str:
    if not isinstance(slug, str) or not 1 <= len(slug) <= SLUG_MAX:
        raise ValidationError("slug", f"must be 1-{SLUG_MAX} characters")
    if not SLUG_RE.match(slug):
        raise ValidationError(
            "slug",
            "must be lowercase alphanumeric with hyphens, no leading/trailing hyphens",
        )
    return slug


def validate_title(title: str) -> str:
    if not isinstance(title, str) or not title.strip():
        raise ValidationError("title", "must not be empty")
    if len(title) > TITLE_MAX:
        raise ValidationError("title", f"must be at most {TITLE_MAX} characters")
    return title


def validate_display_order(display_order: int) -> int:
    # bool is an int subclass; reject it explicitly.
    if not isinstance(display_order, int) or isinstance(display_order, bool) or display_order < 0:
        raise ValidationError("display_order", "must be an integer >= 0")
    return display_order


def validate_content(content: str) -> str:
    if not isinstance(content, str):
        raise ValidationError("content", "must be a string")
    return content


def validate_doc_fields(fields: dict, partial: bool = False) -> dict:
    """Validate a create (partial=False) or update (partial=True) payload.

    Returns the payload unchanged on success.
    """
    if not partial:
        for required in ("slug", "title"):
            if required not in fields:
                raise ValidationError(required, "is required")

    checks = {
        "slug": validate_slug,
        "title": validate_title,
        "content": validate_content,
        "display_order": validate_display_order,
    }
    for name, value in fields.items():
        if name == "enabled":
            if not isinstance(value, bool):
                raise ValidationError("enabled", "must be a boolean")
            continue
        check = checks.get(name)
        if check is None:
            raise ValidationError(name, "is not an editable field")
        check(value)
    return fields


def validate_target_path(target_path: str) -> str:
    """Confine the publish target to a relative path inside the repository."""
    if not isinstance(target_path, str) or not target_path.strip():
        raise ValidationError("target_path", "must not be empty")
    if len(target_path) > TARGET_PATH_MAX:
        raise ValidationError("target_path", f"must be at most {TARGET_PATH_MAX} characters")
    path = PurePosixPath(target_path)
    if path.is_absolute() or target_path.startswith("\\"):
        raise ValidationError("target_path", "must be relative to the repository root")
    if ".." in path.parts:
        raise ValidationError("target_path", "must not contain '..' segments")
    if target_path.endswith("/"):
        raise ValidationError("target_path", "must name a file, not a directory")
    return target_path


def validate_commit_message(message: str | None) -> str | None:
    if message is None:
        return None
    if not isinstance(message, str) or not message.strip():
        raise ValidationError("commit_message", "must not be blank")
    if len(message) > COMMIT_MESSAGE_MAX:
        raise ValidationError(
            "commit_message", f"must be at most {COMMIT_MESSAGE_MAX} characters"
        )
    return message
