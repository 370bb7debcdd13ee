"""GitHub Contents API client: single-file commits only.

Security / robustness requirements:
- Token is read from the GITHUB_TOKEN environment variable, never from config.
- is_configured never touches the network.
- Every request carries a timeout; a timeout is reported like any other failure.
- Error messages from the API are preserved verbatim for the operator.
- Tokens are never included in error messages.
"""

from __future__ import annotations

import base64
import json
import logging
import os
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass
from http.client import HTTPResponse
from typing import Any

logger = logging.getLogger(__name__)

_USER_AGENT = "consoleblue/0.1"
_ACCEPT = "application/vnd.github+json"
_API_VERSION = "2022-11-28"
_DEFAULT_API_URL = "https://api.github.com"
_DEFAULT_OWNER = "triadblue"
_DEFAULT_TIMEOUT = 30.0


class GitHubError(RuntimeError):
    """Raised when a GitHub API call fails (HTTP error, network error, timeout)."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


@dataclass
class CommitResult:
    commit_sha: str
    commit_url: str


class GitHubClient:
    """Create-or-overwrite a single file in a GitHub repository.

    Uses the v3 Contents API: the current blob sha is looked up first (a
    missing file means create), then the new content is PUT in one commit.
    """

    def __init__(
        self,
        token: str | None = None,
        owner: str = _DEFAULT_OWNER,
        api_url: str = _DEFAULT_API_URL,
        timeout: float = _DEFAULT_TIMEOUT,
    ) -> None:
        self._token = token
        self.owner = owner
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout

    @classmethod
    def from_env(
        cls,
        owner: str = _DEFAULT_OWNER,
        api_url: str = _DEFAULT_API_URL,
        timeout: float = _DEFAULT_TIMEOUT,
    ) -> GitHubClient:
        """Build a client with the token taken from GITHUB_TOKEN (may be unset)."""
        return cls(
            token=os.environ.get("GITHUB_TOKEN") or None,
            owner=owner,
            api_url=api_url,
            timeout=timeout,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self._token)

    def repo_full_name(self, repo: str, owner: str | None = None) -> str:
        return f"{owner or self.owner}/{repo}"

    def commit_file(
        self,
        repo: str,
        path: str,
        content: str,
        message: str,
        branch: str | None = None,
        owner: str | None = None,
    ) -> CommitResult:
        """Commit *content* to *path*, replacing any existing file.

        Args:
            repo: Repository name (without owner).
            path: File path inside the repository.
            content: Full new file content (UTF-8 text).
            message: Commit message.
            branch: Target branch; None uses the repository default branch.
            owner: Repository owner; None uses the client default.

        Returns:
            CommitResult with the new commit sha and its html URL.

        Raises:
            GitHubError: If the client has no token or any request fails.
        """
        if not self.is_configured:
            raise GitHubError("GitHub token not configured")

        contents_url = self._contents_url(owner or self.owner, repo, path)
        existing_sha = self._get_file_sha(contents_url, branch)

        body: dict[str, Any] = {
            "message": message,
            "content": base64.b64encode(content.encode("utf-8")).decode("ascii"),
        }
        if branch:
            body["branch"] = branch
        if existing_sha:
            body["sha"] = existing_sha

        data = self._request("PUT", contents_url, body)
        commit = data.get("commit") or {}
        sha = commit.get("sha")
        if not sha:
            raise GitHubError("GitHub response did not include a commit sha")
        url = commit.get("html_url") or (
            f"https://github.com/{owner or self.owner}/{repo}/commit/{sha}"
        )
        logger.info("Committed %s to %s/%s (%s)", path, owner or self.owner, repo, sha[:7])
        return CommitResult(commit_sha=sha, commit_url=url)

    # ------------------------------------------------------------------
    # HTTP helpers
    # ------------------------------------------------------------------

    def _contents_url(self, owner: str, repo: str, path: str) -> str:
        quoted_path = urllib.parse.quote(path.lstrip("/"))
        return (
            f"{self.api_url}/repos/{urllib.parse.quote(owner)}/"
            f"{urllib.parse.quote(repo)}/contents/{quoted_path}"
        )

    def _get_file_sha(self, contents_url: str, branch: str | None) -> str | None:
        """Return the blob sha of the existing file, or None if it does not exist."""
        url = contents_url
        if branch:
            url += "?" + urllib.parse.urlencode({"ref": branch})
        try:
            data = self._request("GET", url)
        except GitHubError as exc:
            if exc.status == 404:
                return None
            raise
        if isinstance(data, list):
            raise GitHubError(f"Target path is a directory: {contents_url.rsplit('/contents/', 1)[-1]}")
        return data.get("sha")

    def _request(self, method: str, url: str, body: dict[str, Any] | None = None) -> Any:
        headers = {
            "Accept": _ACCEPT,
            "Authorization": f"Bearer {self._token}",
            "User-Agent": _USER_AGENT,
            "X-GitHub-Api-Version": _API_VERSION,
        }
        data = None
        if body is not None:
            data = json.dumps(body).encode("utf-8")
            headers["Content-Type"] = "application/json"

        request = urllib.request.Request(url, data=data, headers=headers, method=method)
        try:
            response: HTTPResponse = urllib.request.urlopen(request, timeout=self.timeout)
        except urllib.error.HTTPError as exc:
            raise GitHubError(_http_error_message(exc), status=exc.code) from exc
        except urllib.error.URLError as exc:
            raise GitHubError(f"GitHub request failed: {exc.reason}") from exc
        except TimeoutError as exc:
            raise GitHubError(f"GitHub request timed out after {self.timeout:g}s") from exc

        with response:
            raw = response.read()
        if not raw:
            return {}
        try:
            return json.loads(raw)
        except json.JSONDecodeError as exc:
            raise GitHubError(f"GitHub returned invalid JSON: {exc}") from exc


def _http_error_message(exc: urllib.error.HTTPError) -> str:
    """Prefer the API's own ``message`` field; fall back to the HTTP reason."""
    try:
        payload = json.loads(exc.read() or b"{}")
    except (json.JSONDecodeError, OSError):
        payload = {}
    message = payload.get("message") if isinstance(payload, dict) else None
    return message or f"HTTP {exc.code}: {exc.reason}"
