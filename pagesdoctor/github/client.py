"""Thin synchronous client for the GitHub REST endpoints pagesdoctor needs."""

from __future__ import annotations

import base64
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from ..config import GitHubConfig
from ..errors import GitHubError
from ..logging import get_logger

logger = get_logger("github")

API_VERSION = "2022-11-28"


class GitHubClient:
    """Wraps an ``httpx.Client`` bound to the GitHub API base URL.

    Every failure, whether an error status or a transport problem such as a
    timeout, is raised as :class:`GitHubError` so callers only need to handle
    one exception type.
    """

    def __init__(
        self,
        *,
        token: str | None = None,
        api_url: str = "https://api.github.com",
        timeout: float = 10.0,
        user_agent: str = "pagesdoctor",
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": API_VERSION,
            "User-Agent": user_agent,
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._http = httpx.Client(
            base_url=api_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            transport=transport,
        )
        logger.debug("GitHub client initialized (authenticated=%s)", bool(token))

    @classmethod
    def from_config(
        cls, config: GitHubConfig, *, transport: httpx.BaseTransport | None = None
    ) -> "GitHubClient":
        return cls(
            token=config.token,
            api_url=config.api_url,
            timeout=config.timeout,
            user_agent=config.user_agent,
            transport=transport,
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "GitHubClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Repository and Pages endpoints

    def get_repository(self, owner: str, repo: str) -> Dict[str, Any]:
        return self._request("GET", _repo_path(owner, repo))

    def get_pages(self, owner: str, repo: str) -> Dict[str, Any]:
        return self._request("GET", f"{_repo_path(owner, repo)}/pages")

    def list_pages_builds(
        self, owner: str, repo: str, *, per_page: int = 1
    ) -> List[Dict[str, Any]]:
        builds = self._request(
            "GET",
            f"{_repo_path(owner, repo)}/pages/builds",
            params={"per_page": per_page},
        )
        return builds if isinstance(builds, list) else []

    def request_pages_build(self, owner: str, repo: str) -> Dict[str, Any]:
        return self._request("POST", f"{_repo_path(owner, repo)}/pages/builds")

    # ------------------------------------------------------------------
    # Contents endpoints

    def get_content(
        self, owner: str, repo: str, path: str, *, ref: str | None = None
    ) -> Dict[str, Any]:
        params = {"ref": ref} if ref else None
        return self._request(
            "GET", _contents_path(owner, repo, path), params=params
        )

    def file_exists(self, owner: str, repo: str, path: str) -> bool:
        """Return False only when the contents API answers 404."""
        try:
            self.get_content(owner, repo, path)
        except GitHubError as exc:
            if exc.not_found:
                return False
            raise
        return True

    def create_or_update_file(
        self,
        owner: str,
        repo: str,
        path: str,
        *,
        content: str,
        message: str,
        branch: str,
        sha: str | None = None,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "message": message,
            "content": base64.b64encode(content.encode("utf-8")).decode("ascii"),
            "branch": branch,
        }
        if sha:
            payload["sha"] = sha
        return self._request(
            "PUT", _contents_path(owner, repo, path), json=payload
        )

    # ------------------------------------------------------------------
    # Helpers

    def _request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        try:
            response = self._http.request(method, url, params=params, json=json)
        except httpx.TimeoutException as exc:
            raise GitHubError(f"GitHub API request timed out: {method} {url}") from exc
        except httpx.HTTPError as exc:
            raise GitHubError(f"GitHub API request failed: {exc}") from exc

        if response.is_error:
            raise GitHubError(_error_message(response), status=response.status_code)
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as exc:
            raise GitHubError(
                f"GitHub API returned a non-JSON response (HTTP {response.status_code})",
                status=response.status_code,
            ) from exc


def _repo_path(owner: str, repo: str) -> str:
    return f"/repos/{quote(owner, safe='')}/{quote(repo, safe='')}"


def _contents_path(owner: str, repo: str, path: str) -> str:
    return f"{_repo_path(owner, repo)}/contents/{quote(path.lstrip('/'))}"


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"GitHub API returned HTTP {response.status_code}"


__all__ = ["GitHubClient"]
