"""GitHub REST client for repository metadata, contributors, releases and issues."""

from __future__ import annotations

from datetime import datetime
from typing import Any
from urllib.parse import urlparse

import httpx

from . import __version__
from .errors import GitHubError
from .logging import get_logger
from .models import (
    GitHubIssue,
    GitHubLicense,
    GitHubRelease,
    GitHubUser,
    RepositoryMetadata,
)

GITHUB_API_URL = "https://api.github.com"
REQUEST_TIMEOUT = 30

logger = get_logger("github")


def parse_github_url(url: str) -> tuple[str, str]:
    """Return (owner, repo) for a github.com repository URL."""
    parsed = urlparse(url)
    if parsed.hostname != "github.com":
        raise ValueError(f"URL is not a GitHub repository URL: {url}")
    segments = [s for s in parsed.path.split("/") if s]
    if len(segments) < 2:
        raise ValueError(f"Invalid GitHub repository URL format: {url}")
    owner, repo = segments[0], segments[1]
    if repo.endswith(".git"):
        repo = repo[: -len(".git")]
    return owner, repo


def _parse_datetime(value: Any) -> datetime | None:
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def _user(data: Any) -> GitHubUser:
    data = data if isinstance(data, dict) else {}
    return GitHubUser(
        login=data.get("login") or "",
        id=data.get("id") or 0,
        avatar_url=data.get("avatar_url") or "",
        html_url=data.get("html_url") or "",
        contributions=data.get("contributions"),
    )


class GitHubClient:
    """Thin client over the GitHub REST API (v3)."""

    def __init__(self, token: str | None = None, base_url: str = GITHUB_API_URL):
        self.token = token
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(timeout=REQUEST_TIMEOUT, headers=self._headers())

    def _headers(self) -> dict[str, str]:
        headers = {
            "User-Agent": f"repoprobe/{__version__}",
            "Accept": "application/vnd.github+json",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _get_json(self, path: str, params: dict[str, Any] | None = None) -> Any | None:
        """GET and decode JSON; None on a non-200 response or an undecodable body."""
        resp = self._client.get(f"{self.base_url}{path}", params=params)
        if resp.status_code != 200:
            logger.warning("GitHub returned %s for %s", resp.status_code, path)
            return None
        try:
            return resp.json()
        except ValueError:
            logger.warning("GitHub returned a non-JSON body for %s", path)
            return None

    def close(self) -> None:
        self._client.close()

    def get_repository_metadata(self, owner: str, repo: str) -> RepositoryMetadata:
        path = f"/repos/{owner}/{repo}"
        logger.info("Fetching repository metadata from %s%s", self.base_url, path)
        try:
            resp = self._client.get(f"{self.base_url}{path}")
        except httpx.HTTPError as e:
            raise GitHubError(f"Failed to fetch repository {owner}/{repo}: {e}")
        if resp.status_code != 200:
            raise GitHubError(
                f"Failed to fetch repository: {resp.status_code} - {resp.text[:200]}"
            )
        try:
            data = resp.json()
        except ValueError as e:
            raise GitHubError(f"Invalid repository response for {owner}/{repo}: {e}")
        if not isinstance(data, dict):
            raise GitHubError(f"Unexpected repository response for {owner}/{repo}")

        languages = self.get_languages(owner, repo)
        topics = self.get_topics(owner, repo)

        license_data = data.get("license")
        license_info = None
        if isinstance(license_data, dict):
            license_info = GitHubLicense(
                key=license_data.get("key") or "",
                name=license_data.get("name") or "",
                spdx_id=license_data.get("spdx_id"),
                url=license_data.get("url"),
            )

        return RepositoryMetadata(
            id=data.get("id") or 0,
            name=data.get("name") or repo,
            full_name=data.get("full_name") or f"{owner}/{repo}",
            description=data.get("description"),
            homepage=data.get("homepage"),
            html_url=data.get("html_url") or "",
            clone_url=data.get("clone_url") or "",
            owner=_user(data.get("owner")),
            private=bool(data.get("private")),
            fork=bool(data.get("fork")),
            archived=bool(data.get("archived")),
            stargazers_count=data.get("stargazers_count") or 0,
            watchers_count=data.get("watchers_count") or 0,
            forks_count=data.get("forks_count") or 0,
            open_issues_count=data.get("open_issues_count") or 0,
            license=license_info,
            topics=topics,
            default_branch=data.get("default_branch") or "main",
            size=data.get("size") or 0,
            language=data.get("language"),
            languages=languages,
            created_at=_parse_datetime(data.get("created_at")),
            updated_at=_parse_datetime(data.get("updated_at")),
            pushed_at=_parse_datetime(data.get("pushed_at")),
        )

    def get_languages(self, owner: str, repo: str) -> dict[str, int]:
        try:
            data = self._get_json(f"/repos/{owner}/{repo}/languages")
        except httpx.HTTPError as e:
            logger.warning("Could not fetch languages: %s", e)
            return {}
        return data if isinstance(data, dict) else {}

    def get_topics(self, owner: str, repo: str) -> list[str]:
        try:
            data = self._get_json(f"/repos/{owner}/{repo}/topics")
        except httpx.HTTPError as e:
            logger.warning("Could not fetch topics: %s", e)
            return []
        if not isinstance(data, dict):
            return []
        return [t for t in data.get("names", []) if isinstance(t, str)]

    def get_contributors(self, owner: str, repo: str) -> list[GitHubUser]:
        try:
            data = self._get_json(f"/repos/{owner}/{repo}/contributors")
        except httpx.HTTPError as e:
            logger.warning("Could not fetch contributors: %s", e)
            return []
        if not isinstance(data, list):
            return []
        return [_user(c) for c in data]

    def get_releases(self, owner: str, repo: str, limit: int = 10) -> list[GitHubRelease]:
        try:
            data = self._get_json(f"/repos/{owner}/{repo}/releases", {"per_page": limit})
        except httpx.HTTPError as e:
            logger.warning("Could not fetch releases: %s", e)
            return []
        if not isinstance(data, list):
            return []
        return [
            GitHubRelease(
                tag_name=r.get("tag_name") or "",
                name=r.get("name"),
                body=r.get("body"),
                draft=bool(r.get("draft")),
                prerelease=bool(r.get("prerelease")),
                created_at=_parse_datetime(r.get("created_at")),
                published_at=_parse_datetime(r.get("published_at")),
                author=_user(r.get("author")),
                assets_count=len(r.get("assets") or []),
            )
            for r in data
        ]

    def get_recent_issues(self, owner: str, repo: str, limit: int = 20) -> list[GitHubIssue]:
        params = {"state": "all", "per_page": limit, "sort": "updated"}
        try:
            data = self._get_json(f"/repos/{owner}/{repo}/issues", params)
        except httpx.HTTPError as e:
            logger.warning("Could not fetch issues: %s", e)
            return []
        if not isinstance(data, list):
            return []
        return [
            GitHubIssue(
                number=i.get("number") or 0,
                title=i.get("title") or "",
                state=i.get("state") or "",
                created_at=_parse_datetime(i.get("created_at")),
                updated_at=_parse_datetime(i.get("updated_at")),
                closed_at=_parse_datetime(i.get("closed_at")),
                author=_user(i.get("user")),
                labels=[l["name"] for l in i.get("labels", []) if isinstance(l, dict) and "name" in l],
                comments=i.get("comments") or 0,
            )
            for i in data
            # The issues endpoint also lists pull requests
            if i.get("pull_request") is None
        ]
