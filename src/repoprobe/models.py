"""Records produced by the analysis pipeline.

The directory tree is a plain recursive value: each DirectoryRecord owns its
files and child directories, nothing points back up.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import PurePath
from typing import Any, Iterator


def _plain(value: Any) -> Any:
    """Convert a value tree into JSON/YAML-safe primitives."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: _plain(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, dict):
        return {str(_plain(k)): _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_plain(v) for v in value]
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, PurePath):
        return value.as_posix()
    return value


class _Serializable:
    def to_dict(self) -> dict[str, Any]:
        return _plain(self)


# --- Filesystem ---


@dataclass(frozen=True)
class FileRecord(_Serializable):
    """One classified file. Counts are None unless the file was read as text."""

    path: str
    name: str
    extension: str | None
    size: int
    hash: str
    is_binary: bool
    is_text: bool
    lines_of_code: int | None = None
    blank_lines: int | None = None
    comment_lines: int | None = None
    language: str | None = None
    mime_type: str | None = None
    encoding: str | None = None
    content_preview: str | None = None

    @property
    def total_lines(self) -> int:
        return (self.lines_of_code or 0) + (self.blank_lines or 0) + (self.comment_lines or 0)


@dataclass
class DirectoryRecord(_Serializable):
    path: str
    name: str
    file_count: int = 0
    subdirectory_count: int = 0
    total_size: int = 0
    files: list[FileRecord] = field(default_factory=list)
    subdirectories: list[DirectoryRecord] = field(default_factory=list)

    def iter_files(self) -> Iterator[FileRecord]:
        """Pre-order: this level's files, then each subdirectory in turn."""
        yield from self.files
        for sub in self.subdirectories:
            yield from sub.iter_files()

    def find_subdirectory(self, name: str) -> DirectoryRecord | None:
        for sub in self.subdirectories:
            if sub.name == name:
                return sub
        return None


# --- Metrics ---


@dataclass
class LanguageStat(_Serializable):
    language: str
    file_count: int = 0
    lines_of_code: int = 0
    blank_lines: int = 0
    comment_lines: int = 0
    total_bytes: int = 0
    percentage: float = 0.0


@dataclass
class CodeMetrics(_Serializable):
    total_files: int = 0
    total_lines: int = 0
    total_loc: int = 0
    total_blank_lines: int = 0
    total_comment_lines: int = 0
    total_size: int = 0
    language_stats: dict[str, LanguageStat] = field(default_factory=dict)
    average_file_size: float = 0.0
    largest_files: list[FileRecord] = field(default_factory=list)
    most_complex_files: list[FileRecord] = field(default_factory=list)


# --- Manifests & docs ---


@dataclass
class ConfigFile(_Serializable):
    path: str
    file_type: str  # ecosystem tag: "npm", "cargo", "pip", ...
    content: str
    parsed_dependencies: dict[str, str] | None = None
    scripts: dict[str, str] | None = None


@dataclass
class DocumentationFile(_Serializable):
    path: str
    file_type: str
    content: str
    word_count: int = 0
    has_badges: bool = False
    has_toc: bool = False
    sections: list[str] = field(default_factory=list)


@dataclass
class ProjectInfo(_Serializable):
    primary_language: str | None = None
    project_type: list[str] = field(default_factory=list)
    frameworks: list[str] = field(default_factory=list)
    build_tools: list[str] = field(default_factory=list)
    package_managers: list[str] = field(default_factory=list)
    testing_frameworks: list[str] = field(default_factory=list)
    ci_cd_tools: list[str] = field(default_factory=list)
    deployment_configs: list[str] = field(default_factory=list)


@dataclass
class SecurityInfo(_Serializable):
    has_security_policy: bool = False
    has_dependabot: bool = False
    has_codeql: bool = False
    outdated_dependencies: list[str] = field(default_factory=list)


# --- People, commits, GitHub data ---


@dataclass
class GitHubUser(_Serializable):
    login: str
    id: int = 0
    avatar_url: str = ""
    html_url: str = ""
    contributions: int | None = None


@dataclass
class CommitRecord(_Serializable):
    sha: str
    message: str
    author: GitHubUser
    date: datetime
    # Diff stats are not computed by the bounded history walk.
    additions: int = 0
    deletions: int = 0
    files_changed: int = 0


@dataclass
class GitAnalysis(_Serializable):
    total_commits: int = 0
    contributors: list[GitHubUser] = field(default_factory=list)
    recent_commits: list[CommitRecord] = field(default_factory=list)
    commit_frequency: dict[str, int] = field(default_factory=dict)  # "YYYY-MM" -> commits
    most_active_files: list[tuple[str, int]] = field(default_factory=list)
    branch_count: int = 0
    tag_count: int = 0
    first_commit_date: datetime | None = None
    last_commit_date: datetime | None = None


@dataclass
class GitHubLicense(_Serializable):
    key: str
    name: str
    spdx_id: str | None = None
    url: str | None = None


@dataclass
class RepositoryMetadata(_Serializable):
    name: str
    full_name: str
    id: int = 0
    description: str | None = None
    homepage: str | None = None
    html_url: str = ""
    clone_url: str = ""
    owner: GitHubUser | None = None
    private: bool = False
    fork: bool = False
    archived: bool = False
    stargazers_count: int = 0
    watchers_count: int = 0
    forks_count: int = 0
    open_issues_count: int = 0
    license: GitHubLicense | None = None
    topics: list[str] = field(default_factory=list)
    default_branch: str = "main"
    size: int = 0  # KB, as reported by GitHub
    language: str | None = None
    languages: dict[str, int] = field(default_factory=dict)
    created_at: datetime | None = None
    updated_at: datetime | None = None
    pushed_at: datetime | None = None


@dataclass
class GitHubRelease(_Serializable):
    tag_name: str
    author: GitHubUser
    name: str | None = None
    body: str | None = None
    draft: bool = False
    prerelease: bool = False
    created_at: datetime | None = None
    published_at: datetime | None = None
    assets_count: int = 0


@dataclass
class GitHubIssue(_Serializable):
    number: int
    title: str
    state: str
    author: GitHubUser
    created_at: datetime | None = None
    updated_at: datetime | None = None
    closed_at: datetime | None = None
    labels: list[str] = field(default_factory=list)
    comments: int = 0


# --- Aggregate ---


@dataclass
class RepositoryAnalysis(_Serializable):
    """Everything known about one repository after a single analysis run."""

    url: str
    analyzed_at: datetime
    metadata: RepositoryMetadata
    file_structure: DirectoryRecord
    code_metrics: CodeMetrics
    git_analysis: GitAnalysis
    project_info: ProjectInfo
    config_files: list[ConfigFile] = field(default_factory=list)
    documentation: list[DocumentationFile] = field(default_factory=list)
    security_info: SecurityInfo = field(default_factory=SecurityInfo)
    releases: list[GitHubRelease] = field(default_factory=list)
    recent_issues: list[GitHubIssue] = field(default_factory=list)
    analysis_summary: str = ""
    ai_insights: str | None = None
