"""Analysis orchestrator.

Runs the pipeline for one repository: history, tree walk, metrics,
manifests, documentation, project detection and security heuristics, then
folds everything into a RepositoryAnalysis with a plain-text summary.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

import yaml

from .config import AnalyzerConfig
from .detector import ProjectTypeDetector
from .errors import GitHistoryError, RepositoryNotFoundError
from .github import GitHubClient, parse_github_url
from .history import GitHistoryAnalyzer, GitManager
from .logging import get_logger
from .manifests import ManifestScanner
from .metrics import calculate_metrics
from .models import (
    CodeMetrics,
    GitAnalysis,
    GitHubIssue,
    GitHubRelease,
    GitHubUser,
    ProjectInfo,
    RepositoryAnalysis,
    RepositoryMetadata,
)
from .security import SecurityScanner
from .walker import TreeWalker

logger = get_logger("analyzer")


class RepositoryAnalyzer:
    """Composes the pipeline stages over a GitHub repository or a local checkout."""

    def __init__(
        self,
        github_token: str | None = None,
        work_dir: str | Path | None = None,
        config: AnalyzerConfig | None = None,
        github_client: GitHubClient | None = None,
    ):
        self.config = config or AnalyzerConfig()
        self.github_token = github_token
        self.work_dir = work_dir
        self._github = github_client
        self.walker = TreeWalker(self.config)
        self.manifests = ManifestScanner(self.config)
        self.detector = ProjectTypeDetector()
        self.security = SecurityScanner()
        self.history = GitHistoryAnalyzer(self.config)

    @property
    def github(self) -> GitHubClient:
        if self._github is None:
            self._github = GitHubClient(token=self.github_token)
        return self._github

    def close(self) -> None:
        if self._github is not None:
            self._github.close()

    def analyze_repository(self, url: str) -> RepositoryAnalysis:
        """Fetch GitHub data for `url`, clone it and analyze the checkout.

        Metadata and clone failures are fatal. Contributors, releases and
        issues degrade to empty lists.
        """
        owner, repo = parse_github_url(url)
        logger.info("Analyzing GitHub repository %s/%s", owner, repo)

        metadata = self.github.get_repository_metadata(owner, repo)
        contributors = self.github.get_contributors(owner, repo)
        releases = self.github.get_releases(owner, repo, self.config.release_limit)
        issues = self.github.get_recent_issues(owner, repo, self.config.issue_limit)

        clone_url = metadata.clone_url or f"https://github.com/{owner}/{repo}.git"
        repo_path = GitManager(self.work_dir).clone_or_update_repository(clone_url, metadata.name)

        return self._run(
            repo_path,
            url=url,
            metadata=metadata,
            contributors=contributors,
            releases=releases,
            recent_issues=issues,
            history_required=True,
        )

    def analyze_path(
        self,
        path: str | Path,
        url: str | None = None,
        metadata: RepositoryMetadata | None = None,
        contributors: list[GitHubUser] | None = None,
        releases: list[GitHubRelease] | None = None,
        recent_issues: list[GitHubIssue] | None = None,
    ) -> RepositoryAnalysis:
        """Analyze a local directory. A directory without git history is still analyzed."""
        return self._run(
            Path(path),
            url=url,
            metadata=metadata,
            contributors=contributors,
            releases=releases,
            recent_issues=recent_issues,
            history_required=False,
        )

    def _run(
        self,
        path: Path,
        *,
        url: str | None,
        metadata: RepositoryMetadata | None,
        contributors: list[GitHubUser] | None,
        releases: list[GitHubRelease] | None,
        recent_issues: list[GitHubIssue] | None,
        history_required: bool,
    ) -> RepositoryAnalysis:
        path = path.expanduser().resolve()
        if not path.is_dir():
            raise RepositoryNotFoundError(f"Not a directory: {path}")
        if metadata is None:
            metadata = local_metadata(path)

        logger.info("Analyzing git history")
        try:
            git_analysis = self.history.analyze_git_history(path)
        except GitHistoryError as exc:
            if history_required:
                raise
            logger.warning("Skipping git history: %s", exc)
            git_analysis = GitAnalysis()
        if contributors:
            git_analysis.contributors = list(contributors)

        logger.info("Walking file structure")
        tree = self.walker.walk(path)

        logger.info("Calculating code metrics")
        metrics = calculate_metrics(tree, self.config.ranking_limit)

        logger.info("Scanning manifests and documentation")
        config_files = self.manifests.find_config_files(path)
        documentation = self.manifests.find_documentation_files(path)

        project_info = self.detector.detect_project_info(config_files, tree)
        security_info = self.security.analyze_security(tree, config_files)

        summary = generate_analysis_summary(
            metadata, metrics, project_info, git_analysis,
            threshold=self.config.language_share_threshold,
        )

        logger.info("Analysis complete: %d files, %d lines of code", metrics.total_files, metrics.total_loc)
        return RepositoryAnalysis(
            url=url or path.as_uri(),
            analyzed_at=datetime.now(timezone.utc),
            metadata=metadata,
            file_structure=tree,
            code_metrics=metrics,
            git_analysis=git_analysis,
            project_info=project_info,
            config_files=config_files,
            documentation=documentation,
            security_info=security_info,
            releases=list(releases or []),
            recent_issues=list(recent_issues or []),
            analysis_summary=summary,
        )


def local_metadata(path: Path) -> RepositoryMetadata:
    """Stand-in metadata for a checkout with no GitHub record."""
    return RepositoryMetadata(name=path.name, full_name=path.name, html_url=path.as_uri())


def generate_analysis_summary(
    metadata: RepositoryMetadata,
    metrics: CodeMetrics,
    project_info: ProjectInfo,
    git_analysis: GitAnalysis,
    threshold: float = 5.0,
) -> str:
    lines = [f"Repository: {metadata.full_name}"]
    if metadata.description:
        lines.append(f"Description: {metadata.description}")
    lines.append(
        f"Stars: {metadata.stargazers_count}, Forks: {metadata.forks_count}, "
        f"Open Issues: {metadata.open_issues_count}"
    )
    if project_info.primary_language:
        lines.append(f"Primary Language: {project_info.primary_language}")
    lines.append(
        f"Total Files: {metrics.total_files}, Lines of Code: {metrics.total_loc}, "
        f"Size: {metrics.total_size // 1024} KB"
    )
    lines.append(
        f"Contributors: {len(git_analysis.contributors)}, "
        f"Total Commits: {git_analysis.total_commits}"
    )
    if project_info.frameworks:
        lines.append(f"Frameworks: {', '.join(project_info.frameworks)}")
    if project_info.project_type:
        lines.append(f"Project Types: {', '.join(project_info.project_type)}")

    top = sorted(
        (s for s in metrics.language_stats.values() if s.percentage > threshold),
        key=lambda s: s.percentage,
        reverse=True,
    )
    if top:
        lines.append("Languages: " + ", ".join(f"{s.language} ({s.percentage:.1f}%)" for s in top))
    return "\n".join(lines)


def export_analysis_json(analysis: RepositoryAnalysis) -> str:
    return json.dumps(analysis.to_dict(), indent=2)


def export_analysis_yaml(analysis: RepositoryAnalysis) -> str:
    return yaml.safe_dump(analysis.to_dict(), sort_keys=False, allow_unicode=True)
