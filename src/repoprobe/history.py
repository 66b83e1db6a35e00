"""Git clone management and bounded commit-history analysis."""

from __future__ import annotations

import shutil
from collections import Counter
from datetime import datetime, timezone
from pathlib import Path

import git

from .config import AnalyzerConfig, default_work_dir
from .errors import CloneError, GitHistoryError
from .logging import get_logger
from .models import CommitRecord, GitAnalysis, GitHubUser

logger = get_logger("history")


class GitManager:
    """Clones repositories into a scratch work directory."""

    def __init__(self, work_dir: str | Path | None = None):
        self.work_dir = Path(work_dir) if work_dir else default_work_dir()
        try:
            self.work_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            logger.warning("Failed to create work directory %s: %s", self.work_dir, exc)

    def clone_or_update_repository(self, clone_url: str, repo_name: str) -> Path:
        """Fresh clone of `clone_url` into <work_dir>/<repo_name>, replacing any old checkout."""
        repo_path = self.work_dir / repo_name
        if repo_path.exists():
            logger.info("Removing existing repository directory: %s", repo_path)
            shutil.rmtree(repo_path)

        logger.info("Cloning repository from %s to %s", clone_url, repo_path)
        try:
            git.Repo.clone_from(clone_url, repo_path)
        except git.GitCommandError as exc:
            raise CloneError(f"Failed to clone repository: {exc}") from exc
        logger.info("Successfully cloned repository to %s", repo_path)
        return repo_path


class GitHistoryAnalyzer:
    """Walks at most `max_commits` commits reachable from HEAD, newest first.

    The caps bound cost on large repositories; results describe the visited
    window only, not the full history. Contributors are keyed by
    "name:email", so one person with two identities shows up twice.
    """

    def __init__(self, config: AnalyzerConfig | None = None):
        self.config = config or AnalyzerConfig()

    def analyze_git_history(self, repo_path: str | Path) -> GitAnalysis:
        try:
            repo = git.Repo(repo_path)
        except (git.InvalidGitRepositoryError, git.NoSuchPathError) as exc:
            raise GitHistoryError(f"Cannot open git repository at {repo_path}: {exc}") from exc

        with repo:
            try:
                return self._analyze(repo)
            except (git.GitCommandError, ValueError) as exc:
                raise GitHistoryError(f"Failed to read history of {repo_path}: {exc}") from exc

    def _analyze(self, repo: git.Repo) -> GitAnalysis:
        analysis = GitAnalysis()

        if not repo.head.is_valid():
            logger.warning("Repository at %s has no commits", repo.working_dir)
            analysis.branch_count = len(repo.branches)
            analysis.tag_count = len(repo.tags)
            return analysis

        contributors: dict[str, GitHubUser] = {}
        touches: Counter[str] = Counter()

        commits = repo.iter_commits("HEAD", max_count=self.config.max_commits, date_order=True)
        for commit in commits:
            analysis.total_commits += 1
            when = datetime.fromtimestamp(commit.committed_date, tz=timezone.utc)

            # Traversal order is kept: "first" is the newest commit visited.
            if analysis.first_commit_date is None:
                analysis.first_commit_date = when
            analysis.last_commit_date = when

            month = when.strftime("%Y-%m")
            analysis.commit_frequency[month] = analysis.commit_frequency.get(month, 0) + 1

            author = commit.author
            if author.name is not None and author.email is not None:
                key = f"{author.name}:{author.email}"
                user = contributors.get(key)
                if user is None:
                    user = contributors[key] = GitHubUser(login=author.name, contributions=0)
                user.contributions += 1

            if len(analysis.recent_commits) < self.config.max_recent_commits:
                analysis.recent_commits.append(CommitRecord(
                    sha=commit.hexsha,
                    message=str(commit.message),
                    author=GitHubUser(login=author.name or "Unknown"),
                    date=when,
                ))

            self._count_tree_entries(commit, touches)

        analysis.contributors = list(contributors.values())
        analysis.most_active_files = sorted(
            touches.items(), key=lambda item: item[1], reverse=True
        )[: self.config.top_active_files]
        analysis.branch_count = len(repo.branches)
        analysis.tag_count = len(repo.tags)

        logger.info(
            "Analyzed %d commits from %d contributors",
            analysis.total_commits, len(analysis.contributors),
        )
        return analysis

    def _count_tree_entries(self, commit: git.Commit, touches: Counter[str]) -> None:
        """Pre-order walk of the commit's tree, stopping after max_tree_entries + 1 entries."""
        visited = 0
        for item in commit.tree.traverse(branch_first=False):
            touches[item.path] += 1
            visited += 1
            if visited > self.config.max_tree_entries:
                break
