"""Fatal error types for an analysis run.

Per-file and per-manifest problems are logged and skipped where they happen;
only the failures below abort a run.
"""

from __future__ import annotations


class AnalysisError(Exception):
    """Base class for errors that abort a whole analysis."""


class RepositoryNotFoundError(AnalysisError):
    """The repository root is missing or is not a readable directory."""


class GitHistoryError(AnalysisError):
    """The git repository could not be opened."""


class CloneError(AnalysisError):
    """Cloning the remote repository failed."""


class GitHubError(AnalysisError):
    """The GitHub API did not return repository metadata."""
