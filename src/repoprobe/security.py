"""Lexical security heuristics. No vulnerability database is consulted."""

from __future__ import annotations

from .models import ConfigFile, DirectoryRecord, SecurityInfo

SECURITY_POLICY_FILES = {"security.md", "security.txt", ".security"}
UNPINNED_MARKERS = ("*", "latest")


class SecurityScanner:

    def analyze_security(self, tree: DirectoryRecord, config_files: list[ConfigFile]) -> SecurityInfo:
        info = SecurityInfo()
        info.has_security_policy = any(
            f.name.lower() in SECURITY_POLICY_FILES for f in tree.iter_files()
        )
        info.has_dependabot = self.has_workflow_file(tree, "dependabot")
        info.has_codeql = self.has_workflow_file(tree, "codeql")

        for config in config_files:
            for name, version in (config.parsed_dependencies or {}).items():
                if any(marker in version for marker in UNPINNED_MARKERS):
                    info.outdated_dependencies.append(f"{name}: {version}")
        return info

    @staticmethod
    def has_workflow_file(tree: DirectoryRecord, keyword: str) -> bool:
        """True if .github/workflows at the repository root holds a file named like `keyword`."""
        github_dir = tree.find_subdirectory(".github")
        if github_dir is None:
            return False
        workflows = github_dir.find_subdirectory("workflows")
        if workflows is None:
            return False
        return any(keyword in f.name.lower() for f in workflows.files)
