"""Recursive directory walk producing the DirectoryRecord tree."""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Collection, Iterable

import pathspec

from .classifier import FileClassifier
from .config import IGNORE_EXEMPT_NAMES, AnalyzerConfig
from .errors import RepositoryNotFoundError
from .logging import get_logger
from .models import DirectoryRecord, FileRecord

logger = get_logger("walker")


def matches_ignore_pattern(
    name: str, patterns: Iterable[str], exempt: Collection[str] = IGNORE_EXEMPT_NAMES
) -> bool:
    """Check a bare file or directory name against the fixed ignore list.

    "build" skips "build", "build.gradle" and "builder.rs" alike; "*.log"
    matches by suffix. Names in `exempt` are never skipped.
    """
    if name in exempt:
        return False
    for pattern in patterns:
        if pattern.startswith("*"):
            suffix = pattern[1:]
            if suffix and name.endswith(suffix):
                return True
            continue
        prefix = pattern.rstrip("*")
        if prefix and name.startswith(prefix):
            return True
    return False


@dataclass(frozen=True)
class _IgnoreRules:
    """Patterns from one ignore file, scoped to the directory holding it."""

    base: str  # relative POSIX dir, "." for the root
    spec: pathspec.PathSpec

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if self.base != ".":
            if not rel_path.startswith(self.base + "/"):
                return False
            rel_path = rel_path[len(self.base) + 1:]
        return self.spec.match_file(rel_path + "/" if is_dir else rel_path)


def _load_rules(path: Path, base: str) -> list[_IgnoreRules]:
    if not path.is_file():
        return []
    try:
        lines = path.read_text(encoding="utf-8", errors="ignore").splitlines()
    except OSError as exc:
        logger.warning("Could not read ignore file %s: %s", path, exc)
        return []
    spec = pathspec.GitIgnoreSpec.from_lines(lines)
    return [_IgnoreRules(base, spec)] if spec.patterns else []


class TreeWalker:
    """Walks a repository one directory level per recursive call."""

    def __init__(self, config: AnalyzerConfig | None = None, classifier: FileClassifier | None = None):
        self.config = config or AnalyzerConfig()
        self.classifier = classifier or FileClassifier(self.config)

    def walk(self, root: str | Path) -> DirectoryRecord:
        root = Path(root).resolve()
        if not root.is_dir():
            raise RepositoryNotFoundError(f"Not a directory: {root}")

        logger.info("Analyzing directory structure: %s", root)
        rules: list[_IgnoreRules] = []
        if self.config.honor_gitignore:
            rules = _load_rules(root / ".git" / "info" / "exclude", ".")

        try:
            return self._walk_dir(root, root, rules)
        except OSError as exc:
            raise RepositoryNotFoundError(f"Cannot read directory {root}: {exc}") from exc

    def _walk_dir(self, root: Path, current: Path, inherited: list[_IgnoreRules]) -> DirectoryRecord:
        rel_dir = "." if current == root else current.relative_to(root).as_posix()
        rules = inherited
        if self.config.honor_gitignore:
            rules = inherited + _load_rules(current / ".gitignore", rel_dir)

        with os.scandir(current) as it:
            entries = list(it)

        record = DirectoryRecord(path=rel_dir, name=current.name)
        pending_files: list[tuple[os.DirEntry, str]] = []

        for entry in entries:
            if matches_ignore_pattern(entry.name, self.config.ignore_patterns, self.config.ignore_exempt):
                continue
            rel = entry.name if rel_dir == "." else f"{rel_dir}/{entry.name}"
            try:
                is_dir = entry.is_dir(follow_symlinks=False)
                is_file = not is_dir and entry.is_file()
            except OSError as exc:
                logger.warning("Failed to stat %s: %s", entry.path, exc)
                continue
            if any(rule.matches(rel, is_dir) for rule in rules):
                continue

            if is_file:
                pending_files.append((entry, rel))
            elif is_dir:
                try:
                    child = self._walk_dir(root, Path(entry.path), rules)
                except OSError as exc:
                    logger.warning("Failed to analyze directory %s: %s", entry.path, exc)
                    continue
                record.subdirectories.append(child)
                record.subdirectory_count += 1
                record.total_size += child.total_size

        for file_record in self._classify_all(pending_files):
            if file_record is None:
                continue
            record.files.append(file_record)
            record.file_count += 1
            record.total_size += file_record.size

        return record

    def _classify_all(self, pending: list[tuple[os.DirEntry, str]]) -> list[FileRecord | None]:
        if self.config.max_workers > 1 and len(pending) > 1:
            # map() yields in submission order, so the tree stays deterministic
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as pool:
                return list(pool.map(lambda item: self._classify_one(*item), pending))
        return [self._classify_one(entry, rel) for entry, rel in pending]

    def _classify_one(self, entry: os.DirEntry, rel: str) -> FileRecord | None:
        try:
            size = entry.stat().st_size
            return self.classifier.classify(entry.path, rel, size)
        except OSError as exc:
            logger.warning("Failed to analyze file %s: %s", entry.path, exc)
            return None
