"""Tests for the directory walker."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from repoprobe.classifier import FileClassifier
from repoprobe.config import AnalyzerConfig
from repoprobe.errors import RepositoryNotFoundError
from repoprobe.security import SecurityScanner
from repoprobe.walker import TreeWalker, matches_ignore_pattern


def _check_rollup(record):
    expected = sum(f.size for f in record.files) + sum(d.total_size for d in record.subdirectories)
    assert record.total_size == expected
    assert record.file_count == len(record.files)
    assert record.subdirectory_count == len(record.subdirectories)
    for sub in record.subdirectories:
        _check_rollup(sub)


def _paths(record):
    return {f.path for f in record.iter_files()}


class TestIgnorePatterns:

    @pytest.mark.parametrize("name", [
        ".git", "node_modules", "app.log", "x.tmp", "__pycache__",
        "builder.rs", "distance.py", "targets.md", ".env.example", "venv_setup.py", "build.gradle",
    ])
    def test_ignored(self, name):
        assert matches_ignore_pattern(name, AnalyzerConfig().ignore_patterns)

    @pytest.mark.parametrize("name", [".github", ".gitignore", ".gitattributes", "logs", "src", "README.md"])
    def test_not_ignored(self, name):
        assert not matches_ignore_pattern(name, AnalyzerConfig().ignore_patterns)

    def test_prefix_pattern(self):
        assert matches_ignore_pattern("tmp-cache", ["tmp*"])
        assert not matches_ignore_pattern("mytmp", ["tmp*"])

    def test_exempt_names_are_configurable(self):
        assert matches_ignore_pattern(".github", [".git"], exempt=())
        assert not matches_ignore_pattern(".gitmodules", [".git"], exempt={".gitmodules"})


class TestTreeWalker:

    def test_structure_and_rollup(self, sample_repo):
        tree = TreeWalker().walk(sample_repo)
        assert tree.path == "."
        assert tree.name == "sample"
        _check_rollup(tree)

        paths = _paths(tree)
        assert "src/main.rs" in paths
        assert "tests/test_app.py" in paths
        assert ".github/workflows/codeql.yml" in paths

    def test_fixed_ignore_list(self, sample_repo):
        tree = TreeWalker().walk(sample_repo)
        assert tree.find_subdirectory("node_modules") is None
        assert "debug.log" not in _paths(tree)

    def test_github_directory_kept(self, sample_repo):
        tree = TreeWalker().walk(sample_repo)
        github = tree.find_subdirectory(".github")
        assert github is not None
        assert github.find_subdirectory("workflows").file_count == 1

    def test_gitignore_honored(self, tmp_path):
        (tmp_path / ".gitignore").write_text("secret.txt\ngenerated/\n")
        (tmp_path / "secret.txt").write_text("hidden\n")
        (tmp_path / "keep.txt").write_text("visible\n")
        (tmp_path / "generated").mkdir()
        (tmp_path / "generated" / "out.c").write_text("int x;\n")
        sub = tmp_path / "pkg"
        sub.mkdir()
        (sub / ".gitignore").write_text("*.bak\n")
        (sub / "mod.py").write_text("x = 1\n")
        (sub / "mod.py.bak").write_text("x = 0\n")

        paths = _paths(TreeWalker().walk(tmp_path))
        assert "keep.txt" in paths
        assert "secret.txt" not in paths
        assert "generated/out.c" not in paths
        assert "pkg/mod.py" in paths
        assert "pkg/mod.py.bak" not in paths

    def test_gitignore_can_be_disabled(self, tmp_path):
        (tmp_path / ".gitignore").write_text("secret.txt\n")
        (tmp_path / "secret.txt").write_text("hidden\n")
        walker = TreeWalker(AnalyzerConfig(honor_gitignore=False))
        assert "secret.txt" in _paths(walker.walk(tmp_path))

    def test_thread_pool_matches_sequential(self, sample_repo):
        sequential = TreeWalker().walk(sample_repo)
        pooled = TreeWalker(AnalyzerConfig(max_workers=4)).walk(sample_repo)
        assert sequential.to_dict() == pooled.to_dict()

    def test_missing_root(self, tmp_path):
        with pytest.raises(RepositoryNotFoundError):
            TreeWalker().walk(tmp_path / "does-not-exist")

    def test_root_is_file(self, tmp_path):
        path = tmp_path / "file.txt"
        path.write_text("x")
        with pytest.raises(RepositoryNotFoundError):
            TreeWalker().walk(path)

    def test_empty_directory(self, tmp_path):
        tree = TreeWalker().walk(tmp_path)
        assert tree.file_count == 0
        assert tree.total_size == 0
        assert tree.subdirectories == []

    def test_prefix_matches_dropped_from_walk(self, tmp_path):
        for name in ("builder.rs", "distance.py", "targets.md", ".env.example", "venv_setup.py"):
            (tmp_path / name).write_text("x\n")
        (tmp_path / "main.rs").write_text("fn main() {}\n")
        (tmp_path / ".gitignore").write_text("*.bak\n")
        workflows = tmp_path / ".github" / "workflows"
        workflows.mkdir(parents=True)
        (workflows / "codeql.yml").write_text("name: CodeQL\n")

        tree = TreeWalker().walk(tmp_path)
        assert _paths(tree) == {"main.rs", ".gitignore", ".github/workflows/codeql.yml"}
        assert SecurityScanner().analyze_security(tree, []).has_codeql


class TestPerItemFailures:

    @pytest.fixture
    def repo(self, tmp_path):
        src = tmp_path / "src"
        src.mkdir()
        (src / "good.py").write_text("x = 1\n")
        (src / "broken.py").write_text("y = 2  # this file fails\n")
        (tmp_path / "README.md").write_text("# Title\n")
        locked = tmp_path / "locked"
        locked.mkdir()
        (locked / "inner.txt").write_text("hidden\n")
        return tmp_path

    @pytest.mark.parametrize("workers", [1, 4])
    def test_file_failure_skipped(self, repo, workers):
        real_classify = FileClassifier.classify

        def classify(self, path, relative_path, size=None):
            if relative_path == "src/broken.py":
                raise PermissionError("denied")
            return real_classify(self, path, relative_path, size)

        with patch.object(FileClassifier, "classify", classify):
            tree = TreeWalker(AnalyzerConfig(max_workers=workers)).walk(repo)

        src = tree.find_subdirectory("src")
        assert [f.name for f in src.files] == ["good.py"]
        assert src.file_count == 1
        assert src.total_size == len("x = 1\n")
        assert "README.md" in _paths(tree)
        _check_rollup(tree)

    def test_directory_failure_skipped(self, repo):
        real_scandir = os.scandir

        def scandir(path):
            if Path(path).name == "locked":
                raise PermissionError("denied")
            return real_scandir(path)

        with patch("repoprobe.walker.os.scandir", side_effect=scandir):
            tree = TreeWalker().walk(repo)

        assert tree.find_subdirectory("locked") is None
        assert tree.find_subdirectory("src") is not None
        assert tree.subdirectory_count == 1
        assert "locked/inner.txt" not in _paths(tree)
        assert {"README.md", "src/good.py", "src/broken.py"} <= _paths(tree)
        _check_rollup(tree)
