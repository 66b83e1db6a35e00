"""Shared fixtures: small on-disk repositories."""

import git
import pytest


def commit_files(repo: git.Repo, files: dict[str, str], message: str) -> git.Commit:
    actor = git.Actor("Ada Lovelace", "ada@example.com")
    root = repo.working_tree_dir
    for name, text in files.items():
        path = f"{root}/{name}"
        with open(path, "w", encoding="utf-8") as f:
            f.write(text)
    repo.index.add(list(files))
    return repo.index.commit(message, author=actor, committer=actor)


@pytest.fixture
def sample_repo(tmp_path):
    """A small mixed-language project, not under version control."""
    root = tmp_path / "sample"
    root.mkdir()
    (root / "README.md").write_text(
        "# Sample\n[![CI](https://example.com/badge.svg)](https://example.com)\n\n"
        "## Install\npip install sample\n"
    )
    (root / "requirements.txt").write_text("flask==2.0.1\nrequests\n")
    (root / "package.json").write_text(
        '{"dependencies":{"react":"^18.0.0"},"devDependencies":{"jest":"^29.0.0"},'
        '"scripts":{"test":"jest"}}'
    )

    src = root / "src"
    src.mkdir()
    (src / "main.rs").write_text("// comment\nfn main() {}\n\n")
    (src / "app.py").write_text('"""App module."""\n\nimport os\n# setup\nprint(os.name)\n')
    (src / "index.js").write_text("/* header\n   more */\nconsole.log(1);\n")

    tests = root / "tests"
    tests.mkdir()
    (tests / "test_app.py").write_text("def test_ok():\n    assert True\n")

    workflows = root / ".github" / "workflows"
    workflows.mkdir(parents=True)
    (workflows / "codeql.yml").write_text("name: CodeQL\n")

    (root / "node_modules").mkdir()
    (root / "node_modules" / "dep.js").write_text("module.exports = 1;\n")
    (root / "debug.log").write_text("noise\n")
    return root


@pytest.fixture
def git_repo(tmp_path):
    """A git repository with three commits by one author."""
    root = tmp_path / "history"
    root.mkdir()
    repo = git.Repo.init(root)
    commit_files(repo, {"a.txt": "one\n"}, "Add a")
    commit_files(repo, {"b.txt": "two\n"}, "Add b")
    commit_files(repo, {"c.py": "print('three')\n"}, "Add c")
    repo.close()
    return root
