"""Manifest and documentation discovery.

Finds known manifest files near the top of the tree, tags each with an
ecosystem and pulls declared dependencies and scripts out of the formats we
understand. Everything else is kept verbatim.
"""

from __future__ import annotations

import json
import os
import re
import tomllib
from enum import Enum
from pathlib import Path
from typing import Callable

from .config import AnalyzerConfig
from .logging import get_logger
from .models import ConfigFile, DocumentationFile
from .walker import matches_ignore_pattern

logger = get_logger("manifests")

Parsed = tuple[dict[str, str] | None, dict[str, str] | None]


class Ecosystem(str, Enum):
    NPM = "npm"
    CARGO = "cargo"
    PIP = "pip"
    PIPENV = "pipenv"
    PYTHON = "python"
    MAVEN = "maven"
    GRADLE = "gradle"
    COMPOSER = "composer"
    BUNDLER = "bundler"
    GO = "go"
    DART = "dart"
    LEININGEN = "leiningen"
    MIX = "mix"
    REBAR = "rebar"
    STACK = "stack"
    CABAL = "cabal"
    DUNE = "dune"
    TRAVIS = "travis"
    GITHUB_ACTIONS = "github-actions"
    DOCKER = "docker"
    DOCKER_COMPOSE = "docker-compose"
    KUBERNETES = "kubernetes"
    TERRAFORM = "terraform"
    ANSIBLE = "ansible"
    ESLINT = "eslint"
    PRETTIER = "prettier"
    TYPESCRIPT = "typescript"
    WEBPACK = "webpack"
    VITE = "vite"
    ROLLUP = "rollup"
    JEST = "jest"
    CYPRESS = "cypress"
    ENVIRONMENT = "environment"
    GIT = "git"


# (filename or filename prefix, ecosystem). Entries with a "/" name a directory
# and match every file under it.
MANIFEST_PATTERNS: tuple[tuple[str, Ecosystem], ...] = (
    ("package.json", Ecosystem.NPM),
    ("Cargo.toml", Ecosystem.CARGO),
    ("requirements", Ecosystem.PIP),
    ("Pipfile", Ecosystem.PIPENV),
    ("pyproject.toml", Ecosystem.PYTHON),
    ("pom.xml", Ecosystem.MAVEN),
    ("build.gradle", Ecosystem.GRADLE),
    ("composer.json", Ecosystem.COMPOSER),
    ("Gemfile", Ecosystem.BUNDLER),
    ("go.mod", Ecosystem.GO),
    ("pubspec.yaml", Ecosystem.DART),
    ("project.clj", Ecosystem.LEININGEN),
    ("mix.exs", Ecosystem.MIX),
    ("rebar.config", Ecosystem.REBAR),
    ("stack.yaml", Ecosystem.STACK),
    ("cabal.project", Ecosystem.CABAL),
    ("dune-project", Ecosystem.DUNE),
    (".travis.yml", Ecosystem.TRAVIS),
    (".github/workflows", Ecosystem.GITHUB_ACTIONS),
    ("Dockerfile", Ecosystem.DOCKER),
    ("docker-compose.yml", Ecosystem.DOCKER_COMPOSE),
    ("kubernetes.yaml", Ecosystem.KUBERNETES),
    ("terraform.tf", Ecosystem.TERRAFORM),
    ("ansible.yml", Ecosystem.ANSIBLE),
    (".eslintrc", Ecosystem.ESLINT),
    (".prettierrc", Ecosystem.PRETTIER),
    ("tsconfig.json", Ecosystem.TYPESCRIPT),
    ("webpack.config.js", Ecosystem.WEBPACK),
    ("vite.config.js", Ecosystem.VITE),
    ("rollup.config.js", Ecosystem.ROLLUP),
    ("jest.config.js", Ecosystem.JEST),
    ("cypress.json", Ecosystem.CYPRESS),
    (".env", Ecosystem.ENVIRONMENT),
    (".gitignore", Ecosystem.GIT),
    (".gitattributes", Ecosystem.GIT),
)

DOC_PATTERNS = (
    ("README", "readme"),
    ("CHANGELOG", "changelog"),
    ("CONTRIBUTING", "contributing"),
    ("LICENSE", "license"),
    ("CODE_OF_CONDUCT", "code_of_conduct"),
    ("SECURITY", "security"),
    ("INSTALL", "install"),
    ("USAGE", "usage"),
    ("API", "api"),
)
DOC_SUFFIXES = {"", ".md", ".markdown", ".rst", ".txt", ".adoc"}
DOCS_DIR_SUFFIXES = {".md", ".markdown", ".rst"}

_HEADING_RE = re.compile(r"^#+\s+(.+)$")


# --- Dependency extraction, one function per structured ecosystem ---


def _non_empty(mapping: dict[str, str]) -> dict[str, str] | None:
    return mapping or None


def _split_requirement(spec: str) -> tuple[str, str]:
    """'flask==2.0.1' -> ('flask', '2.0.1'); 'x>=1' -> ('x', '>=1'); else '*'."""
    if "==" in spec:
        name, version = spec.split("==", 1)
        return name.strip(), version.strip()
    if ">=" in spec:
        name, version = spec.split(">=", 1)
        return name.strip(), f">={version.strip()}"
    return spec.strip(), "*"


def parse_package_json(content: str) -> Parsed:
    try:
        pkg = json.loads(content)
    except (json.JSONDecodeError, ValueError):
        return None, None
    if not isinstance(pkg, dict):
        return None, None

    deps: dict[str, str] = {}
    for key, suffix in (("dependencies", ""), ("devDependencies", " (dev)")):
        section = pkg.get(key)
        if isinstance(section, dict):
            for name, version in section.items():
                if isinstance(version, str):
                    deps[f"{name}{suffix}"] = version

    scripts: dict[str, str] = {}
    section = pkg.get("scripts")
    if isinstance(section, dict):
        scripts = {name: cmd for name, cmd in section.items() if isinstance(cmd, str)}

    return _non_empty(deps), _non_empty(scripts)


def parse_cargo_toml(content: str) -> Parsed:
    try:
        manifest = tomllib.loads(content)
    except tomllib.TOMLDecodeError:
        return None, None

    deps: dict[str, str] = {}
    section = manifest.get("dependencies")
    if isinstance(section, dict):
        for name, dep in section.items():
            if isinstance(dep, str):
                deps[name] = dep
            elif isinstance(dep, dict) and isinstance(dep.get("version"), str):
                deps[name] = dep["version"]
            else:
                deps[name] = "*"
    return _non_empty(deps), None


def parse_requirements_txt(content: str) -> Parsed:
    deps: dict[str, str] = {}
    for line in content.splitlines():
        line = line.strip()
        # "-r base.txt", "--index-url ..." are pip options, not requirements
        if not line or line.startswith("#") or line.startswith("-"):
            continue
        name, version = _split_requirement(line)
        deps[name] = version
    return _non_empty(deps), None


def parse_pyproject_toml(content: str) -> Parsed:
    try:
        manifest = tomllib.loads(content)
    except tomllib.TOMLDecodeError:
        return None, None

    deps: dict[str, str] = {}
    project = manifest.get("project")
    if isinstance(project, dict) and isinstance(project.get("dependencies"), list):
        for requirement in project["dependencies"]:
            if isinstance(requirement, str):
                name, version = _split_requirement(requirement)
                deps[name] = version
    return _non_empty(deps), None


PARSERS: dict[Ecosystem, Callable[[str], Parsed]] = {
    Ecosystem.NPM: parse_package_json,
    Ecosystem.CARGO: parse_cargo_toml,
    Ecosystem.PIP: parse_requirements_txt,
    Ecosystem.PYTHON: parse_pyproject_toml,
}


def parse_config_content(content: str, ecosystem: Ecosystem) -> Parsed:
    """Extract (dependencies, scripts). Unknown ecosystems and bad content give (None, None)."""
    parser = PARSERS.get(ecosystem)
    if parser is None:
        return None, None
    try:
        return parser(content)
    except Exception as exc:  # a single bad manifest must not stop the scan
        logger.debug("Could not parse %s manifest: %s", ecosystem.value, exc)
        return None, None


def _extract_sections(content: str) -> list[str]:
    sections = []
    for line in content.splitlines():
        match = _HEADING_RE.match(line.strip())
        if match:
            sections.append(match.group(1))
    return sections


class ManifestScanner:
    """Searches the top levels of a repository for manifests and docs."""

    def __init__(self, config: AnalyzerConfig | None = None):
        self.config = config or AnalyzerConfig()

    def _candidate_files(self, root: Path) -> list[tuple[Path, str]]:
        """Files at most `manifest_max_depth` levels below root, sorted by relative path."""
        max_dir_depth = self.config.manifest_max_depth - 1
        found: list[tuple[Path, str]] = []
        for dirpath, dirnames, filenames in os.walk(root):
            rel_dir = Path(dirpath).relative_to(root)
            depth = len(rel_dir.parts)
            if depth >= max_dir_depth:
                dirnames[:] = []
            else:
                dirnames[:] = [
                    d for d in dirnames
                    if not matches_ignore_pattern(d, self.config.ignore_patterns, self.config.ignore_exempt)
                ]
            for fname in filenames:
                found.append((Path(dirpath) / fname, (rel_dir / fname).as_posix()))
        found.sort(key=lambda item: item[1])
        return found

    def find_config_files(self, root: str | Path) -> list[ConfigFile]:
        root = Path(root)
        candidates = self._candidate_files(root)
        config_files: list[ConfigFile] = []

        for pattern, ecosystem in MANIFEST_PATTERNS:
            for path, rel in candidates:
                if "/" in pattern:
                    matched = rel.startswith(pattern + "/")
                else:
                    matched = path.name == pattern or path.name.startswith(pattern)
                if not matched:
                    continue
                try:
                    content = path.read_text(encoding="utf-8")
                except (OSError, UnicodeDecodeError) as exc:
                    logger.debug("Skipping unreadable manifest %s: %s", rel, exc)
                    continue

                deps, scripts = parse_config_content(content, ecosystem)
                config_files.append(ConfigFile(
                    path=rel,
                    file_type=ecosystem.value,
                    content=content,
                    parsed_dependencies=deps,
                    scripts=scripts,
                ))

        logger.info("Found %d configuration files", len(config_files))
        return config_files

    def find_documentation_files(self, root: str | Path) -> list[DocumentationFile]:
        root = Path(root)
        candidates = self._candidate_files(root)
        docs: list[DocumentationFile] = []
        seen: set[str] = set()

        matches: list[tuple[Path, str, str]] = []
        for pattern, doc_type in DOC_PATTERNS:
            for path, rel in candidates:
                if path.suffix.lower() not in DOC_SUFFIXES:
                    continue
                if path.name.upper().startswith(pattern) and rel not in seen:
                    seen.add(rel)
                    matches.append((path, rel, doc_type))
        for path, rel in candidates:
            parents = Path(rel).parts[:-1]
            if "docs" in parents and path.suffix.lower() in DOCS_DIR_SUFFIXES and rel not in seen:
                seen.add(rel)
                matches.append((path, rel, "documentation"))

        for path, rel, doc_type in matches:
            try:
                content = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                logger.debug("Skipping unreadable documentation file %s: %s", rel, exc)
                continue
            docs.append(DocumentationFile(
                path=rel,
                file_type=doc_type,
                content=content,
                word_count=len(content.split()),
                has_badges="[![" in content or "![" in content,
                has_toc=(
                    "table of contents" in content.lower()
                    or "## Contents" in content
                    or "# Contents" in content
                ),
                sections=_extract_sections(content),
            ))

        logger.info("Found %d documentation files", len(docs))
        return docs
