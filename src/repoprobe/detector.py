"""Infer project-type and technology tags from manifests and tree structure."""

from __future__ import annotations

from collections import Counter

from .models import ConfigFile, DirectoryRecord, ProjectInfo

# ecosystem -> {ProjectInfo list field: tags}
ECOSYSTEM_TAGS: dict[str, dict[str, tuple[str, ...]]] = {
    "npm": {"package_managers": ("npm",)},
    "cargo": {"package_managers": ("cargo",), "build_tools": ("cargo",), "project_type": ("rust",)},
    "pip": {"package_managers": ("pip",), "project_type": ("python",)},
    "python": {"package_managers": ("pip",), "project_type": ("python",)},
    "pipenv": {"package_managers": ("pipenv",), "project_type": ("python",)},
    "maven": {"package_managers": ("maven",), "build_tools": ("maven",), "project_type": ("java",)},
    "gradle": {"package_managers": ("gradle",), "build_tools": ("gradle",), "project_type": ("java",)},
    "go": {"package_managers": ("go modules",), "build_tools": ("go",), "project_type": ("go",)},
    "composer": {"package_managers": ("composer",), "project_type": ("php",)},
    "bundler": {"package_managers": ("bundler",), "project_type": ("ruby",)},
    "docker": {"deployment_configs": ("docker",)},
    "docker-compose": {"deployment_configs": ("docker-compose",)},
    "kubernetes": {"deployment_configs": ("kubernetes",)},
    "terraform": {"deployment_configs": ("terraform",)},
    "github-actions": {"ci_cd_tools": ("github-actions",)},
    "travis": {"ci_cd_tools": ("travis-ci",)},
}

# Substring -> display name, checked against raw package.json content.
JS_FRAMEWORKS = (
    ("react", "React"),
    ("vue", "Vue.js"),
    ("angular", "Angular"),
    ("svelte", "Svelte"),
    ("express", "Express.js"),
    ("nestjs", "NestJS"),
    ("next", "Next.js"),
    ("nuxt", "Nuxt.js"),
    ("gatsby", "Gatsby"),
    ("electron", "Electron"),
)
JS_BUILD_TOOLS = (
    ("webpack", "Webpack"),
    ("vite", "Vite"),
    ("rollup", "Rollup"),
    ("parcel", "Parcel"),
    ("esbuild", "ESBuild"),
    ("snowpack", "Snowpack"),
)
JS_TEST_TOOLS = (
    ("jest", "Jest"),
    ("mocha", "Mocha"),
    ("chai", "Chai"),
    ("cypress", "Cypress"),
    ("playwright", "Playwright"),
    ("puppeteer", "Puppeteer"),
    ("jasmine", "Jasmine"),
)

CLI_ENTRY_FILES = {"main.rs"}
LIBRARY_ROOT_FILES = {"lib.rs"}
WEB_ENTRY_FILES = {"index.html"}


def _add(target: list[str], tag: str) -> None:
    if tag not in target:
        target.append(tag)


def detect_primary_language(tree: DirectoryRecord) -> str | None:
    """Language with the most files; equal counts resolve alphabetically."""
    counts = Counter(f.language for f in tree.iter_files() if f.language)
    if not counts:
        return None
    return min(counts.items(), key=lambda item: (-item[1], item[0]))[0]


class ProjectTypeDetector:

    def detect_project_info(self, config_files: list[ConfigFile], tree: DirectoryRecord) -> ProjectInfo:
        info = ProjectInfo()

        for config in config_files:
            for field_name, tags in ECOSYSTEM_TAGS.get(config.file_type, {}).items():
                for tag in tags:
                    _add(getattr(info, field_name), tag)
            if config.file_type == "npm":
                self._scan_js_manifest(config.content, info)

        info.primary_language = detect_primary_language(tree)
        self._detect_from_structure(tree, info)
        return info

    @staticmethod
    def _scan_js_manifest(content: str, info: ProjectInfo) -> None:
        # Plain substring checks: "preact" also reads as React.
        for needle, name in JS_FRAMEWORKS:
            if needle in content:
                _add(info.frameworks, name)
        for needle, name in JS_BUILD_TOOLS:
            if needle in content:
                _add(info.build_tools, name)
        for needle, name in JS_TEST_TOOLS:
            if needle in content:
                _add(info.testing_frameworks, name)

    @staticmethod
    def _detect_from_structure(tree: DirectoryRecord, info: ProjectInfo) -> None:
        root_dirs = {d.name for d in tree.subdirectories}
        names = [f.name for f in tree.iter_files()]

        if any(n in CLI_ENTRY_FILES for n in names):
            _add(info.project_type, "cli-application")
        if any(n in LIBRARY_ROOT_FILES for n in names):
            _add(info.project_type, "library")
        if any(n in WEB_ENTRY_FILES for n in names):
            _add(info.project_type, "web-application")
        if any("server" in n or "app" in n for n in names):
            _add(info.project_type, "backend-service")
        if root_dirs & {"tests", "test"}:
            _add(info.project_type, "tested-project")
        if root_dirs & {"docs", "documentation"}:
            _add(info.project_type, "documented-project")
        if "examples" in root_dirs:
            _add(info.project_type, "example-driven")
