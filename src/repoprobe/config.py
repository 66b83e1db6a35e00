"""Analyzer configuration: thresholds and the static lookup tables.

Tables are keyed by lowercased extension without the leading dot.
"""

from __future__ import annotations

import tempfile
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_MAX_FILE_SIZE = 1_000_000  # bytes; larger files are never opened for text
DEFAULT_PREVIEW_LINES = 50
BINARY_SNIFF_BYTES = 512

# Directory and file names skipped by the walker. A name is skipped when it
# starts with an entry (a trailing "*" is stripped first); an entry with a
# leading "*" matches as a suffix instead.
IGNORE_PATTERNS = (
    ".git",
    "node_modules",
    "target",
    "build",
    "dist",
    "__pycache__",
    ".pytest_cache",
    ".mypy_cache",
    ".venv",
    "venv",
    ".env",
    "*.log",
    "*.tmp",
    "*.cache",
)

# Names the prefix rule would otherwise hide behind ".git".
IGNORE_EXEMPT_NAMES = frozenset({".github", ".gitignore", ".gitattributes"})

BINARY_EXTENSIONS = frozenset({
    "exe", "dll", "so", "dylib", "bin", "obj", "o", "a", "lib",
    "jpg", "jpeg", "png", "gif", "bmp", "ico", "svg", "webp",
    "mp3", "mp4", "avi", "mov", "wmv", "flv", "wav",
    "zip", "tar", "gz", "rar", "7z", "bz2", "xz",
    "pdf", "doc", "docx", "xls", "xlsx", "ppt", "pptx",
    "woff", "woff2", "ttf", "eot", "class", "pyc",
})

LANGUAGES = {
    "rs": "Rust",
    "py": "Python", "pyi": "Python",
    "js": "JavaScript", "jsx": "JavaScript", "mjs": "JavaScript", "cjs": "JavaScript",
    "ts": "TypeScript", "tsx": "TypeScript",
    "java": "Java",
    "c": "C",
    "cpp": "C++", "cc": "C++", "cxx": "C++",
    "h": "C/C++ Header",
    "hpp": "C++ Header",
    "cs": "C#",
    "go": "Go",
    "php": "PHP",
    "rb": "Ruby",
    "pl": "Perl",
    "swift": "Swift",
    "kt": "Kotlin",
    "scala": "Scala",
    "hs": "Haskell",
    "ml": "OCaml", "mli": "OCaml",
    "r": "R",
    "m": "Objective-C",
    "mm": "Objective-C++",
    "sh": "Shell", "bash": "Shell", "zsh": "Shell", "fish": "Shell",
    "ps1": "PowerShell",
    "html": "HTML", "htm": "HTML",
    "css": "CSS",
    "scss": "SCSS",
    "sass": "Sass",
    "less": "Less",
    "xml": "XML",
    "json": "JSON",
    "yaml": "YAML", "yml": "YAML",
    "toml": "TOML",
    "ini": "INI",
    "md": "Markdown",
    "sql": "SQL",
    "dockerfile": "Dockerfile",
    "makefile": "Makefile",
    "cmake": "CMake",
    "proto": "Protocol Buffers",
    "graphql": "GraphQL",
    "vue": "Vue",
    "svelte": "Svelte",
    "tex": "LaTeX",
}

# (single-line marker, multi-line start, multi-line end); "" = not applicable
_C_STYLE = ("//", "/*", "*/")
_HASH_STYLE = ("#", '"""', '"""')
_MARKUP_STYLE = ("", "<!--", "-->")
_CSS_STYLE = ("", "/*", "*/")

COMMENT_MARKERS = {
    **{ext: _C_STYLE for ext in (
        "rs", "js", "ts", "jsx", "tsx", "c", "cpp", "cc", "cxx", "h", "hpp",
        "java", "scala", "kt", "cs", "go", "php", "swift",
    )},
    **{ext: _HASH_STYLE for ext in ("py", "sh", "bash", "zsh", "fish", "rb", "pl", "r")},
    **{ext: _MARKUP_STYLE for ext in ("html", "xml", "svg")},
    **{ext: _CSS_STYLE for ext in ("css", "scss", "sass", "less")},
    "sql": ("--", "/*", "*/"),
    "hs": ("--", "{-", "-}"),
    "ml": ("", "(*", "*)"),
    "mli": ("", "(*", "*)"),
}


def default_work_dir() -> Path:
    return Path(tempfile.gettempdir()) / "repoprobe"


@dataclass
class AnalyzerConfig:
    """Every knob the pipeline reads. Defaults match the CLI defaults."""

    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    max_preview_lines: int = DEFAULT_PREVIEW_LINES
    ignore_patterns: tuple[str, ...] = IGNORE_PATTERNS
    ignore_exempt: frozenset[str] = IGNORE_EXEMPT_NAMES
    binary_extensions: frozenset[str] = BINARY_EXTENSIONS
    languages: dict[str, str] = field(default_factory=lambda: dict(LANGUAGES))
    comment_markers: dict[str, tuple[str, str, str]] = field(
        default_factory=lambda: dict(COMMENT_MARKERS)
    )
    honor_gitignore: bool = True
    max_workers: int = 1

    # Manifest / documentation search
    manifest_max_depth: int = 3

    # Metrics
    ranking_limit: int = 10
    language_share_threshold: float = 5.0

    # Git history caps
    max_commits: int = 1000
    max_recent_commits: int = 50
    max_tree_entries: int = 100
    top_active_files: int = 20

    # GitHub fetch limits
    release_limit: int = 10
    issue_limit: int = 20
