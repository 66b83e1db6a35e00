"""Per-file classification: binary sniffing, language, line and comment counts."""

from __future__ import annotations

import hashlib
import mimetypes
import os
from pathlib import Path

from .config import BINARY_SNIFF_BYTES, AnalyzerConfig
from .models import FileRecord

OCTET_STREAM = "application/octet-stream"
TEXT_ENCODING = "UTF-8"


def _extension(path: Path) -> str | None:
    # Path("Makefile").suffix == "" and Path(".gitignore").suffix == ""
    suffix = path.suffix
    return suffix[1:] if suffix else None


def count_comment_lines(lines: list[str], markers: tuple[str, str, str] | None) -> int:
    """Count comment lines with a single in-block flag.

    Blank lines are never counted, so comment and blank totals don't overlap.
    Markers inside string literals are counted like real ones.
    """
    if markers is None:
        return 0
    single, block_start, block_end = markers
    has_block = bool(block_start and block_end)

    count = 0
    in_block = False
    for line in lines:
        trimmed = line.strip()
        if not trimmed:
            continue

        if has_block:
            if in_block:
                count += 1
                if block_end in trimmed:
                    in_block = False
                continue

            start = trimmed.find(block_start)
            if start != -1:
                count += 1
                # """ opens and closes with the same marker, so only look past the opener
                if block_end not in trimmed[start + len(block_start):]:
                    in_block = True
                continue

        if single and trimmed.startswith(single):
            count += 1

    return count


class FileClassifier:
    """Turns one file on disk into a FileRecord."""

    def __init__(self, config: AnalyzerConfig | None = None):
        self.config = config or AnalyzerConfig()

    def classify(self, path: str | Path, relative_path: str, size: int | None = None) -> FileRecord:
        """Classify a file. OSError from the filesystem propagates to the caller."""
        path = Path(path)
        if size is None:
            size = os.stat(path).st_size
        ext = _extension(path)
        ext_key = ext.lower() if ext else ""

        if size > self.config.max_file_size:
            return FileRecord(
                path=relative_path,
                name=path.name,
                extension=ext,
                size=size,
                hash=self.file_hash(path),
                is_binary=True,
                is_text=False,
                mime_type=OCTET_STREAM,
            )

        mime_type, _ = mimetypes.guess_type(path.name)
        is_binary = self.is_binary(path)
        language = self.config.languages.get(ext_key) if ext_key else None

        if is_binary:
            return FileRecord(
                path=relative_path,
                name=path.name,
                extension=ext,
                size=size,
                hash=self.file_hash(path),
                is_binary=True,
                is_text=False,
                language=language,
                mime_type=mime_type,
            )

        raw = path.read_bytes()
        text = raw.decode("utf-8", errors="replace")
        lines = text.splitlines()

        total_lines = len(lines)
        blank_lines = sum(1 for line in lines if not line.strip())
        comment_lines = count_comment_lines(lines, self.config.comment_markers.get(ext_key))
        lines_of_code = max(total_lines - blank_lines - comment_lines, 0)

        preview_lines = lines[: self.config.max_preview_lines]
        preview = "\n".join(preview_lines) if preview_lines else None

        return FileRecord(
            path=relative_path,
            name=path.name,
            extension=ext,
            size=size,
            hash=hashlib.md5(raw).hexdigest(),
            is_binary=False,
            is_text=True,
            lines_of_code=lines_of_code,
            blank_lines=blank_lines,
            comment_lines=comment_lines,
            language=language,
            mime_type=mime_type,
            encoding=TEXT_ENCODING,
            content_preview=preview,
        )

    def is_binary(self, path: Path) -> bool:
        """Null byte in the first 512 bytes, or a known binary extension."""
        ext = _extension(path)
        if ext and ext.lower() in self.config.binary_extensions:
            return True
        with open(path, "rb") as f:
            head = f.read(BINARY_SNIFF_BYTES)
        return b"\x00" in head

    @staticmethod
    def file_hash(path: Path) -> str:
        digest = hashlib.md5()
        with open(path, "rb") as f:
            for chunk in iter(lambda: f.read(65536), b""):
                digest.update(chunk)
        return digest.hexdigest()
