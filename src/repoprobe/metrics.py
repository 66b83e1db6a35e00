"""Roll the directory tree up into repository-wide code metrics."""

from __future__ import annotations

from .models import CodeMetrics, DirectoryRecord, LanguageStat

RANKING_LIMIT = 10


def calculate_metrics(root: DirectoryRecord, ranking_limit: int = RANKING_LIMIT) -> CodeMetrics:
    """Compute totals, per-language stats and file rankings.

    Only text files count toward totals and language stats; the rankings
    consider every file.
    """
    all_files = list(root.iter_files())
    metrics = CodeMetrics()
    stats: dict[str, LanguageStat] = {}

    for f in all_files:
        if not f.is_text:
            continue
        loc = f.lines_of_code or 0
        blank = f.blank_lines or 0
        comment = f.comment_lines or 0

        metrics.total_files += 1
        metrics.total_size += f.size
        metrics.total_lines += loc + blank + comment
        metrics.total_loc += loc
        metrics.total_blank_lines += blank
        metrics.total_comment_lines += comment

        if f.language:
            stat = stats.setdefault(f.language, LanguageStat(language=f.language))
            stat.file_count += 1
            stat.lines_of_code += loc
            stat.blank_lines += blank
            stat.comment_lines += comment
            stat.total_bytes += f.size

    for stat in stats.values():
        stat.percentage = (
            stat.total_bytes / metrics.total_size * 100.0 if metrics.total_size > 0 else 0.0
        )
    metrics.language_stats = stats

    # sorted() is stable, reverse=True included
    metrics.largest_files = sorted(all_files, key=lambda f: f.size, reverse=True)[:ranking_limit]
    metrics.most_complex_files = sorted(
        all_files, key=lambda f: f.lines_of_code or 0, reverse=True
    )[:ranking_limit]

    metrics.average_file_size = (
        metrics.total_size / metrics.total_files if metrics.total_files else 0.0
    )
    return metrics
