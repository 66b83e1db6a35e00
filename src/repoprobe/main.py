"""repoprobe - structured analysis of GitHub repositories and local checkouts.

Usage:
    repoprobe analyze https://github.com/pallets/flask
    repoprobe analyze . --output yaml --output-file analysis.yaml
    repoprobe analyze ./my-project --insights --model qwen2.5-coder:14b
"""

from __future__ import annotations

from pathlib import Path
from urllib.parse import urlparse

import click
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from . import __version__
from .analyzer import RepositoryAnalyzer, export_analysis_json, export_analysis_yaml
from .config import DEFAULT_MAX_FILE_SIZE, AnalyzerConfig
from .errors import AnalysisError
from .insights import InsightGenerator
from .logging import configure_logging, get_logger
from .model import DEFAULT_MODEL, ModelError, OllamaClient
from .models import RepositoryAnalysis

# stdout carries the export; everything human-facing goes to stderr
console = Console(stderr=True)
logger = get_logger("cli")


def _is_remote(target: str) -> bool:
    parsed = urlparse(target)
    return parsed.scheme in ("http", "https") and bool(parsed.hostname)


@click.group()
@click.version_option(version=__version__)
def cli():
    """repoprobe - analyze a repository's structure, code, history and dependencies."""
    pass


@cli.command()
@click.argument("target")
@click.option("--token", envvar="GITHUB_TOKEN", default=None, help="GitHub API token")
@click.option("--output", "-o", "fmt", type=click.Choice(["json", "yaml"]), default="json", help="Export format")
@click.option("--output-file", "-f", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Write the export here instead of stdout")
@click.option("--work-dir", envvar="REPOPROBE_WORK_DIR", type=click.Path(file_okay=False, path_type=Path), default=None, help="Where remote repositories are cloned")
@click.option("--max-file-size", type=click.IntRange(min=1), default=DEFAULT_MAX_FILE_SIZE, show_default=True, help="Files larger than this (bytes) are hashed but not read")
@click.option("--workers", type=click.IntRange(min=1), default=1, show_default=True, help="Threads used to classify files")
@click.option("--insights/--no-insights", default=False, help="Ask a local Ollama model for a narrative report")
@click.option("--model", "-m", default=DEFAULT_MODEL, show_default=True, help="Ollama model name")
@click.option("--verbose", "-v", is_flag=True, help="Debug logging")
@click.option("--log-file", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Also write logs to this file")
def analyze(
    target: str,
    token: str | None,
    fmt: str,
    output_file: Path | None,
    work_dir: Path | None,
    max_file_size: int,
    workers: int,
    insights: bool,
    model: str,
    verbose: bool,
    log_file: Path | None,
):
    """Analyze a repository and print the result as JSON or YAML.

    TARGET is a GitHub repository URL or a local directory.

    Examples:

        repoprobe analyze https://github.com/rust-lang/cargo

        repoprobe analyze . --output yaml
    """
    configure_logging(verbose=verbose, log_file=log_file)
    config = AnalyzerConfig(max_file_size=max_file_size, max_workers=workers)
    analyzer = RepositoryAnalyzer(github_token=token, work_dir=work_dir, config=config)

    try:
        if _is_remote(target):
            analysis = analyzer.analyze_repository(target)
        else:
            analysis = analyzer.analyze_path(target)
    except (AnalysisError, ValueError) as e:
        raise click.ClickException(str(e))
    finally:
        analyzer.close()

    if insights:
        client = OllamaClient(model=model)
        try:
            client.ensure_ready()
            with console.status(f"Generating report with {model}..."):
                InsightGenerator(client).generate(analysis)
        except ModelError as e:
            logger.warning("Narrative report skipped: %s", e)

    exported = export_analysis_yaml(analysis) if fmt == "yaml" else export_analysis_json(analysis)
    if output_file:
        output_file.write_text(exported, encoding="utf-8")
        console.print(f"[green]Analysis written to {output_file}[/]")
    else:
        click.echo(exported)

    _print_summary(analysis)


@cli.command()
def version():
    """Show version information."""
    console.print(f"repoprobe v{__version__}")


def _print_summary(analysis: RepositoryAnalysis) -> None:
    """Show the plain-text analysis summary in a panel."""
    console.print()
    console.print(Panel(
        Text(analysis.analysis_summary),
        title="[bold cyan]Analysis Summary[/]",
        border_style="cyan",
        expand=False,
    ))


if __name__ == "__main__":
    cli()
