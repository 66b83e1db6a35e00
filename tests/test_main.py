"""Tests for the command-line interface."""

import json
from unittest.mock import patch

import yaml
from click.testing import CliRunner

from repoprobe import __version__
from repoprobe.main import cli


def test_version_command():
    result = CliRunner().invoke(cli, ["version"])
    assert result.exit_code == 0
    assert f"repoprobe v{__version__}" in result.output


def test_version_option():
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_analyze_local_json(sample_repo, tmp_path):
    out = tmp_path / "analysis.json"
    result = CliRunner().invoke(cli, ["analyze", str(sample_repo), "--output-file", str(out)])

    assert result.exit_code == 0, result.output
    data = json.loads(out.read_text())
    assert data["metadata"]["full_name"] == "sample"
    assert data["security_info"]["outdated_dependencies"] == ["requests: *"]


def test_analyze_local_yaml(git_repo, tmp_path):
    out = tmp_path / "analysis.yaml"
    result = CliRunner().invoke(
        cli, ["analyze", str(git_repo), "--output", "yaml", "--output-file", str(out), "--workers", "2"],
    )

    assert result.exit_code == 0, result.output
    data = yaml.safe_load(out.read_text())
    assert data["git_analysis"]["total_commits"] == 3


def test_max_file_size_option(tmp_path):
    repo = tmp_path / "repo"
    repo.mkdir()
    (repo / "big.txt").write_text("x" * 100)
    out = tmp_path / "analysis.json"
    result = CliRunner().invoke(
        cli, ["analyze", str(repo), "--max-file-size", "10", "--output-file", str(out)],
    )

    assert result.exit_code == 0, result.output
    [record] = json.loads(out.read_text())["file_structure"]["files"]
    assert record["is_binary"] is True


def test_log_file_written(sample_repo, tmp_path):
    log_file = tmp_path / "run.log"
    result = CliRunner().invoke(
        cli, ["analyze", str(sample_repo), "--output-file", str(tmp_path / "a.json"), "--log-file", str(log_file)],
    )

    assert result.exit_code == 0, result.output
    assert "Skipping git history" in log_file.read_text()


def test_missing_directory(tmp_path):
    result = CliRunner().invoke(cli, ["analyze", str(tmp_path / "nope")])
    assert result.exit_code == 1
    assert "Not a directory" in result.output


def test_non_github_url_rejected():
    result = CliRunner().invoke(cli, ["analyze", "https://gitlab.com/octo/demo"])
    assert result.exit_code == 1
    assert "not a GitHub repository URL" in result.output


@patch("httpx.Client.get")
def test_insights_failure_is_not_fatal(mock_get, sample_repo, tmp_path):
    from httpx import ConnectError

    mock_get.side_effect = ConnectError("connection refused")
    out = tmp_path / "analysis.json"
    result = CliRunner().invoke(cli, ["analyze", str(sample_repo), "--insights", "--output-file", str(out)])

    assert result.exit_code == 0, result.output
    assert json.loads(out.read_text())["ai_insights"] is None


def test_summary_panel_shown(sample_repo, tmp_path):
    out = tmp_path / "analysis.json"
    result = CliRunner().invoke(cli, ["analyze", str(sample_repo), "--output-file", str(out)])

    assert result.exit_code == 0, result.output
    summary = json.loads(out.read_text())["analysis_summary"]
    assert "Analysis Summary" in result.output
    assert "Repository: sample" in result.output
    totals = next(line for line in summary.splitlines() if line.startswith("Total Files:"))
    assert totals in result.output
