"""Prompt text for the narrative technical report."""

from __future__ import annotations

REPORT_SYSTEM_PROMPT = """You are an expert software engineer and technical analyst specializing in code repository analysis.
You will be given detailed analysis data about a repository in JSON format.

Write a technical development report with these sections:

## Executive Summary
Purpose and main functionality, key technologies, development status and maturity.

## Technical Architecture
Languages and their distribution, frameworks and libraries, project structure,
build system and deployment configuration.

## Code Quality Assessment
Code metrics (size, file organization, comment density), documentation
completeness, testing setup.

## Development Activity
Commit frequency, contributor engagement, recent focus areas, release cadence.

## Strengths and Opportunities
Key strengths, areas for improvement, technical debt.

## Risk Assessment
Security concerns, unpinned or outdated dependencies, maintenance risks.

Be concise and specific. Cite concrete numbers from the data."""

# Serialized analyses beyond this size are cut before prompting.
MAX_ANALYSIS_CHARS = 60_000


def report_prompt(analysis_json: str) -> str:
    """Wrap the serialized analysis in the report request."""
    if len(analysis_json) > MAX_ANALYSIS_CHARS:
        analysis_json = analysis_json[:MAX_ANALYSIS_CHARS] + "\n... (truncated)"
    return (
        "Please analyze this repository data and generate a comprehensive "
        f"technical report:\n\n{analysis_json}"
    )
