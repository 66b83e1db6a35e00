"""Narrative report generation on top of a finished analysis."""

from __future__ import annotations

import json
import time
from typing import Any

from .logging import get_logger
from .model import OllamaClient
from .models import RepositoryAnalysis
from .prompts import REPORT_SYSTEM_PROMPT, report_prompt

logger = get_logger("insights")


def analysis_for_prompt(analysis: RepositoryAnalysis) -> dict[str, Any]:
    """The analysis as a dict, minus the file tree and raw manifest bodies."""
    data = analysis.to_dict()
    data.pop("file_structure", None)
    data.pop("ai_insights", None)
    for config in data.get("config_files", []):
        config.pop("content", None)
    for doc in data.get("documentation", []):
        doc.pop("content", None)
    for key in ("largest_files", "most_complex_files"):
        for f in data.get("code_metrics", {}).get(key, []):
            f.pop("content_preview", None)
    return data


class InsightGenerator:
    """Asks the local model for a technical report and attaches it to the analysis."""

    def __init__(self, client: OllamaClient):
        self.client = client

    def generate(self, analysis: RepositoryAnalysis) -> str:
        """Raises ModelError when the model is unreachable or fails."""
        start = time.time()
        payload = json.dumps(analysis_for_prompt(analysis), indent=2)
        report = self.client.generate(report_prompt(payload), system=REPORT_SYSTEM_PROMPT)
        analysis.ai_insights = report
        logger.info("Narrative report generated in %.1fs", time.time() - start)
        return report
