"""Pairwise conflict analyzers."""

from docuguard.analyzers.base import ConflictAnalyzer
from docuguard.analyzers.gemini import GeminiConflictAnalyzer
from docuguard.analyzers.heuristic import HeuristicConflictAnalyzer
from docuguard.core.config import AnalyzerConfig


def create_analyzer(config: AnalyzerConfig | None = None) -> ConflictAnalyzer:
    """Get the Gemini analyzer when an API key is set, else the heuristic one."""
    config = config or AnalyzerConfig()
    if config.api_key:
        return GeminiConflictAnalyzer(config)
    return HeuristicConflictAnalyzer()


__all__ = [
    "ConflictAnalyzer",
    "GeminiConflictAnalyzer",
    "HeuristicConflictAnalyzer",
    "create_analyzer",
]
