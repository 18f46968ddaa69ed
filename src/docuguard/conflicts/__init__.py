"""Conflict lifecycle: storage, pairwise analysis, inbox and reports."""

from docuguard.conflicts.inbox import ConflictFilter, SortOrder
from docuguard.conflicts.orchestrator import AnalysisOrchestrator, AnalysisRun
from docuguard.conflicts.pairs import count_pairs, generate_pairs
from docuguard.conflicts.report import ConflictReport, build_report, report_filename
from docuguard.conflicts.store import ConflictRecordStore

__all__ = [
    "AnalysisOrchestrator",
    "AnalysisRun",
    "ConflictFilter",
    "ConflictRecordStore",
    "ConflictReport",
    "SortOrder",
    "build_report",
    "count_pairs",
    "generate_pairs",
    "report_filename",
]
