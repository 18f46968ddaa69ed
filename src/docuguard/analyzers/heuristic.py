"""Offline conflict analyzer based on rule-like sentences.

Used when no analyzer API key is available. It extracts directive sentences
from both documents and reports pairs that talk about the same subject with
opposing indicators (always/never, must/must not, ...).
"""

import logging
import re

from docuguard.models.conflict import ConflictCandidate, Severity
from docuguard.models.document import Document


logger = logging.getLogger(__name__)


RULE_INDICATORS = (
    "must", "should", "always", "never", "required", "forbidden",
    "mandatory", "use", "avoid", "prefer", "allow", "prohibit",
    "enable", "disable",
)

# (positive, negative) indicator pairs
OPPOSITES = (
    ("always", "never"),
    ("must", "must not"),
    ("use", "avoid"),
    ("enable", "disable"),
    ("allow", "prohibit"),
    ("required", "forbidden"),
)

STOPWORDS = frozenset({
    "that", "this", "with", "from", "have", "will", "shall", "when", "they",
    "their", "there", "than", "then", "into", "also", "only", "each", "every",
    "should", "must", "always", "never", "allow", "avoid", "enable", "disable",
    "prohibit", "required", "forbidden", "mandatory", "prefer",
})

_SENTENCE_SPLIT = re.compile(r"(?<=[.!?])\s+|\n+")
_WORD = re.compile(r"[a-z0-9]+")


class HeuristicConflictAnalyzer:
    """Detects conflicts with keyword heuristics, no network calls."""

    def __init__(self, max_rules: int = 50, max_conflicts: int = 10) -> None:
        """Initialize the analyzer.

        Args:
            max_rules: Maximum rule sentences extracted per document.
            max_conflicts: Maximum conflicts reported per pair.
        """
        self._max_rules = max_rules
        self._max_conflicts = max_conflicts

    async def analyze(self, first: Document, second: Document) -> list[ConflictCandidate]:
        """Analyze one document pair."""
        rules1 = self.extract_rules(first.content)
        rules2 = self.extract_rules(second.content)
        if not rules1 or not rules2:
            return []

        candidates = []
        for r1 in rules1:
            for r2 in rules2:
                opposite = self._opposing_indicator(r1, r2)
                if opposite is None or not self._shared_subject(r1, r2):
                    continue
                pos, neg = opposite
                candidates.append(ConflictCandidate(
                    document_ids=(first.id, second.id),
                    document_titles=(first.title, second.title),
                    excerpts=(r1, r2),
                    explanation=f"Opposing directives on the same subject ({pos}/{neg}).",
                    severity=Severity.HIGH if pos in ("must", "always") else Severity.MEDIUM,
                ))
                if len(candidates) >= self._max_conflicts:
                    return candidates

        logger.debug(
            f"Heuristic analysis of {first.id} vs {second.id}: {len(candidates)} conflicts"
        )
        return candidates

    def extract_rules(self, content: str) -> list[str]:
        """Extract rule-like sentences.

        Args:
            content: Document text.

        Returns:
            Sentences (original casing) that contain a rule indicator.
        """
        rules = []
        for sentence in _SENTENCE_SPLIT.split(content):
            sentence = sentence.strip()
            if not 10 < len(sentence) < 300:
                continue
            words = set(_WORD.findall(sentence.lower()))
            if words & set(RULE_INDICATORS):
                rules.append(sentence)
        return rules[:self._max_rules]

    def _opposing_indicator(self, r1: str, r2: str) -> tuple[str, str] | None:
        for pos, neg in OPPOSITES:
            p1 = _polarity(r1, pos, neg)
            p2 = _polarity(r2, pos, neg)
            if p1 is not None and p2 is not None and p1 != p2:
                return pos, neg
        return None

    def _shared_subject(self, r1: str, r2: str) -> bool:
        return bool(_keywords(r1) & _keywords(r2))


def _polarity(sentence: str, pos: str, neg: str) -> bool | None:
    """True for the positive indicator, False for the negative, else None."""
    text = sentence.lower()
    if re.search(rf"\b{re.escape(neg)}\b", text):
        return False
    if re.search(rf"\b{re.escape(pos)}\b", text):
        return True
    return None


def _keywords(sentence: str) -> set[str]:
    return {
        w for w in _WORD.findall(sentence.lower())
        if len(w) >= 4 and w not in STOPWORDS
    }
