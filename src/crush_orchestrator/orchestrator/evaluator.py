"""Heuristic quality scoring for model output."""

from __future__ import annotations

import re
from dataclasses import dataclass

TECHNICAL_TERMS: tuple[str, ...] = (
    "api",
    "rest",
    "graphql",
    "database",
    "sql",
    "nosql",
    "function",
    "class",
    "interface",
    "type",
    "async",
    "await",
    "algorithm",
    "architecture",
    "microservice",
    "container",
    "authentication",
    "authorization",
    "encryption",
    "hash",
    "cache",
    "queue",
    "stream",
    "pipeline",
    "deployment",
    "scalability",
    "performance",
    "optimization",
    "latency",
)

_HEADER = re.compile(r"^\s{0,3}#{1,6}\s+\S")
_LIST_ITEM = re.compile(r"^\s*(?:[-*+]|\d+[.)])\s+\S")
_FENCE = re.compile(r"^\s*```")
_WORD = re.compile(r"\S+")
_CONCLUSION = re.compile(
    r"\b(?:conclusion|summary|in summary|to summarize|key takeaways)\b",
    re.IGNORECASE,
)
_TERM_PATTERNS = tuple(
    re.compile(rf"\b{re.escape(term)}s?\b", re.IGNORECASE) for term in TECHNICAL_TERMS
)

# (weight, saturation point) per signal; weights sum to 1.0.
_LENGTH = (0.30, 500)
_CODE_BLOCKS = (0.15, 2)
_HEADERS = (0.10, 3)
_LIST_ITEMS = (0.10, 5)
_TECHNICAL_TERMS = (0.20, 8)
_PROSE_WEIGHT = 0.05
_CONCLUSION_WEIGHT = 0.10


@dataclass(frozen=True, slots=True)
class QualityMetrics:
    """Structural and content signals extracted from output text."""

    word_count: int
    code_blocks: int
    headers: int
    list_items: int
    technical_terms: int
    has_prose: bool
    has_conclusion: bool


class QualityEvaluator:
    """Pure heuristic scorer mapping text to [0, 1]."""

    def evaluate(self, text: str) -> float:
        """Score output quality between 0 and 1."""

        return self.score(self.extract_metrics(text))

    def extract_metrics(self, text: str) -> QualityMetrics:
        lines = text.splitlines()
        fences = sum(1 for line in lines if _FENCE.match(line))
        prose_lines = _lines_outside_code(lines)
        return QualityMetrics(
            word_count=len(_WORD.findall(text)),
            code_blocks=fences // 2,
            headers=sum(1 for line in prose_lines if _HEADER.match(line)),
            list_items=sum(1 for line in prose_lines if _LIST_ITEM.match(line)),
            technical_terms=sum(1 for pattern in _TERM_PATTERNS if pattern.search(text)),
            has_prose=_has_prose(prose_lines),
            has_conclusion=_CONCLUSION.search(text) is not None,
        )

    def score(self, metrics: QualityMetrics) -> float:
        total = (
            _saturating(metrics.word_count, _LENGTH)
            + _saturating(metrics.code_blocks, _CODE_BLOCKS)
            + _saturating(metrics.headers, _HEADERS)
            + _saturating(metrics.list_items, _LIST_ITEMS)
            + _saturating(metrics.technical_terms, _TECHNICAL_TERMS)
            + (_PROSE_WEIGHT if metrics.has_prose else 0.0)
            + (_CONCLUSION_WEIGHT if metrics.has_conclusion else 0.0)
        )
        return round(min(max(total, 0.0), 1.0), 4)


def _saturating(value: int, signal: tuple[float, int]) -> float:
    weight, saturation = signal
    return weight * min(value, saturation) / saturation


def _lines_outside_code(lines: list[str]) -> list[str]:
    outside: list[str] = []
    in_code = False
    for line in lines:
        if _FENCE.match(line):
            in_code = not in_code
            continue
        if not in_code:
            outside.append(line)
    return outside


def _has_prose(lines: list[str]) -> bool:
    for line in lines:
        stripped = line.strip()
        if not stripped or _HEADER.match(line) or _LIST_ITEM.match(line):
            continue
        if stripped[0].isupper() and len(stripped.split()) >= 5:
            return True
    return False
