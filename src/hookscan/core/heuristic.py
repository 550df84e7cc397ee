"""Heuristic scanner: catalog rules applied to raw text."""

from __future__ import annotations

from hookscan.core.catalog import CATALOG, PatternRule
from hookscan.core.models import EvidenceSet, ScanResult, clamp_score


def as_text(content) -> str:
    """Coerce hook content to str. Bytes are decoded leniently; anything else is empty."""
    if isinstance(content, str):
        return content
    if isinstance(content, (bytes, bytearray, memoryview)):
        return bytes(content).decode("utf-8", errors="replace")
    return ""


def scan_heuristic(content, catalog: tuple[PatternRule, ...] = CATALOG) -> ScanResult:
    """Apply every catalog rule to content.

    Each category that matches at least once adds one evidence line with its
    occurrence count, sets its flag and adds its weight once.
    """
    text = as_text(content)
    result = ScanResult()
    evidence = EvidenceSet()
    score = 0

    for entry in catalog:
        count = sum(1 for _ in entry.rule.finditer(text))
        if not count:
            continue
        evidence.add(f"{entry.category}: {count} occurrence(s)")
        if entry.flag:
            setattr(result, entry.flag, True)
        score += entry.weight

    result.evidence = evidence.to_list()
    result.score = clamp_score(score)
    return result
