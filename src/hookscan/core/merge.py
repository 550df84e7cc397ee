"""Combine heuristic and syntax results into one assessment."""

from __future__ import annotations

from hookscan.core.models import FLAGS, EvidenceSet, ScanResult, clamp_score


def merge_results(heuristic: ScanResult, syntax: ScanResult | None = None) -> ScanResult:
    """Merge two results for the same text.

    Flags are OR'ed, evidence is the ordered union (heuristic first), and the
    score is the higher of the two. Without a syntax result the heuristic
    result is returned as is.
    """
    if syntax is None:
        return heuristic

    merged = ScanResult(
        **{name: getattr(heuristic, name) or getattr(syntax, name) for name in FLAGS}
    )
    merged.evidence = EvidenceSet([*heuristic.evidence, *syntax.evidence]).to_list()
    merged.score = clamp_score(max(heuristic.score, syntax.score))
    return merged
