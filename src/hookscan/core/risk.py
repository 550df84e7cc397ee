"""Risk classification of scan scores."""

from __future__ import annotations

from hookscan.core.models import RiskLevel, ScanResult

DANGEROUS_THRESHOLD = 70
WARNING_THRESHOLD = 30


def classify_risk(score: int | ScanResult) -> RiskLevel:
    """Map a score (or a ScanResult's score) to a risk level.

    >= 70 is dangerous, 30-69 is warning, anything lower is safe.
    """
    if isinstance(score, ScanResult):
        score = score.score
    if score >= DANGEROUS_THRESHOLD:
        return RiskLevel.DANGEROUS
    if score >= WARNING_THRESHOLD:
        return RiskLevel.WARNING
    return RiskLevel.SAFE


_ORDER = {RiskLevel.SAFE: 0, RiskLevel.WARNING: 1, RiskLevel.DANGEROUS: 2}


def at_least(level: RiskLevel, threshold: RiskLevel) -> bool:
    """True if level is as severe as threshold or more."""
    return _ORDER[level] >= _ORDER[threshold]
