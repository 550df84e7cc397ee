"""Tests for risk classification."""

import pytest

from hookscan.core.models import RiskLevel, ScanResult
from hookscan.core.risk import at_least, classify_risk


@pytest.mark.parametrize(
    "score,level",
    [
        (0, RiskLevel.SAFE),
        (29, RiskLevel.SAFE),
        (30, RiskLevel.WARNING),
        (69, RiskLevel.WARNING),
        (70, RiskLevel.DANGEROUS),
        (100, RiskLevel.DANGEROUS),
    ],
)
def test_classify_boundaries(score, level):
    assert classify_risk(score) == level


def test_classify_result():
    assert classify_risk(ScanResult(score=45)) == RiskLevel.WARNING


@pytest.mark.parametrize(
    "level,threshold,expected",
    [
        (RiskLevel.SAFE, RiskLevel.SAFE, True),
        (RiskLevel.SAFE, RiskLevel.WARNING, False),
        (RiskLevel.WARNING, RiskLevel.WARNING, True),
        (RiskLevel.WARNING, RiskLevel.DANGEROUS, False),
        (RiskLevel.DANGEROUS, RiskLevel.WARNING, True),
    ],
)
def test_at_least(level, threshold, expected):
    assert at_least(level, threshold) is expected
