"""Human-readable safety report."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from hookscan.core.models import Hook, RiskLevel, ScanResult
from hookscan.core.risk import classify_risk

GLYPHS = {
    RiskLevel.SAFE: "✅",
    RiskLevel.WARNING: "⚠️",
    RiskLevel.DANGEROUS: "🔴",
}
UNKNOWN_GLYPH = "❓"

FILE_SECTION = "\n📄 File-based hooks:"
INLINE_SECTION = "\n📝 Inline hooks:"


def _glyph(level) -> str:
    return GLYPHS.get(level, UNKNOWN_GLYPH)


def _evidence_lines(result: ScanResult | None) -> list[str]:
    if result is None:
        return []
    return [f"    • {item}" for item in result.evidence]


def generate_safety_report(
    hooks: Iterable[Hook],
    inline_results: Mapping[str, ScanResult] | None = None,
) -> str:
    """Render file-based hooks and inline results as text. Empty input gives ""."""
    hooks = list(hooks)
    lines: list[str] = []

    if hooks:
        lines.append(FILE_SECTION)
        for hook in hooks:
            level = hook.risk_level if hook.risk_level is not None else RiskLevel.SAFE
            lines.append(f"  {_glyph(level)} {hook.name} ({hook.kind})")
            lines.extend(_evidence_lines(hook.scan_result))
            if hook.description:
                lines.append(f"    Description: {hook.description}")

    if inline_results:
        lines.append(INLINE_SECTION)
        for address, result in inline_results.items():
            lines.append(f"  {_glyph(classify_risk(result))} {address} (risk: {result.score})")
            lines.extend(_evidence_lines(result))

    return "\n".join(lines)
