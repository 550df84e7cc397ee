"""
Scan orchestration.

scan() is the primary entry point: heuristic matching always runs, the
syntax engines run when one serves the text's language, and the two
results are merged.
"""

from __future__ import annotations

from hookscan.core.config import Config, log_scan
from hookscan.core.heuristic import as_text, scan_heuristic
from hookscan.core.merge import merge_results
from hookscan.core.models import Hook, ScanResult
from hookscan.core.risk import classify_risk
from hookscan.core.syntax import scan_syntax

DEFAULT_CONFIG = Config()


def scan(
    content,
    filename: str | None = None,
    language: str | None = None,
    config: Config | None = None,
) -> ScanResult:
    """Assess hook text. Never raises; the result is always complete.

    Args:
        content: Hook source (str, or bytes decoded leniently).
        filename: Optional filename hint used to pick a syntax engine.
        language: Optional language hint; wins over filename.
        config: Loaded configuration (defaults apply when omitted).
    """
    if config is None:
        config = DEFAULT_CONFIG

    text = as_text(content)
    heuristic = scan_heuristic(text, config.catalog)
    strategies = ["heuristic"]

    syntax = None
    if config.syntax:
        syntax = scan_syntax(
            text,
            filename=filename,
            language=language,
            timeout=config.timeout,
            max_bytes=config.syntax_byte_limit,
        )
        if syntax is not None:
            strategies.append("syntax")

    result = merge_results(heuristic, syntax)
    log_scan(result.score, str(classify_risk(result)), strategies, filename=filename, text=text)
    return result


def scan_hook(hook: Hook, config: Config | None = None) -> Hook:
    """Scan a hook descriptor's content, filling in scan_result and risk_level."""
    hook.scan_result = scan(hook.content, filename=hook.file_path or hook.name, config=config)
    hook.risk_level = classify_risk(hook.scan_result)
    return hook
