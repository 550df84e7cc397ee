"""
Syntax scanner: optional, language-aware second strategy.

scan_syntax() returns None whenever structural analysis is not possible:
no language could be resolved, no engine serves it, the text is too large,
the parse failed, or the time budget ran out. Callers fall back to the
heuristic result alone.
"""

from __future__ import annotations

import threading
from pathlib import PurePath

from hookscan.core.catalog import CATEGORY_FLAGS
from hookscan.core.config import log_event
from hookscan.core.heuristic import as_text
from hookscan.core.models import EvidenceSet, ScanResult, clamp_score
from hookscan.grammars import Finding, get_engine

DEFAULT_TIMEOUT = 2.0  # seconds per snippet
DEFAULT_MAX_BYTES = 512 * 1024

EXTENSIONS = {
    ".py": "python",
    ".sh": "bash",
    ".bash": "bash",
    ".js": "js",
    ".jsx": "js",
    ".mjs": "js",
    ".cjs": "js",
    ".ts": "ts",
    ".tsx": "ts",
}

LANGUAGE_ALIASES = {
    "python": "python",
    "python3": "python",
    "py": "python",
    "bash": "bash",
    "sh": "bash",
    "shell": "bash",
    "zsh": "bash",
    "javascript": "js",
    "js": "js",
    "node": "js",
    "typescript": "ts",
    "ts": "ts",
}


def resolve_language(text: str = "", filename: str | None = None, language: str | None = None) -> str | None:
    """Pick a language from an explicit hint, a filename extension, or a shebang."""
    if language:
        return LANGUAGE_ALIASES.get(language.strip().lower())
    if filename:
        suffix = PurePath(filename).suffix.lower()
        if suffix in EXTENSIONS:
            return EXTENSIONS[suffix]
    return _language_from_shebang(text)


def _language_from_shebang(text: str) -> str | None:
    if not text.startswith("#!"):
        return None
    first_line = text[2:].split("\n", 1)[0].strip()
    parts = first_line.split()
    if not parts:
        return None
    interpreter = PurePath(parts[0]).name
    # "#!/usr/bin/env python3" names the interpreter as an argument
    if interpreter == "env":
        args = [p for p in parts[1:] if not p.startswith("-")]
        if not args:
            return None
        interpreter = args[0]
    return LANGUAGE_ALIASES.get(interpreter.lower())


def scan_syntax(
    content,
    filename: str | None = None,
    language: str | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    max_bytes: int = DEFAULT_MAX_BYTES,
) -> ScanResult | None:
    """Run the structural queries for the text's language. Never raises."""
    text = as_text(content)
    lang = resolve_language(text, filename, language)
    if lang is None:
        return None

    engine = get_engine(lang)
    if engine is None:
        log_event("debug", "syntax_unavailable", reason="no_engine", language=lang)
        return None

    if len(text.encode("utf-8", errors="replace")) > max_bytes:
        log_event("debug", "syntax_unavailable", reason="too_large", language=lang)
        return None

    findings = _run_with_timeout(engine.find, text, timeout)
    if findings is None:
        return None
    return _to_result(findings)


def _run_with_timeout(find, text: str, timeout: float) -> list[Finding] | None:
    """Run find(text) on a daemon thread; None on error or timeout.

    A parse that overruns its budget is abandoned, not interrupted.
    """
    outcome: dict = {}

    def target():
        try:
            outcome["findings"] = find(text)
        except Exception as e:
            outcome["error"] = e

    worker = threading.Thread(target=target, name="hookscan-syntax", daemon=True)
    try:
        worker.start()
    except RuntimeError:
        log_event("debug", "syntax_unavailable", reason="no_thread")
        return None
    worker.join(timeout)
    if worker.is_alive():
        log_event("debug", "syntax_unavailable", reason="timeout", timeout=timeout)
        return None
    if "error" in outcome:
        log_event("debug", "syntax_unavailable", reason="parse_failed", error=type(outcome["error"]).__name__)
        return None
    return outcome.get("findings")


def _to_result(findings: list[Finding]) -> ScanResult:
    result = ScanResult()
    evidence = EvidenceSet()
    score = 0
    for finding in findings:
        # Identical findings at the same position count once
        if not evidence.add(finding.evidence()):
            continue
        flag = CATEGORY_FLAGS.get(finding.category)
        if flag:
            setattr(result, flag, True)
        score += finding.severity
    result.evidence = evidence.to_list()
    result.score = clamp_score(score)
    return result
