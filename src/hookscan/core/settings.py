"""
Settings tree walker.

A settings document registers hooks per event type:

    {"hooks": {"PreToolUse": [{"code": "..."},
                              {"matcher": "*.js", "hooks": [{"code": "..."}]}]}}

Every entry carrying a string "code" is an inline hook. Its address records
the path to it, e.g. "PreToolUse[0].inline" or "PreToolUse[1].hooks[0].inline".
"""

from __future__ import annotations

from collections.abc import Iterator
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from hookscan.core.config import Config, log_event
from hookscan.core.models import AddressedSnippet, ScanResult
from hookscan.core.scanner import DEFAULT_CONFIG, scan


def walk_hooks(tree: Any) -> Iterator[AddressedSnippet]:
    """Yield every inline snippet in an event type -> entries mapping.

    Nodes of the wrong shape are skipped.
    """
    if not isinstance(tree, dict):
        return
    for event, entries in tree.items():
        if not isinstance(event, str):
            continue
        yield from _walk_entries(event, entries)


def _walk_entries(prefix: str, entries: Any) -> Iterator[AddressedSnippet]:
    if not isinstance(entries, list):
        return
    for i, entry in enumerate(entries):
        if not isinstance(entry, dict):
            continue
        path = f"{prefix}[{i}]"
        code = entry.get("code")
        if isinstance(code, str):
            language = entry.get("language")
            yield AddressedSnippet(
                address=f"{path}.inline",
                content=code,
                language=language if isinstance(language, str) else None,
            )
        nested = entry.get("hooks")
        if isinstance(nested, list):
            yield from _walk_entries(f"{path}.hooks", nested)


def scan_settings_hooks(settings: Any, config: Config | None = None) -> dict[str, ScanResult]:
    """Scan every inline hook in a settings document, keyed by address."""
    if config is None:
        config = DEFAULT_CONFIG
    if not isinstance(settings, dict) or not isinstance(settings.get("hooks"), dict):
        return {}

    snippets = list(walk_hooks(settings["hooks"]))
    if not snippets:
        return {}

    def scan_snippet(snippet: AddressedSnippet) -> ScanResult:
        return scan(snippet.content, language=snippet.language, config=config)

    with ThreadPoolExecutor(max_workers=min(config.workers, len(snippets))) as pool:
        results = list(pool.map(scan_snippet, snippets))

    log_event("debug", "settings_scanned", snippets=len(snippets))
    return {snippet.address: result for snippet, result in zip(snippets, results)}
