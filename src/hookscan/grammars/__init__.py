"""
Language-aware syntax engines for hookscan.

Each engine module exports:
- LANGUAGES: list[str] - language names this engine parses
- find(text: str) -> list[Finding] - structural findings for the text

find() may raise on text it cannot parse; the caller treats any exception
as "unavailable". A module whose import fails (for example because its
parser library is not installed) is simply not registered.
"""

from __future__ import annotations

import importlib
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional, Protocol


@dataclass(frozen=True)
class Finding:
    """A structural match in parsed hook source."""

    category: str  # catalog category, e.g. "network-call"
    label: str  # what matched, e.g. "requests.get"
    line: int  # 1-based
    column: int  # 1-based
    severity: int  # points added to the syntax score

    def evidence(self) -> str:
        return f"{self.category}: {self.label} at {self.line}:{self.column}"


class SyntaxEngine(Protocol):
    """Protocol for engine modules."""

    def find(self, text: str) -> list[Finding]:
        """Parse text and return findings. May raise on unparseable input."""
        ...


# Severity tiers shared by the engines
DANGER_HIGH = 30
DANGER = 25
DANGER_LOW = 20
SUSPICIOUS = 15
WARN = 10
NOTE = 5

# Unparseable lines an engine may blank out before giving up
MAX_RECOVERIES = 16


def blank_line(text: str, lineno: int) -> Optional[str]:
    """Replace a 1-based line with spaces, keeping every offset intact.

    A line past the end or already blank falls back to the nearest non-blank
    line above it. Returns None when there is nothing left to blank.
    """
    lines = text.split("\n")
    index = min(lineno, len(lines)) - 1
    while index >= 0 and not lines[index].strip():
        index -= 1
    if index < 0:
        return None
    lines[index] = " " * len(lines[index])
    return "\n".join(lines)


def _discover_engines() -> dict[str, str]:
    """Discover engine modules and build language -> module mapping."""
    engines = {}
    grammar_dir = Path(__file__).parent
    for file in grammar_dir.glob("*.py"):
        if file.name.startswith("_"):
            continue
        module_name = file.stem
        try:
            module = importlib.import_module(f".{module_name}", package="hookscan.grammars")
            for language in getattr(module, "LANGUAGES", []):
                engines[language] = module_name
        except ImportError:
            continue
    return engines


# Build engine mapping at import time
KNOWN_ENGINES = _discover_engines()


def get_engine(language: str) -> Optional[SyntaxEngine]:
    """Return the engine module for a language, or None if none is available."""
    module_name = KNOWN_ENGINES.get(language)
    if not module_name:
        return None
    return _load_engine(module_name)


@lru_cache(maxsize=16)
def _load_engine(module_name: str) -> Optional[SyntaxEngine]:
    """Load an engine module by name (cached within process)."""
    try:
        return importlib.import_module(f".{module_name}", package="hookscan.grammars")
    except ImportError:
        return None
