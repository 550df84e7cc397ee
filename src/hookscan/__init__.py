"""
hookscan - static safety scanner for agent lifecycle hooks.

Scores hook code by the capabilities it exercises without ever running it.
"""

from __future__ import annotations

__version__ = "0.1.0"

from hookscan.core.hooks import infer_hook_kind
from hookscan.core.report import generate_safety_report
from hookscan.core.risk import classify_risk
from hookscan.core.scanner import scan, scan_hook
from hookscan.core.settings import scan_settings_hooks

__all__ = [
    "classify_risk",
    "generate_safety_report",
    "infer_hook_kind",
    "scan",
    "scan_hook",
    "scan_settings_hooks",
    "__version__",
]
