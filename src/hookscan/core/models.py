"""Data model shared by the scan strategies, the tree walker and the report."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class HookKind(str, Enum):
    """Lifecycle event a hook is bound to."""

    PRE_TOOL_USE = "PreToolUse"
    POST_TOOL_USE = "PostToolUse"
    SESSION_START = "SessionStart"
    SESSION_END = "SessionEnd"
    USER_PROMPT_SUBMIT = "UserPromptSubmit"
    NOTIFICATION = "Notification"
    SUBAGENT_STOP = "SubagentStop"
    PRE_COMPACT = "PreCompact"
    STOP = "Stop"

    def __str__(self) -> str:
        return self.value


class RiskLevel(str, Enum):
    SAFE = "safe"
    WARNING = "warning"
    DANGEROUS = "dangerous"

    def __str__(self) -> str:
        return self.value


# ScanResult attribute names, in wire order
FLAGS = (
    "has_file_system_access",
    "has_network_access",
    "has_process_execution",
    "has_dangerous_imports",
    "has_credential_access",
)

_WIRE_NAMES = {
    "has_file_system_access": "hasFileSystemAccess",
    "has_network_access": "hasNetworkAccess",
    "has_process_execution": "hasProcessExecution",
    "has_dangerous_imports": "hasDangerousImports",
    "has_credential_access": "hasCredentialAccess",
}

MAX_SCORE = 100


def clamp_score(score: int) -> int:
    """Clamp a raw score into [0, MAX_SCORE]."""
    return max(0, min(int(score), MAX_SCORE))


class EvidenceSet:
    """Insertion-ordered set of evidence strings."""

    def __init__(self, items=()):
        self._items: list[str] = []
        self._seen: set[str] = set()
        for item in items:
            self.add(item)

    def add(self, item: str) -> bool:
        """Add item, returning False if it was already present."""
        if item in self._seen:
            return False
        self._seen.add(item)
        self._items.append(item)
        return True

    def __iter__(self):
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item: object) -> bool:
        return item in self._seen

    def to_list(self) -> list[str]:
        return list(self._items)


@dataclass
class ScanResult:
    """Risk assessment for one piece of hook text."""

    has_file_system_access: bool = False
    has_network_access: bool = False
    has_process_execution: bool = False
    has_dangerous_imports: bool = False
    has_credential_access: bool = False
    evidence: list[str] = field(default_factory=list)
    score: int = 0

    @property
    def categories(self) -> list[str]:
        """Distinct categories named by the evidence, in evidence order."""
        seen = EvidenceSet(e.split(":", 1)[0] for e in self.evidence)
        return seen.to_list()

    def to_dict(self) -> dict:
        """Camel-cased mapping used for JSON output."""
        data: dict = {_WIRE_NAMES[name]: getattr(self, name) for name in FLAGS}
        data["evidence"] = list(self.evidence)
        data["score"] = self.score
        return data


@dataclass
class Hook:
    """A hook as discovered from a file, a stack bundle or a settings tree.

    scan_result and risk_level are derived from content and take no part in
    equality.
    """

    name: str
    kind: HookKind
    content: str
    matcher: str | None = None
    file_path: str | None = None
    description: str | None = None
    scan_result: ScanResult | None = field(default=None, compare=False)
    risk_level: RiskLevel | None = field(default=None, compare=False)


@dataclass(frozen=True)
class AddressedSnippet:
    """Inline hook code found in a settings tree, keyed by its address."""

    address: str
    content: str
    language: str | None = None
