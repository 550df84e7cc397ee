"""Hook descriptors: kind inference and discovery from directories and stack files."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from hookscan.core.models import Hook, HookKind

DEFAULT_HOOKS_DIR = Path(".claude") / "hooks"
HOOK_EXTENSIONS = (".js", ".ts", ".py", ".sh")

# Checked in order; first substring hit wins
KIND_PATTERNS: list[tuple[tuple[str, ...], HookKind]] = [
    (("post-tool", "posttool"), HookKind.POST_TOOL_USE),
    (("pre-tool", "pretool"), HookKind.PRE_TOOL_USE),
    (("session-start", "sessionstart"), HookKind.SESSION_START),
    (("session-end", "sessionend"), HookKind.SESSION_END),
    (("user-prompt", "prompt"), HookKind.USER_PROMPT_SUBMIT),
    (("notification",), HookKind.NOTIFICATION),
    (("subagent-stop", "subagentstop"), HookKind.SUBAGENT_STOP),
    (("pre-compact", "precompact"), HookKind.PRE_COMPACT),
    (("stop",), HookKind.STOP),
]


def infer_hook_kind(name: str) -> HookKind:
    """Infer the lifecycle event from a hook's name. Unrecognized names are PreToolUse."""
    lower_name = name.lower()
    for needles, kind in KIND_PATTERNS:
        if any(needle in lower_name for needle in needles):
            return kind
    return HookKind.PRE_TOOL_USE


def _parse_kind(value: Any, name: str) -> HookKind:
    """Use an explicit kind when it names a known event, else infer from name."""
    if isinstance(value, str):
        try:
            return HookKind(value)
        except ValueError:
            pass
    return infer_hook_kind(name)


def load_hooks(directory: Path = DEFAULT_HOOKS_DIR) -> list[Hook]:
    """Read hook files from a directory. A missing directory yields no hooks.

    Files are read as UTF-8 with replacement, so binary files still produce
    a descriptor.
    """
    if not directory.is_dir():
        return []
    hooks = []
    for path in sorted(directory.iterdir()):
        if not path.is_file() or path.suffix not in HOOK_EXTENSIONS:
            continue
        hooks.append(load_hook_file(path))
    return hooks


def load_hook_file(path: Path) -> Hook:
    """Build a descriptor for a single hook file."""
    content = path.read_bytes().decode("utf-8", errors="replace")
    return Hook(
        name=path.stem,
        kind=infer_hook_kind(path.stem),
        content=content,
        file_path=str(path),
    )


def load_stack_hooks(data: Any) -> list[Hook]:
    """Build descriptors from a stack document's "hooks" list.

    Entries that are not objects or have no string content are skipped.
    """
    if not isinstance(data, dict) or not isinstance(data.get("hooks"), list):
        return []
    hooks = []
    for entry in data["hooks"]:
        if not isinstance(entry, dict) or not isinstance(entry.get("content"), str):
            continue
        name = entry.get("name") if isinstance(entry.get("name"), str) else "unnamed"
        hooks.append(
            Hook(
                name=name,
                kind=_parse_kind(entry.get("type", entry.get("kind")), name),
                content=entry["content"],
                matcher=_optional_str(entry.get("matcher")),
                file_path=_optional_str(entry.get("filePath")),
                description=_optional_str(entry.get("description")),
            )
        )
    return hooks


def _optional_str(value: Any) -> str | None:
    return value if isinstance(value, str) else None
