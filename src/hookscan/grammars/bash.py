"""
Bash engine for hookscan.

Parses shell hooks with bashlex (a port of bash's own parser) and walks the
resulting AST for commands, pipelines, redirects and command substitutions.
"""

from __future__ import annotations

import os
import re
from typing import Any

import bashlex
from bashlex.errors import ParsingError

from hookscan.core.catalog import (
    DESTRUCTIVE_FILE_OP,
    FILE_WRITE,
    NETWORK_CALL,
    PROCESS_EXECUTION,
    SYSTEM_MODIFICATION,
)
from hookscan.grammars import (
    DANGER,
    DANGER_HIGH,
    MAX_RECOVERIES,
    SUSPICIOUS,
    WARN,
    Finding,
    blank_line,
)

LANGUAGES = ["bash"]

# === Command tables ===

DOWNLOADERS = frozenset({"curl", "wget"})
REMOTE_COMMANDS = frozenset({"ssh", "scp", "rsync", "nc", "ncat", "netcat", "ftp", "sftp", "telnet"})
SHELLS = frozenset({"sh", "bash", "zsh", "dash", "ksh", "fish"})
INTERPRETERS = {"python": "-c", "python3": "-c", "node": "-e", "perl": "-e", "ruby": "-e"}
PERMISSION_COMMANDS = frozenset({"chmod", "chown", "chgrp", "chattr", "setfacl"})
PRIVILEGE_COMMANDS = frozenset({"sudo", "doas", "su"})

OUTPUT_REDIRECTS = frozenset({">", ">>", ">|", "&>", "&>>"})
SAFE_REDIRECT_TARGETS = frozenset({"/dev/null", "/dev/stdout", "/dev/stderr", "-"})
SENSITIVE_TARGET = re.compile(r"^/(?:etc|dev|proc|sys|boot)\b")


def _blank(match: re.Match) -> str:
    return " " * len(match.group(0))


def preprocess(text: str) -> str:
    """Blank out comment lines and the `time` reserved word, which bashlex rejects.

    Character offsets are preserved so findings keep their positions.
    """
    text = re.sub(r"(?m)^[ \t]*#[^\n]*", _blank, text)
    return re.sub(r"\btime\s+(-p\s+)?", _blank, text)


def find(text: str) -> list[Finding]:
    """Parse shell source and return findings.

    Lines bashlex rejects are blanked and the rest is re-parsed. Raises once
    more than MAX_RECOVERIES lines would have to go.
    """
    source, nodes = _parse(preprocess(text))
    lines = _LineIndex(source)
    findings: list[Finding] = []
    seen: set[int] = set()
    for root in nodes:
        for node in _walk(root, seen):
            findings.extend(_check_node(node, lines))
    return findings


def _parse(source: str) -> tuple[str, list[Any]]:
    for _ in range(MAX_RECOVERIES):
        if not source.strip():
            return source, []
        try:
            return source, bashlex.parse(source)
        except ParsingError as e:
            lineno = source.count("\n", 0, e.position) + 1
            recovered = blank_line(source, lineno)
            if recovered is None:
                raise
            source = recovered
    if not source.strip():
        return source, []
    return source, bashlex.parse(source)


class _LineIndex:
    """Converts character offsets to 1-based (line, column)."""

    def __init__(self, text: str):
        self._starts = [0]
        for i, c in enumerate(text):
            if c == "\n":
                self._starts.append(i + 1)

    def position(self, offset: int) -> tuple[int, int]:
        lo, hi = 0, len(self._starts) - 1
        while lo < hi:
            mid = (lo + hi + 1) // 2
            if self._starts[mid] <= offset:
                lo = mid
            else:
                hi = mid - 1
        return lo + 1, offset - self._starts[lo] + 1


def _children(node: Any) -> list[Any]:
    children = []
    for attr in ("parts", "list", "redirects"):
        children.extend(getattr(node, attr, None) or [])
    for attr in ("command", "output", "body"):
        child = getattr(node, attr, None)
        if hasattr(child, "kind"):
            children.append(child)
    return children


def _walk(node: Any, seen: set[int]):
    """Yield node and all its descendants once each."""
    stack = [node]
    while stack:
        current = stack.pop()
        if id(current) in seen:
            continue
        seen.add(id(current))
        yield current
        stack.extend(reversed(_children(current)))


def _finding(node: Any, lines: _LineIndex, category: str, label: str, severity: int) -> Finding:
    start = getattr(node, "pos", (0, 0))[0]
    line, column = lines.position(start)
    return Finding(category, label, line, column, severity)


def _words(node: Any) -> list[str]:
    return [p.word for p in getattr(node, "parts", []) if p.kind == "word"]


def _program(word: str) -> str:
    return os.path.basename(word)


# === Checks ===


def _check_node(node: Any, lines: _LineIndex) -> list[Finding]:
    kind = getattr(node, "kind", None)
    if kind == "command":
        return _check_command(node, lines)
    if kind == "pipeline":
        return _check_pipeline(node, lines)
    if kind == "redirect":
        return _check_redirect(node, lines)
    if kind in ("commandsubstitution", "processsubstitution"):
        label = "$(...)" if kind == "commandsubstitution" else "<(...)"
        return [_finding(node, lines, PROCESS_EXECUTION, label, SUSPICIOUS)]
    return []


def _check_pipeline(node: Any, lines: _LineIndex) -> list[Finding]:
    """Flag a download piped into a shell."""
    programs = []
    for part in node.parts:
        if part.kind == "command":
            words = _words(part)
            if words:
                programs.append(_program(words[0]))
    for i, program in enumerate(programs):
        if program not in DOWNLOADERS:
            continue
        for later in programs[i + 1:]:
            if later in SHELLS or later in INTERPRETERS:
                label = f"{program} | {later}"
                return [
                    _finding(node, lines, NETWORK_CALL, label, DANGER_HIGH),
                    _finding(node, lines, PROCESS_EXECUTION, label, DANGER_HIGH),
                ]
    return []


def _check_command(node: Any, lines: _LineIndex) -> list[Finding]:
    words = _words(node)
    findings: list[Finding] = []

    # Privilege wrappers: note them, then look at what they run
    while words and _program(words[0]) in PRIVILEGE_COMMANDS:
        findings.append(_finding(node, lines, SYSTEM_MODIFICATION, _program(words[0]), DANGER))
        words = words[1:]
        while words and words[0].startswith("-"):
            words = words[2:] if words[0] in ("-u", "-g") else words[1:]

    if not words:
        return findings

    program = _program(words[0])
    args = words[1:]

    if program in DOWNLOADERS:
        findings.append(_finding(node, lines, NETWORK_CALL, program, WARN))
    elif program in REMOTE_COMMANDS:
        findings.append(_finding(node, lines, NETWORK_CALL, program, WARN))
    elif program in SHELLS and _has_short_flag(args, "c"):
        findings.append(_finding(node, lines, PROCESS_EXECUTION, f"{program} -c", DANGER_HIGH))
    elif program in INTERPRETERS and INTERPRETERS[program] in args:
        findings.append(_finding(node, lines, PROCESS_EXECUTION, f"{program} {INTERPRETERS[program]}", WARN))
    elif program == "eval":
        findings.append(_finding(node, lines, PROCESS_EXECUTION, "eval", DANGER_HIGH))
    elif program in ("source", "."):
        findings.append(_finding(node, lines, PROCESS_EXECUTION, program, WARN))
    elif program == "rm":
        recursive = _has_short_flag(args, "r") or _has_short_flag(args, "R") or "--recursive" in args
        force = _has_short_flag(args, "f") or "--force" in args
        if recursive and force:
            findings.append(_finding(node, lines, DESTRUCTIVE_FILE_OP, "rm -rf", DANGER))
        else:
            findings.append(_finding(node, lines, DESTRUCTIVE_FILE_OP, "rm", WARN))
    elif program in PERMISSION_COMMANDS:
        findings.append(_finding(node, lines, SYSTEM_MODIFICATION, program, WARN))
    elif program == "dd":
        findings.append(_finding(node, lines, DESTRUCTIVE_FILE_OP, "dd", DANGER))

    return findings


def _has_short_flag(args: list[str], letter: str) -> bool:
    """Check for a short flag, alone or combined (-c, -lc, -rf)."""
    for arg in args:
        if arg.startswith("-") and not arg.startswith("--") and letter in arg[1:]:
            return True
    return False


def _check_redirect(node: Any, lines: _LineIndex) -> list[Finding]:
    if getattr(node, "type", None) not in OUTPUT_REDIRECTS:
        return []
    output = getattr(node, "output", None)
    # Integer outputs are fd duplication (2>&1)
    if not hasattr(output, "word"):
        return []
    target = output.word
    if target in SAFE_REDIRECT_TARGETS or target.startswith("&"):
        return []
    if SENSITIVE_TARGET.match(target):
        return [_finding(node, lines, FILE_WRITE, f"> {target}", DANGER)]
    return [_finding(node, lines, FILE_WRITE, f"> {target}", WARN)]
