"""
Python engine for hookscan.

Parses hook source with the standard library ast module and resolves call
targets through the module's import aliases, so `import subprocess as sp;
sp.run(...)` and `from os import system; system(...)` are both seen as the
calls they are.
"""

from __future__ import annotations

import ast
import re

from hookscan.core.catalog import (
    CREDENTIAL_ACCESS,
    DANGEROUS_IMPORT,
    DESTRUCTIVE_FILE_OP,
    ENVIRONMENT_ACCESS,
    FILE_WRITE,
    HIGH_RISK_MODULES,
    NETWORK_CALL,
    PROCESS_EXECUTION,
    SYSTEM_MODIFICATION,
)
from hookscan.grammars import (
    DANGER,
    DANGER_HIGH,
    DANGER_LOW,
    MAX_RECOVERIES,
    NOTE,
    SUSPICIOUS,
    WARN,
    Finding,
    blank_line,
)

LANGUAGES = ["python"]

# === Call tables ===

SUBPROCESS_CALLS = frozenset({
    "subprocess.run", "subprocess.Popen", "subprocess.call",
    "subprocess.check_call", "subprocess.check_output",
    "subprocess.getoutput", "subprocess.getstatusoutput",
})

SHELL_CALLS = frozenset({"os.system", "os.popen", "pty.spawn", "commands.getoutput"})

EXEC_PREFIXES = ("os.exec", "os.spawn", "os.posix_spawn")

DYNAMIC_EXEC = frozenset({"eval", "exec", "compile", "__import__", "importlib.import_module"})

# Programs that make a subprocess call dangerous on their own
DANGEROUS_PROGRAMS = frozenset({
    "rm", "rmdir", "dd", "mkfs", "fdisk", "sudo", "su",
    "chmod", "chown", "kill", "pkill", "shred",
})

DELETE_CALLS = {
    "shutil.rmtree": DANGER,
    "os.remove": DANGER_LOW,
    "os.unlink": DANGER_LOW,
    "os.rmdir": DANGER_LOW,
    "os.removedirs": DANGER_LOW,
}

NETWORK_CALLS = frozenset({
    "requests.get", "requests.post", "requests.put", "requests.delete",
    "requests.patch", "requests.head", "requests.request", "requests.Session",
    "httpx.get", "httpx.post", "httpx.put", "httpx.delete", "httpx.patch",
    "httpx.request", "httpx.Client", "httpx.AsyncClient",
    "urllib.request.urlopen", "urllib.request.urlretrieve", "urllib.urlopen",
    "http.client.HTTPConnection", "http.client.HTTPSConnection",
    "socket.socket", "socket.create_connection",
    "ftplib.FTP", "smtplib.SMTP", "telnetlib.Telnet",
})

SYSTEM_CALLS = frozenset({
    "os.chmod", "os.chown", "os.rename", "os.replace", "os.makedirs",
    "os.mkdir", "os.symlink", "os.link",
    "shutil.move", "shutil.copy", "shutil.copy2", "shutil.copyfile",
    "shutil.copytree", "shutil.chown",
})

ENV_READERS = frozenset({"os.getenv", "os.environ.get", "os.environ.pop"})

SECRET_NAME = re.compile(r"password|passwd|secret|key|token|credential|auth", re.IGNORECASE)

SENSITIVE_WRITE_PATH = re.compile(r"^(?:/(?:etc|bin|sbin|usr/bin|usr/sbin|root|boot)\b|~/\.|/home/[^/]+/\.)")

SECRET_FILE = re.compile(r"\.ssh\b|id_rsa|\.aws/credentials|\.netrc|\.gnupg|\.docker/config\.json")


def find(text: str) -> list[Finding]:
    """Parse Python source and return findings.

    Lines that do not parse are blanked and the rest is re-parsed, so junk
    appended to a hook cannot hide its valid code. Raises once more than
    MAX_RECOVERIES lines would have to go.
    """
    tree = _parse(text)
    aliases = _import_aliases(tree)
    findings: list[Finding] = []

    for node in ast.walk(tree):
        if isinstance(node, (ast.Import, ast.ImportFrom)):
            findings.extend(_check_import(node))
        elif isinstance(node, ast.Call):
            name = _resolve(_call_name(node.func), aliases)
            if name:
                findings.extend(_check_call(node, name))
        elif isinstance(node, ast.Subscript):
            target = _resolve(_call_name(node.value), aliases)
            if target == "os.environ":
                findings.append(_env_finding(node, _literal(node.slice)))

    return findings


def _parse(text: str) -> ast.AST:
    source = text
    for _ in range(MAX_RECOVERIES):
        try:
            return ast.parse(source)
        except SyntaxError as e:
            recovered = blank_line(source, e.lineno) if e.lineno else None
            if recovered is None:
                raise
            source = recovered
    return ast.parse(source)


# === Name resolution ===


def _import_aliases(tree: ast.AST) -> dict[str, str]:
    """Map locally bound names to the dotted names they were imported as."""
    aliases: dict[str, str] = {}
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                if alias.asname:
                    aliases[alias.asname] = alias.name
                else:
                    head = alias.name.split(".")[0]
                    aliases[head] = head
        elif isinstance(node, ast.ImportFrom) and node.module and not node.level:
            for alias in node.names:
                if alias.name == "*":
                    continue
                aliases[alias.asname or alias.name] = f"{node.module}.{alias.name}"
    return aliases


def _call_name(node: ast.AST) -> str:
    """Return the dotted name of an expression, or '' if it is not a plain name chain."""
    parts = []
    current = node
    while isinstance(current, ast.Attribute):
        parts.append(current.attr)
        current = current.value
    if not isinstance(current, ast.Name):
        return ""
    parts.append(current.id)
    return ".".join(reversed(parts))


def _resolve(name: str, aliases: dict[str, str]) -> str:
    if not name:
        return ""
    head, _, rest = name.partition(".")
    base = aliases.get(head, head)
    return f"{base}.{rest}" if rest else base


def _literal(node: ast.AST | None) -> str | None:
    """Return the value of a string constant node, else None."""
    if isinstance(node, ast.Constant) and isinstance(node.value, str):
        return node.value
    return None


def _first_arg(node: ast.Call) -> ast.AST | None:
    return node.args[0] if node.args else None


def _keyword(node: ast.Call, name: str) -> ast.AST | None:
    for kw in node.keywords:
        if kw.arg == name:
            return kw.value
    return None


def _finding(node: ast.AST, category: str, label: str, severity: int) -> Finding:
    return Finding(category, label, getattr(node, "lineno", 1), getattr(node, "col_offset", 0) + 1, severity)


# === Checks ===


def _check_import(node: ast.Import | ast.ImportFrom) -> list[Finding]:
    if isinstance(node, ast.Import):
        modules = [alias.name for alias in node.names]
    else:
        if node.level or not node.module:
            return []
        modules = [node.module]
    findings = []
    for module in modules:
        if module.split(".")[0] in HIGH_RISK_MODULES:
            findings.append(_finding(node, DANGEROUS_IMPORT, f"import {module}", NOTE))
    return findings


def _check_call(node: ast.Call, name: str) -> list[Finding]:
    if name in SUBPROCESS_CALLS:
        return [_finding(node, PROCESS_EXECUTION, name, _subprocess_severity(node))]

    if name in SHELL_CALLS or name.startswith(EXEC_PREFIXES):
        return [_finding(node, PROCESS_EXECUTION, name, DANGER_HIGH)]

    if name in DYNAMIC_EXEC:
        # A literal argument is at least inspectable; anything else is opaque
        severity = WARN if _literal(_first_arg(node)) is not None else DANGER_HIGH
        return [_finding(node, PROCESS_EXECUTION, name, severity)]

    if name in DELETE_CALLS:
        return [_finding(node, DESTRUCTIVE_FILE_OP, name, DELETE_CALLS[name])]

    if name in NETWORK_CALLS:
        severity = WARN if _literal(_first_arg(node)) is not None else SUSPICIOUS
        return [_finding(node, NETWORK_CALL, name, severity)]

    if name in SYSTEM_CALLS:
        return [_finding(node, SYSTEM_MODIFICATION, name, WARN)]

    if name in ENV_READERS:
        return [_env_finding(node, _literal(_first_arg(node)))]

    if name in ("open", "io.open", "builtins.open"):
        return _check_open(node, name)

    if name.endswith((".write_text", ".write_bytes")):
        return [_finding(node, FILE_WRITE, name.rsplit(".", 1)[-1], WARN)]

    return []


def _subprocess_severity(node: ast.Call) -> int:
    shell = _keyword(node, "shell")
    if isinstance(shell, ast.Constant) and shell.value is True:
        return DANGER_HIGH
    first = _first_arg(node) or _keyword(node, "args")
    if isinstance(first, (ast.List, ast.Tuple)) and first.elts:
        program = _literal(first.elts[0])
        if program is not None and program.rsplit("/", 1)[-1] in DANGEROUS_PROGRAMS:
            return DANGER_HIGH
    program = _literal(first)
    if program is not None and program.split(" ", 1)[0].rsplit("/", 1)[-1] in DANGEROUS_PROGRAMS:
        return DANGER_HIGH
    return SUSPICIOUS


def _check_open(node: ast.Call, name: str) -> list[Finding]:
    path = _literal(_first_arg(node))
    mode_node = node.args[1] if len(node.args) > 1 else _keyword(node, "mode")
    mode = _literal(mode_node) or "r"
    findings = []

    if path is not None and SECRET_FILE.search(path):
        findings.append(_finding(node, CREDENTIAL_ACCESS, f"{name}({path!r})", DANGER))

    if any(c in mode for c in "wax+"):
        if path is not None and SENSITIVE_WRITE_PATH.match(path):
            findings.append(_finding(node, FILE_WRITE, f"{name}({path!r}, {mode!r})", DANGER))
        else:
            findings.append(_finding(node, FILE_WRITE, f"{name}(..., {mode!r})", WARN))

    return findings


def _env_finding(node: ast.AST, key: str | None) -> Finding:
    if key is not None and SECRET_NAME.search(key):
        return _finding(node, CREDENTIAL_ACCESS, f"os.environ[{key!r}]", WARN)
    label = f"os.environ[{key!r}]" if key is not None else "os.environ[...]"
    return _finding(node, ENVIRONMENT_ACCESS, label, NOTE)
