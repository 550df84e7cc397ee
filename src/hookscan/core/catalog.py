"""
Pattern catalog for hookscan.

One entry per detection category: a compiled text rule, the points it adds
to a score when it matches at least once, and the ScanResult flag it sets.
Rules avoid nested or overlapping unbounded quantifiers so a scan stays
linear in the size of the text.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace


@dataclass(frozen=True)
class PatternRule:
    """A single catalog entry."""

    category: str
    rule: re.Pattern
    weight: int
    flag: str | None = None  # ScanResult attribute set on match


# === Categories ===

DESTRUCTIVE_FILE_OP = "destructive-file-op"
FILE_WRITE = "file-write"
SYSTEM_MODIFICATION = "system-modification"
NETWORK_CALL = "network-call"
PROCESS_EXECUTION = "process-execution"
DANGEROUS_IMPORT = "dangerous-import"
CREDENTIAL_ACCESS = "credential-access"
ENVIRONMENT_ACCESS = "environment-access"
DATABASE_ACCESS = "database-access"
CRYPTO_USE = "crypto-use"

# Category -> ScanResult flag. Categories not listed carry no flag.
CATEGORY_FLAGS = {
    DESTRUCTIVE_FILE_OP: "has_file_system_access",
    FILE_WRITE: "has_file_system_access",
    SYSTEM_MODIFICATION: "has_file_system_access",
    NETWORK_CALL: "has_network_access",
    PROCESS_EXECUTION: "has_process_execution",
    DANGEROUS_IMPORT: "has_dangerous_imports",
    CREDENTIAL_ACCESS: "has_credential_access",
}

_FLAGS = re.IGNORECASE | re.MULTILINE

# Modules whose import alone is worth noting
HIGH_RISK_MODULES = frozenset({
    "subprocess", "shutil", "requests", "urllib", "os", "sys",
    "socket", "ctypes", "pty", "pickle", "marshal",
})

_MODULES = "|".join(sorted(HIGH_RISK_MODULES))

# Node modules with the same standing as HIGH_RISK_MODULES
HIGH_RISK_NODE_MODULES = frozenset({"child_process", "fs", "net", "http", "https", "vm"})

_NODE_MODULES = "|".join(sorted(HIGH_RISK_NODE_MODULES))


# === Rules ===

_RULES = [
    (
        DESTRUCTIVE_FILE_OP,
        r"shutil\.rmtree"
        r"|\bos\.(?:remove|unlink|rmdir|removedirs)\b"
        r"|\bfs\.(?:unlink|rm|rmdir)(?:Sync)?\b"
        r"|\brm\s+-[a-z]*[rf]"
        r"|\bdel\s+/[fqs]"
        r"|Remove-Item",
        20,
    ),
    (
        FILE_WRITE,
        r"\bopen\([^,)\n]{0,256},\s*['\"][rbt+]{0,3}[wax]"
        r"|\bfs\.(?:writeFile|appendFile|createWriteStream)(?:Sync)?\b"
        r"|\.write_(?:text|bytes)\("
        r"|File\.WriteAllText|Out-File|Set-Content"
        r"|\btee\s"
        r"|(?<![-=<>&|0-9])>>?\s*(?!&|/dev/null)[~/\w.$\"']",
        20,
    ),
    (
        SYSTEM_MODIFICATION,
        r"\b(?:chmod|chown|chgrp|mkdir|makedirs|rmdir|mv|cp|move|copy|ln"
        r"|crontab|systemctl|launchctl|sudo)\b"
        r"|New-Item|Set-Acl",
        20,
    ),
    (
        NETWORK_CALL,
        r"\brequests\.|\burllib\.|\bhttpx\.|\bsocket\.|\bfetch\("
        r"|\baxios\b|XMLHttpRequest|\bcurl\s|\bwget\s"
        r"|Invoke-WebRequest|Net\.WebClient",
        15,
    ),
    (
        PROCESS_EXECUTION,
        r"\bsubprocess\.|\bos\.system\b|\bexec(?:Sync)?\(|\beval\("
        r"|\bshell_exec\b|\bsystem\(|\bpopen\b|\bspawn(?:Sync)?\("
        r"|child_process|Invoke-Expression|Start-Process",
        25,
    ),
    (
        DANGEROUS_IMPORT,
        rf"\bimport\s+(?:{_MODULES})(?=\s|;|,|\.|$)"
        rf"|\bfrom\s+(?:{_MODULES})(?:\.\w+)?\s+import\b"
        rf"|\brequire\(\s*['\"](?:node:)?(?:{_NODE_MODULES})['\"]\s*\)"
        rf"|\bfrom\s+['\"](?:node:)?(?:{_NODE_MODULES})['\"]",
        10,
    ),
    (
        CREDENTIAL_ACCESS,
        r"password|passwd|secret|token|api[_-]?key|credential"
        r"|aws_access_key|github_token|private[_-]?key|id_rsa|\.netrc"
        r"|\bssh|\bgpg\b",
        30,
    ),
    (
        ENVIRONMENT_ACCESS,
        r"\bos\.environ\b|\bprocess\.env\b|\bgetenv\("
        r"|\$\{?[a-z_][a-z0-9_]*\}?"
        r"|Environment\.GetEnvironmentVariable",
        5,
    ),
    (
        DATABASE_ACCESS,
        r"sqlite3|mysql|postgres(?:ql)?|mongodb|redis|psycopg2?|sqlalchemy"
        r"|\bconnect\([^\n]{0,200}database",
        10,
    ),
    (
        CRYPTO_USE,
        r"hashlib|crypto|bcrypt|scrypt|pbkdf2|\baes\b|\brsa\b|encrypt|decrypt",
        5,
    ),
]


CATALOG: tuple[PatternRule, ...] = tuple(
    PatternRule(category, re.compile(pattern, _FLAGS), weight, CATEGORY_FLAGS.get(category))
    for category, pattern, weight in _RULES
)

CATEGORIES = tuple(entry.category for entry in CATALOG)


def weight_of(category: str, catalog: tuple[PatternRule, ...] = CATALOG) -> int:
    """Return the weight of a category, or 0 if the catalog does not list it."""
    for entry in catalog:
        if entry.category == category:
            return entry.weight
    return 0


def with_weights(overrides: dict[str, int], catalog: tuple[PatternRule, ...] = CATALOG) -> tuple[PatternRule, ...]:
    """Return a copy of catalog with some weights replaced.

    Raises ValueError for a category the catalog does not know.
    """
    unknown = set(overrides) - {entry.category for entry in catalog}
    if unknown:
        raise ValueError(f"unknown category '{sorted(unknown)[0]}'")
    if not overrides:
        return catalog
    return tuple(
        replace(entry, weight=overrides[entry.category]) if entry.category in overrides else entry
        for entry in catalog
    )
