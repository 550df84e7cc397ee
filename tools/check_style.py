#!/usr/bin/env python3
"""Check for banned Python constructions in hookscan source.

Banned constructions:

    Construction          Reason                            Use instead
    --------------------  --------------------------------  --------------------------
    import subprocess     hooks are read, never run         static analysis only
    from subprocess ...
    eval(...)             scanned text must never be run    ast / bashlex parsing
    exec(...)
"""

import ast
import os
import sys

BANNED_MODULES = frozenset({"subprocess"})
BANNED_CALLS = frozenset({"eval", "exec"})


def find_python_files(directory):
    """Find all .py files recursively."""
    result = []
    for root, dirs, files in os.walk(directory):
        dirs[:] = [d for d in dirs if d != "__pycache__"]
        for f in files:
            if f.endswith(".py"):
                result.append(os.path.join(root, f))
    result.sort()
    return result


def check_file(filepath):
    with open(filepath) as f:
        source = f.read()

    tree = ast.parse(source, filepath)
    errors = []

    for node in ast.walk(tree):
        lineno = getattr(node, "lineno", 0)

        # import subprocess
        if isinstance(node, ast.Import):
            for alias in node.names:
                if alias.name.split(".")[0] in BANNED_MODULES:
                    errors.append((lineno, f"import {alias.name}: banned, hooks are never run"))

        # from subprocess import ...
        if isinstance(node, ast.ImportFrom):
            if node.module and node.module.split(".")[0] in BANNED_MODULES:
                errors.append((lineno, f"from {node.module} import: banned, hooks are never run"))

        # eval(...) / exec(...)
        if isinstance(node, ast.Call) and isinstance(node.func, ast.Name):
            if node.func.id in BANNED_CALLS:
                errors.append((lineno, f"{node.func.id}(): banned, scanned text is never run"))

    return errors


def main():
    src_dir = "src"
    if len(sys.argv) > 1:
        src_dir = sys.argv[1]

    if not os.path.isdir(src_dir):
        print(f"Directory not found: {src_dir}")
        sys.exit(1)

    files = find_python_files(src_dir)
    if not files:
        print(f"No Python files found in: {src_dir}")
        sys.exit(1)

    all_errors = []
    for filepath in files:
        try:
            errors = check_file(filepath)
            for lineno, description in errors:
                all_errors.append((filepath, lineno, description))
        except SyntaxError as e:
            print(f"Syntax error in {filepath}: {e}")
            sys.exit(1)

    if not all_errors:
        sys.exit(0)

    print(f"Found {len(all_errors)} banned construction(s):")
    for filepath, lineno, description in sorted(all_errors):
        print(f"  {filepath}:{lineno}: {description}")
    sys.exit(1)


if __name__ == "__main__":
    main()
