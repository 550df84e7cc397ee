"""Tests for tools/check_style.py."""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parent.parent
CHECK_STYLE = REPO_ROOT / "tools" / "check_style.py"


def run_check(directory: Path) -> subprocess.CompletedProcess:
    return subprocess.run(
        [sys.executable, str(CHECK_STYLE), str(directory)],
        capture_output=True,
        text=True,
        timeout=30,
    )


def test_source_tree_is_clean():
    result = run_check(REPO_ROOT / "src")
    assert result.returncode == 0, result.stdout


def test_flags_subprocess_import(tmp_path):
    (tmp_path / "bad.py").write_text("import subprocess\nfrom subprocess import run\n")
    result = run_check(tmp_path)
    assert result.returncode == 1
    assert "Found 2 banned construction(s)" in result.stdout


def test_flags_eval_and_exec(tmp_path):
    (tmp_path / "bad.py").write_text("eval(text)\nexec(text)\n")
    result = run_check(tmp_path)
    assert result.returncode == 1
    assert "bad.py:1: eval()" in result.stdout
    assert "bad.py:2: exec()" in result.stdout


def test_strings_are_fine(tmp_path):
    (tmp_path / "ok.py").write_text('CALLS = {"eval", "exec", "subprocess.run"}\n')
    assert run_check(tmp_path).returncode == 0


def test_missing_directory(tmp_path):
    result = run_check(tmp_path / "nope")
    assert result.returncode == 1
    assert "Directory not found" in result.stdout
