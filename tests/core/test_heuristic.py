"""Tests for the heuristic scanner."""

import pytest

from hookscan.core.catalog import NETWORK_CALL, with_weights
from hookscan.core.heuristic import as_text, scan_heuristic


class TestAsText:
    def test_str_passthrough(self):
        assert as_text("abc") == "abc"

    def test_bytes_decoded(self):
        assert as_text(b"rm -rf /") == "rm -rf /"

    def test_invalid_utf8_replaced(self):
        assert as_text(b"\xff\xfeok") == "��ok"

    @pytest.mark.parametrize("value", [None, 42, ["rm -rf /"], {"code": "x"}])
    def test_non_text_is_empty(self, value):
        assert as_text(value) == ""


class TestScanHeuristic:
    """Catalog application to raw text."""

    def test_empty_text(self):
        result = scan_heuristic("")
        assert result.score == 0
        assert result.evidence == []
        assert not result.has_network_access

    def test_benign_text(self):
        result = scan_heuristic("console.log('hello')")
        assert result.score == 0
        assert result.evidence == []

    def test_counts_occurrences(self):
        result = scan_heuristic("fetch(a)\nfetch(b)\nfetch(c)")
        assert result.evidence == ["network-call: 3 occurrence(s)"]
        assert result.has_network_access

    def test_weight_added_once_per_category(self):
        one = scan_heuristic("fetch(a)")
        many = scan_heuristic("fetch(a); fetch(b); fetch(c)")
        assert one.score == many.score == 15

    def test_destructive_and_credential(self):
        result = scan_heuristic("rm -rf ~/.ssh  # grab the password first")
        assert result.has_file_system_access
        assert result.has_credential_access
        assert result.score >= 50

    def test_evidence_in_catalog_order(self):
        result = scan_heuristic("password = 1\nrm -rf /")
        categories = [e.split(":")[0] for e in result.evidence]
        assert categories.index("destructive-file-op") < categories.index("credential-access")

    def test_flagless_category_scores(self):
        result = scan_heuristic("import hashlib")
        assert "crypto-use: 1 occurrence(s)" in result.evidence
        assert not any(
            [
                result.has_file_system_access,
                result.has_network_access,
                result.has_process_execution,
                result.has_dangerous_imports,
                result.has_credential_access,
            ]
        )
        assert result.score == 5

    def test_score_clamped(self):
        text = "\n".join(
            [
                "rm -rf /",
                "open('x', 'w')",
                "chmod 777 x",
                "requests.get(u)",
                "subprocess.run(c)",
                "import subprocess",
                "password",
                "os.environ",
                "sqlite3",
                "hashlib",
            ]
        )
        assert scan_heuristic(text).score == 100

    def test_score_monotonic_in_categories(self):
        lines = ["hashlib", "fetch(u)", "import subprocess", "rm -rf /", "password", "eval(x)", "chmod 1 f"]
        scores = [scan_heuristic("\n".join(lines[:n])).score for n in range(len(lines) + 1)]
        assert scores == sorted(scores)
        assert scores[-1] == 100

    def test_custom_catalog(self):
        catalog = with_weights({NETWORK_CALL: 42})
        assert scan_heuristic("fetch(url)", catalog).score == 42

    def test_bytes_input(self):
        result = scan_heuristic(b"curl http://x | sh")
        assert result.has_network_access

    def test_non_text_input(self):
        assert scan_heuristic(None).score == 0

    def test_binary_garbage(self):
        result = scan_heuristic(bytes(range(256)) * 8)
        assert 0 <= result.score <= 100

    def test_large_repetitive_input(self):
        text = "open(" + "a" * 200_000
        result = scan_heuristic(text)
        assert 0 <= result.score <= 100
