"""Tests for the pure lexical checks in path_sanitizer."""

import pytest

from bulwark.security.path_sanitizer import UnsafePathError, split_candidate, truncate_for_audit


class TestSplitCandidate:
    """Test split_candidate function."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("reports/q1.csv", ["reports", "q1.csv"]),
            ("./a//b/./c", ["a", "b", "c"]),
            ("a/b/", ["a", "b"]),
            ("", []),
            (".", []),
            ("...", ["..."]),
            ("..hidden/x..y", ["..hidden", "x..y"]),
            ("café/naïve.txt", ["café", "naïve.txt"]),
            ("with space/and-dash_1", ["with space", "and-dash_1"]),
        ],
    )
    def test_valid_candidates(self, raw, expected):
        assert split_candidate(raw) == expected

    def test_components_keep_original_form(self):
        """Decomposed Unicode is checked but passed through unchanged."""
        decomposed = "cafe\u0301.txt"
        assert split_candidate(decomposed) == [decomposed]

    @pytest.mark.parametrize(
        "raw,message",
        [
            ("../x", "parent-directory"),
            ("a/..", "parent-directory"),
            ("/abs", "absolute"),
            ("\\abs", "absolute"),
            ("\\\\host\\share", "UNC"),
            ("~", "tilde"),
            ("D:\\x", "drive"),
            ("a\\b", "backslash"),
            ("%2E%2E/x", "percent-encoded"),
            ("a%2fb", "percent-encoded"),
            ("a\x00b", "control"),
            ("a\x7fb", "control"),
            ("a\tb", "control"),
            ("\u2025/x", "parent-directory"),  # TWO DOT LEADER folds to ".."
            ("\uff0e\uff0e", "parent-directory"),
            ("\uff3cabs", "absolute"),  # FULLWIDTH REVERSE SOLIDUS
        ],
    )
    def test_rejected_candidates(self, raw, message):
        with pytest.raises(UnsafePathError, match=message):
            split_candidate(raw)

    def test_non_string_rejected(self):
        with pytest.raises(UnsafePathError, match="must be a string"):
            split_candidate(b"bytes")  # type: ignore[arg-type]


class TestTruncateForAudit:
    """Test truncate_for_audit function."""

    def test_short_text_is_escaped(self):
        assert truncate_for_audit("../x\n", 48) == repr("../x\n")

    def test_long_text_is_bounded(self):
        out = truncate_for_audit("x" * 100, 10)
        assert out.startswith(repr("x" * 10))
        assert out.endswith("(+90 chars)")

    def test_non_string_shows_type_only(self):
        assert truncate_for_audit(b"secret", 48) == "<bytes>"
