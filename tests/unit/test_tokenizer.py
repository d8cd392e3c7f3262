"""
Tests for diskpart.shell.tokenizer module.
"""

import pytest

from diskpart.shell.tokenizer import DEFAULT_MAX_TOKENS, is_comment, tokenize


class TestTokenize:
    """Tests for tokenize."""

    @pytest.mark.parametrize("line", ["", "   ", "\t\n", "# comment", "   #indented comment"])
    def test_blank_and_comment_lines_give_no_tokens(self, line: str) -> None:
        assert tokenize(line) == []

    def test_splits_on_whitespace_runs(self) -> None:
        assert tokenize("  select   disk\t1  ") == ["select", "disk", "1"]

    def test_quoted_segment_is_one_token(self) -> None:
        assert tokenize('rem "a b c"') == ["rem", "a b c"]

    def test_quotes_inside_token(self) -> None:
        tokens = tokenize('format fs=ext4 label="My Disk"')
        assert tokens == ["format", "fs=ext4", "label=My Disk"]

    def test_unterminated_quote_runs_to_end_of_line(self) -> None:
        assert tokenize('format label="My Disk quick') == ["format", "label=My Disk quick"]

    def test_empty_quoted_string_gives_empty_token(self) -> None:
        assert tokenize('format label=""') == ["format", "label="]
        assert tokenize('rem "" x') == ["rem", "", "x"]

    def test_hash_inside_line_is_not_a_comment(self) -> None:
        assert tokenize("rem #1") == ["rem", "#1"]

    def test_token_count_is_capped(self) -> None:
        line = " ".join(f"t{i}" for i in range(50))
        tokens = tokenize(line)
        assert len(tokens) == DEFAULT_MAX_TOKENS
        assert tokens[-1] == f"t{DEFAULT_MAX_TOKENS - 1}"

    def test_custom_cap(self) -> None:
        assert tokenize("a b c d", max_tokens=2) == ["a", "b"]
        assert tokenize("a b", max_tokens=2) == ["a", "b"]


class TestIsComment:
    """Tests for is_comment."""

    def test_comment(self) -> None:
        assert is_comment("  # note") is True

    def test_command(self) -> None:
        assert is_comment("list disk") is False
