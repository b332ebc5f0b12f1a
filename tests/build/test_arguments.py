# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for flag string tokenization.

The parser sits between user-written flag strings (project files, --build-args)
and the toolchain's argv, so quoting mistakes here turn into confusing go
build errors. We check the plain cases, quoting rules, and the failure mode.
"""

import pytest

from xbuild.build.arguments import parse_arguments
from xbuild.build.exceptions import ParseError, UnterminatedQuote


class TestPlainTokens:
    def test_simple_arguments(self) -> None:
        assert parse_arguments("-tags systray -race") == ["-tags", "systray", "-race"]

    def test_runs_of_whitespace_do_not_make_empty_tokens(self) -> None:
        assert parse_arguments("  -a   -b\t-c  ") == ["-a", "-b", "-c"]

    @pytest.mark.parametrize("text", ["", "   ", "\t \n"])
    def test_blank_input_gives_empty_list(self, text: str) -> None:
        assert parse_arguments(text) == []


class TestQuoting:
    def test_double_quoted_span_is_one_token(self) -> None:
        text = '-ldflags "-X main.version=1.2.3 -s -w"'
        assert parse_arguments(text) == ["-ldflags", "-X main.version=1.2.3 -s -w"]

    def test_single_quoted_span_is_one_token(self) -> None:
        assert parse_arguments("-tags 'netgo osusergo'") == ["-tags", "netgo osusergo"]

    def test_other_quote_is_literal_inside_span(self) -> None:
        assert parse_arguments("-X \"main.msg=it's fine\"") == ["-X", "main.msg=it's fine"]
        assert parse_arguments("'say \"hi\"'") == ['say "hi"']

    def test_quotes_join_with_adjacent_text(self) -> None:
        assert parse_arguments('-ldflags="-s -w" -v') == ["-ldflags=-s -w", "-v"]

    def test_rejoined_tokens_parse_the_same(self) -> None:
        tokens = parse_arguments("-trimpath  -tags 'a' \"-race\"")
        assert parse_arguments(" ".join(tokens)) == tokens


class TestUnterminatedQuote:
    def test_unclosed_double_quote_raises(self) -> None:
        with pytest.raises(UnterminatedQuote):
            parse_arguments('-ldflags "-X main.version=1.2.3')

    def test_mismatched_quote_does_not_close_span(self) -> None:
        with pytest.raises(UnterminatedQuote) as excinfo:
            parse_arguments("-tags 'netgo\"")
        assert excinfo.value.quote == "'"
        assert excinfo.value.position == 6

    def test_is_a_parse_error(self) -> None:
        with pytest.raises(ParseError):
            parse_arguments("'")
