# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Splits a flag string such as `-tags "netgo osusergo" -race` into arguments.

Only whitespace and quotes are special. A quote opens a span that only the
same quote character closes, so `"it's"` is the single token `it's`. There is
no backslash escaping.
"""

from xbuild.build.exceptions import UnterminatedQuote

_QUOTES = frozenset({'"', "'"})


def parse_arguments(text: str) -> list[str]:
    """
    Tokenize a flag string the way a shell would for simple quoting.

    Args:
        text: Whitespace-separated tokens, optionally quoted with ' or ".

    Returns:
        The unquoted tokens in order. Empty or blank input gives [].

    Raises:
        UnterminatedQuote: If the input ends inside a quoted span.
    """
    tokens: list[str] = []
    current: list[str] = []
    open_quote = ""
    open_at = -1

    for position, char in enumerate(text):
        if open_quote:
            if char == open_quote:
                open_quote = ""
            else:
                current.append(char)
        elif char in _QUOTES:
            open_quote = char
            open_at = position
        elif char.isspace():
            if current:
                tokens.append("".join(current))
                current = []
        else:
            current.append(char)

    if open_quote:
        raise UnterminatedQuote(text, open_quote, open_at)

    if current:
        tokens.append("".join(current))
    return tokens
