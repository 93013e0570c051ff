"""Splitting a command line into words and operators."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum

UNCLOSED_QUOTE_MESSAGE = "unexpected EOF while looking for matching '\"'"

_BLANKS = frozenset(" \t\n\v\f\r")


class TokenType(IntEnum):
    CMD = 0
    ARG = 1
    PIPE = 2
    TRUNC = 3
    APPEND = 4
    INPUT = 5
    END = 6
    EMPTY = 7
    HEREDOC = 8
    SPACES = 9


_TWO_CHAR_SEPARATORS = frozenset({TokenType.APPEND, TokenType.HEREDOC})


class QuoteState(Enum):
    DEFAULT = 0
    SQUOTE = 1
    DQUOTE = 2


@dataclass
class Token:
    value: str
    type: TokenType


class UnclosedQuoteError(ValueError):
    """A quote was opened and never closed on the line."""

    def __init__(self) -> None:
        super().__init__(UNCLOSED_QUOTE_MESSAGE)


def next_quote_state(state: QuoteState, char: str) -> QuoteState:
    """Quote state after reading ``char`` in ``state``."""
    if state is QuoteState.DEFAULT:
        if char == "'":
            return QuoteState.SQUOTE
        if char == '"':
            return QuoteState.DQUOTE
    elif state is QuoteState.SQUOTE and char == "'":
        return QuoteState.DEFAULT
    elif state is QuoteState.DQUOTE and char == '"':
        return QuoteState.DEFAULT
    return state


def separator_at(line: str, index: int) -> TokenType | None:
    """The separator starting at ``index``, or None for an ordinary character."""
    if index >= len(line):
        return TokenType.END
    char = line[index]
    pair = line[index:index + 2]
    if char in _BLANKS:
        return TokenType.SPACES
    if char == "|":
        return TokenType.PIPE
    if pair == "<<":
        return TokenType.HEREDOC
    if pair == ">>":
        return TokenType.APPEND
    if char == "<":
        return TokenType.INPUT
    if char == ">":
        return TokenType.TRUNC
    return None


def tokenize_line(line: str) -> list[Token]:
    """Split ``line`` into word and operator tokens.

    Quotes are kept in the words; separators inside quotes are ordinary
    characters. Raises UnclosedQuoteError if a quote is left open.
    """
    tokens: list[Token] = []
    state = QuoteState.DEFAULT
    start = index = 0
    while index < len(line):
        state = next_quote_state(state, line[index])
        kind = separator_at(line, index) if state is QuoteState.DEFAULT else None
        if kind is None:
            index += 1
            continue
        if index != start:
            tokens.append(Token(line[start:index], TokenType.ARG))
        width = 2 if kind in _TWO_CHAR_SEPARATORS else 1
        if kind is not TokenType.SPACES:
            tokens.append(Token(line[index:index + width], kind))
        index += width
        start = index
    if index != start:
        tokens.append(Token(line[start:index], TokenType.ARG))
    if state is not QuoteState.DEFAULT:
        raise UnclosedQuoteError()
    return tokens