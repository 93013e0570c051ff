"""Turning tokens into commands joined by pipes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from .lexer import Token, TokenType

_REDIRECTIONS = frozenset(
    {TokenType.INPUT, TokenType.TRUNC, TokenType.APPEND, TokenType.HEREDOC}
)


@dataclass
class Command:
    """One simple command of a pipeline with its redirections."""

    args: list[str] = field(default_factory=list)
    infile: str | None = None
    outfile: str | None = None
    heredoc_limiter: str | None = None
    append: bool = False
    is_heredoc: bool = False
    pid: int | None = None


class ShellSyntaxError(Exception):
    """A token sequence the shell cannot parse."""

    def __init__(self, token: str) -> None:
        self.token = token
        super().__init__(f"syntax error near unexpected token `{token}'")


def is_redirection(kind: TokenType) -> bool:
    return kind in _REDIRECTIONS


def check_syntax(tokens: Sequence[Token]) -> None:
    """Raise ShellSyntaxError for misplaced pipes and redirections."""
    if not tokens:
        return
    if tokens[0].type is TokenType.PIPE:
        raise ShellSyntaxError("|")
    for token, following in zip(tokens, [*tokens[1:], None]):
        if token.type is TokenType.PIPE:
            if following is None:
                raise ShellSyntaxError("newline")
            if following.type is TokenType.PIPE:
                raise ShellSyntaxError("|")
        if is_redirection(token.type):
            if following is None:
                raise ShellSyntaxError("newline")
            if following.type is not TokenType.ARG:
                raise ShellSyntaxError(following.value)


def strip_quotes(text: str) -> str:
    """Drop quote characters, keeping the other kind inside a quoted run."""
    result = []
    quote = ""
    for char in text:
        if char in "'\"" and not quote:
            quote = char
        elif char == quote:
            quote = ""
        else:
            result.append(char)
    return "".join(result)


def _apply_redirection(command: Command, kind: TokenType, target: str) -> None:
    name = strip_quotes(target)
    if kind is TokenType.INPUT:
        command.infile = name
    elif kind is TokenType.TRUNC:
        command.outfile = name
        command.append = False
    elif kind is TokenType.APPEND:
        command.outfile = name
        command.append = True
    elif kind is TokenType.HEREDOC:
        command.heredoc_limiter = name
        command.is_heredoc = True


def parse_tokens(tokens: Sequence[Token]) -> list[Command]:
    """Group tokens into commands; raises ShellSyntaxError on bad input."""
    if not tokens:
        return []
    check_syntax(tokens)
    commands = [Command()]
    stream = iter(tokens)
    for token in stream:
        current = commands[-1]
        if token.type is TokenType.ARG:
            current.args.append(token.value)
        elif is_redirection(token.type):
            target = next(stream)
            _apply_redirection(current, token.type, target.value)
        elif token.type is TokenType.PIPE:
            commands.append(Command())
    return commands