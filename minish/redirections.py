"""Opening redirection targets and collecting here-documents."""

from __future__ import annotations

import os
import tempfile
from contextlib import suppress
from typing import Callable, Sequence

from .lexer import TokenType
from .parser import Command
from .state import Shell

ReadLine = Callable[[str], "str | None"]

HEREDOC_PROMPT = "> "
_FILE_MODE = 0o644


class RedirectionError(Exception):
    """A redirection could not be set up; the message is what to report."""

    def __init__(self, target: str, reason: str) -> None:
        self.target = target
        self.reason = reason
        super().__init__(f"{target}: {reason}")


class HeredocInterrupted(Exception):
    """A here-document ended early; the exit status is already set to 1."""


def _read_stdin(prompt: str) -> str | None:
    try:
        return input(prompt)
    except EOFError:
        return None


def redir_type(text: str | None) -> TokenType | None:
    """The redirection operator ``text`` starts with, if any."""
    if not text:
        return None
    if text.startswith("<<"):
        return TokenType.HEREDOC
    if text.startswith(">>"):
        return TokenType.APPEND
    if text.startswith("<"):
        return TokenType.INPUT
    if text.startswith(">"):
        return TokenType.TRUNC
    return None


def _close(fd: int | None) -> None:
    if fd is not None:
        with suppress(OSError):
            os.close(fd)


def _open(filename: str, flags: int) -> int:
    try:
        return os.open(filename, flags, _FILE_MODE)
    except OSError as exc:
        raise RedirectionError(filename, exc.strerror or str(exc)) from exc


def _set_input(shell: Shell, fd: int) -> None:
    _close(shell.input_fd)
    shell.input_fd = fd


def _set_output(shell: Shell, fd: int) -> None:
    _close(shell.output_fd)
    shell.output_fd = fd


def open_input(shell: Shell, filename: str) -> None:
    _set_input(shell, _open(filename, os.O_RDONLY))


def open_output(shell: Shell, filename: str) -> None:
    _set_output(shell, _open(filename, os.O_WRONLY | os.O_CREAT | os.O_TRUNC))


def open_append(shell: Shell, filename: str) -> None:
    _set_output(shell, _open(filename, os.O_WRONLY | os.O_CREAT | os.O_APPEND))


def _abort_heredoc(shell: Shell) -> HeredocInterrupted:
    shell.exit_status.clear_interrupt()
    shell.exit_status.code = 1
    return HeredocInterrupted("here-document interrupted")


def heredoc(shell: Shell, limiter: str, read_line: ReadLine | None = None) -> None:
    """Read lines up to ``limiter`` and make them the shell's input.

    ``read_line`` takes a prompt and returns a line, or None at end of
    input. End of input or an interrupt raises HeredocInterrupted.
    """
    reader = read_line or _read_stdin
    if shell.exit_status.interrupted:
        raise _abort_heredoc(shell)
    lines: list[str] = []
    while True:
        try:
            line = reader(HEREDOC_PROMPT)
        except KeyboardInterrupt:
            line = None
        if line is None or shell.exit_status.interrupted:
            raise _abort_heredoc(shell)
        if line == limiter:
            break
        lines.append(line + "\n")
    with tempfile.TemporaryFile() as buffer:
        buffer.write("".join(lines).encode())
        buffer.flush()
        buffer.seek(0)
        fd = os.dup(buffer.fileno())
    _set_input(shell, fd)


def setup_redir(
    shell: Shell, command: Command, read_line: ReadLine | None = None
) -> None:
    """Open every redirection ``command`` asks for, heredoc first."""
    if command.heredoc_limiter is not None:
        heredoc(shell, command.heredoc_limiter, read_line)
    if command.infile is not None:
        open_input(shell, command.infile)
    if command.outfile is not None:
        if command.append:
            open_append(shell, command.outfile)
        else:
            open_output(shell, command.outfile)


def _move_fd(fd: int, target: int) -> None:
    try:
        os.dup2(fd, target)
    except OSError as exc:
        raise RedirectionError("dup2", exc.strerror or str(exc)) from exc
    _close(fd)


def apply_redirections(shell: Shell) -> None:
    """Put the opened descriptors on standard input and output."""
    if shell.input_fd is not None:
        _move_fd(shell.input_fd, 0)
        shell.input_fd = None
    if shell.output_fd is not None:
        _move_fd(shell.output_fd, 1)
        shell.output_fd = None


def strip_redirection_args(args: Sequence[str]) -> list[str]:
    """Arguments with every redirection operator and its target removed."""
    result: list[str] = []
    stream = iter(args)
    for arg in stream:
        if redir_type(arg) is None:
            result.append(arg)
        else:
            next(stream, None)
    return result


def count_args_without_redir(args: Sequence[str]) -> int:
    return len(strip_redirection_args(args))