"""Running parsed command lines: builtins, programs and pipelines."""

from __future__ import annotations

import os
import signal
import sys
from contextlib import ExitStack, contextmanager, redirect_stdout, suppress
from typing import Iterator, Sequence

from .builtins import ShellExit, is_builtin, run_builtin
from .environment import Environment
from .expansion import expand_commands
from .lexer import UnclosedQuoteError, tokenize_line
from .parser import Command, ShellSyntaxError, parse_tokens
from .redirections import (
    HeredocInterrupted,
    RedirectionError,
    apply_redirections,
    setup_redir,
)
from .state import Shell
from .status import child_signal_defaults, ignore_interactive_signals

try:
    import readline as _readline
except ImportError:  # pragma: no cover - platforms without readline
    _readline = None

_FILE_MODE = 0o644
_JOB_SIGNALS = [signal.SIGINT] + (
    [signal.SIGQUIT] if hasattr(signal, "SIGQUIT") else []
)


def _out(text: str) -> None:
    sys.stdout.write(text)
    sys.stdout.flush()


def _err(text: str) -> None:
    sys.stderr.write(text)
    sys.stderr.flush()


def _flush_streams() -> None:
    for stream in (sys.stdout, sys.stderr):
        with suppress(Exception):
            stream.flush()


@contextmanager
def _waiting_for_children() -> Iterator[None]:
    """Ignore interrupt and quit while children run, then restore handlers."""
    saved = {sig: signal.getsignal(sig) for sig in _JOB_SIGNALS}
    ignore_interactive_signals()
    try:
        yield
    finally:
        for sig, handler in saved.items():
            if handler is not None:
                signal.signal(sig, handler)


@contextmanager
def _stdin_swapped(stream) -> Iterator[None]:
    previous = sys.stdin
    sys.stdin = stream
    try:
        yield
    finally:
        sys.stdin = previous


def file_exists(path: str | None) -> bool:
    return bool(path) and os.access(path, os.F_OK)


def find_cmd_path(cmd: str | None, env: Environment) -> str | None:
    """Locate ``cmd`` directly when it has a slash, otherwise along PATH."""
    if not cmd:
        return None
    if "/" in cmd:
        return cmd if file_exists(cmd) else None
    path = env.get("PATH")
    if path is None:
        return None
    for directory in filter(None, path.split(":")):
        candidate = f"{directory}/{cmd}"
        if file_exists(candidate):
            return candidate
    return None


def process_status(status: int) -> int:
    """Exit code from a raw wait status; signals give 128 plus the number."""
    if os.WIFEXITED(status):
        return os.WEXITSTATUS(status)
    if os.WIFSIGNALED(status):
        return 128 + os.WTERMSIG(status)
    return status


def _command_not_found(name: str) -> int:
    _err(f"{name}: command not found\n")
    return 127


def _exec_environment(strings: Sequence[str]) -> dict[str, str]:
    pairs = (entry.partition("=") for entry in strings)
    return {key: value for key, sep, value in pairs if sep}


def _bind_standard_streams() -> None:
    sys.stdin = open(0, "r", closefd=False)
    sys.stdout = open(1, "w", closefd=False)
    sys.stderr = open(2, "w", closefd=False)


def _child_command(shell: Shell, command: Command) -> int:
    name = command.args[0]
    if is_builtin(name):
        try:
            return run_builtin(shell, command.args)
        except ShellExit as exc:
            return exc.code
    path = find_cmd_path(name, shell.env)
    if path is None:
        return _command_not_found(name)
    if not os.access(path, os.X_OK):
        _err(f"{name}: Permission denied\n")
        return 126
    _flush_streams()
    try:
        os.execve(path, command.args, _exec_environment(shell.env_arr))
    except OSError as exc:
        _err(f"minishell: {exc.strerror or exc}\n")
    return 127


def _run_child(
    shell: Shell,
    command: Command,
    read_end: int | None,
    write_end: int | None,
    pipe_fds: Sequence[int],
) -> None:
    """Body of a forked child; never returns."""
    code = 1
    try:
        if read_end is not None:
            os.dup2(read_end, 0)
        if write_end is not None:
            os.dup2(write_end, 1)
        for fd in pipe_fds:
            with suppress(OSError):
                os.close(fd)
        apply_redirections(shell)
        _bind_standard_streams()
        child_signal_defaults()
        code = _child_command(shell, command) if command.args else 0
    except RedirectionError as exc:
        with suppress(Exception):
            _err(f"{exc}\n")
        code = 1
    except BaseException:
        code = 1
    finally:
        _flush_streams()
        os._exit(code)


def run_builtin_redirected(shell: Shell, args: Sequence[str]) -> int:
    """Run a builtin with the shell's open redirections as its streams."""
    with ExitStack() as stack:
        if shell.input_fd is not None:
            stream = stack.enter_context(open(shell.input_fd, "r", closefd=False))
            stack.enter_context(_stdin_swapped(stream))
        if shell.output_fd is not None:
            stream = stack.enter_context(open(shell.output_fd, "w", closefd=False))
            stack.enter_context(redirect_stdout(stream))
        return run_builtin(shell, args)


def execute_external(shell: Shell, command: Command) -> int:
    """Fork and run a program, wait for it and return its exit code."""
    name = command.args[0]
    if find_cmd_path(name, shell.env) is None:
        return _command_not_found(name)
    _flush_streams()
    with _waiting_for_children():
        try:
            pid = os.fork()
        except OSError as exc:
            _err(f"fork: {exc.strerror or exc}\n")
            return 1
        if pid == 0:
            _run_child(shell, command, None, None, ())
        command.pid = pid
        _, raw = os.waitpid(pid, 0)
    if os.WIFSIGNALED(raw):
        _out("\n")
    return process_status(raw)


def execute_cmd(shell: Shell, command: Command) -> int:
    """Run one command with its redirections; returns its exit status."""
    if not command.args:
        return 0
    try:
        try:
            setup_redir(shell, command)
        except HeredocInterrupted:
            return 1
        except RedirectionError as exc:
            _err(f"{exc}\n")
            shell.exit_status.code = 1
            return 1
        if is_builtin(command.args[0]):
            status = run_builtin_redirected(shell, command.args)
            if status != 0:
                shell.exit_status.code = status
        else:
            status = execute_external(shell, command)
            shell.exit_status.code = status
        return status
    finally:
        shell.cleanup_redirections()


def _create_outfiles(commands: Sequence[Command]) -> bool:
    for command in commands:
        if command.outfile is None:
            continue
        mode = os.O_APPEND if command.append else os.O_TRUNC
        try:
            os.close(os.open(command.outfile, os.O_WRONLY | os.O_CREAT | mode,
                             _FILE_MODE))
        except OSError as exc:
            _err(f"{command.outfile}: {exc.strerror or exc}\n")
            return False
    return True


def _create_pipes(count: int) -> list[tuple[int, int]] | None:
    pipes: list[tuple[int, int]] = []
    try:
        for _ in range(count):
            pipes.append(os.pipe())
    except OSError as exc:
        _err(f"pipe: {exc.strerror or exc}\n")
        _close_pipes(pipes)
        return None
    return pipes


def _close_pipes(pipes: Sequence[tuple[int, int]]) -> None:
    for pair in pipes:
        for fd in pair:
            with suppress(OSError):
                os.close(fd)


def _wait_all(commands: Sequence[Command]) -> int:
    last = 0
    for command in commands:
        if not command.pid:
            continue
        _, raw = os.waitpid(command.pid, 0)
        if os.WIFEXITED(raw):
            last = os.WEXITSTATUS(raw)
        elif os.WIFSIGNALED(raw):
            last = 128 + os.WTERMSIG(raw)
            _out("\n")
    return last


def execute_pipeline(shell: Shell, commands: Sequence[Command]) -> int:
    """Run commands joined by pipes; the status is the last command's."""
    if not commands:
        return 1
    if not _create_outfiles(commands):
        return 1
    pipes = _create_pipes(len(commands) - 1)
    if pipes is None:
        return 1
    all_fds = [fd for pair in pipes for fd in pair]
    _flush_streams()
    with _waiting_for_children():
        for index, command in enumerate(commands):
            read_end = pipes[index - 1][0] if index > 0 else None
            write_end = pipes[index][1] if index < len(pipes) else None
            try:
                pid = os.fork()
            except OSError as exc:
                _err(f"fork: {exc.strerror or exc}\n")
                _close_pipes(pipes[max(index - 1, 0):])
                return 1
            if pid == 0:
                _run_child(shell, command, read_end, write_end, all_fds)
            command.pid = pid
            if index > 0:
                _close_pipes(pipes[index - 1:index])
        status = _wait_all(commands)
    shell.exit_status.code = status
    return status


def drop_empty_args(commands: Sequence[Command]) -> None:
    """Remove arguments that expanded to nothing."""
    for command in commands:
        command.args = [arg for arg in command.args if arg]


def _remember(line: str) -> None:
    if _readline is not None:
        with suppress(Exception):
            _readline.add_history(line)


def _syntax_failure(shell: Shell, message: str) -> None:
    _err(f"{message}\n")
    shell.exit_status.code = 2
    shell.env.reset_status(2)


def process_input(shell: Shell, line: str | None) -> None:
    """Tokenize, parse, expand and run one command line."""
    if not line:
        return
    _remember(line)
    shell.add_history(line)
    try:
        tokens = tokenize_line(line)
    except UnclosedQuoteError as exc:
        _syntax_failure(shell, str(exc))
        return
    if not tokens:
        shell.env.reset_status(2)
        return
    try:
        commands = parse_tokens(tokens)
    except ShellSyntaxError as exc:
        _syntax_failure(shell, str(exc))
        return
    shell.commands = list(commands)
    try:
        expand_commands(commands, shell.env_arr, shell.exit_status.value)
        drop_empty_args(commands)
        shell.exit_status.clear_interrupt()
        if len(commands) > 1:
            shell.status = execute_pipeline(shell, commands)
        else:
            shell.status = execute_cmd(shell, commands[0])
    finally:
        shell.commands = []