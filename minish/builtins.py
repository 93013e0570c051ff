"""Commands the shell runs itself instead of starting a program."""

from __future__ import annotations

import os
import sys
from typing import Callable, Sequence

from .environment import (
    add_variable,
    drop_matching,
    env_from_strings,
    remove_var,
    sorted_declarations,
)
from .state import Shell
from .textutils import SPACE_CHARS, atoi_long, is_space

BUILTIN_NAMES = frozenset(
    {"echo", "history", "pwd", "cd", "unset", "exit", "env", "export"}
)
_DIGITS = "0123456789"


class ShellExit(Exception):
    """Raised by ``exit``; the shell should stop with ``code``."""

    def __init__(self, code: int) -> None:
        self.code = code
        super().__init__(f"exit {code}")


def _out(text: str) -> None:
    sys.stdout.write(text)
    sys.stdout.flush()


def _err(text: str) -> None:
    sys.stderr.write(text)
    sys.stderr.flush()


def _fail(shell: Shell, message: str, status: int = 1) -> int:
    _err(message + "\n")
    shell.env.reset_status(status)
    return status


def _getcwd() -> str | None:
    try:
        return os.getcwd()
    except OSError:
        return None


def is_builtin(name: str | None) -> bool:
    return name in BUILTIN_NAMES


def is_n_option(arg: str | None) -> bool:
    """True for ``-`` followed only by ``n`` characters."""
    if not arg or arg[0] != "-":
        return False
    return arg[1:].strip("n") == ""


def echo_builtin(args: Sequence[str]) -> int:
    words = list(args[1:])
    newline = True
    while words and is_n_option(words[0]):
        newline = False
        words.pop(0)
    _out(" ".join(words) + ("\n" if newline else ""))
    return 0


def pwd_builtin(shell: Shell, args: Sequence[str]) -> int:
    """Print the working directory; returns 1 if ``args`` is not a pwd call."""
    if not args or args[0] != "pwd":
        return 1
    directory = _getcwd()
    if directory is not None:
        _out(directory + "\n")
    else:
        _err("Error: Could not get the current directory\n")
    shell.env.reset_status(0)
    return 0


def home_path(shell: Shell) -> str | None:
    """HOME, or the first two components of the working directory."""
    home = shell.env.get("HOME")
    if home is not None:
        return home
    cwd = _getcwd()
    if cwd is None:
        return None
    parts = [part for part in cwd.split("/") if part]
    if len(parts) < 2:
        return None
    return f"/{parts[0]}/{parts[1]}"


def _cd_change(shell: Shell, args: Sequence[str]) -> int:
    if len(args) > 2:
        return _fail(shell, "cd: too many arguments")
    if shell.env.get("HOME") is None and len(args) < 2:
        return _fail(shell, "cd: HOME not set")
    home = home_path(shell)
    if home is None:
        return _fail(shell, "cd: cannot resolve HOME")
    if len(args) < 2:
        target = home
    elif args[1] == "-":
        previous = shell.env.get("OLDPWD")
        if previous is None:
            return _fail(shell, "cd: OLDPWD not set")
        if previous:
            _err(previous + "\n")
        target = previous
    else:
        target = args[1]
    try:
        os.chdir(target)
    except OSError as exc:
        return _fail(shell, f"cd: {exc.strerror or exc}")
    return 0


def _update_cd_env(shell: Shell, oldpwd: str | None, pwd: str | None) -> None:
    old_var = shell.env.find("OLDPWD")
    if shell.env.find("PWD") is None:
        if old_var is not None and old_var.exported:
            shell.env.change("OLDPWD", " ", True)
        return
    if pwd is not None:
        shell.env.change("PWD", pwd, True)
    if oldpwd is not None and old_var is not None:
        shell.env.change("OLDPWD", oldpwd, True)


def cd_builtin(shell: Shell, args: Sequence[str]) -> int:
    oldpwd = _getcwd()
    status = _cd_change(shell, args)
    if status == 0:
        pwd = _getcwd()
        if pwd is None and oldpwd is None:
            pwd = shell.env.get("PWD")
            oldpwd = shell.env.get("OLDPWD")
        _update_cd_env(shell, oldpwd, pwd)
    shell.env.reset_status(status)
    return status


def env_builtin(shell: Shell) -> int:
    if not shell.env.variables:
        return 1
    for var in shell.env:
        if var.exported:
            _out(f"{var.key}={var.value}\n")
    shell.env.reset_status(0)
    return 0


def _valid_name_end(text: str) -> int | None:
    """Index just past a leading identifier, or None if there is none."""
    if not text or not (text[0].isascii() and (text[0].isalpha() or text[0] == "_")):
        return None
    end = 1
    while end < len(text) and text[end].isascii() and (
        text[end].isalnum() or text[end] == "_"
    ):
        end += 1
    return end


def validate_export(text: str | None) -> int:
    """0 if invalid, 1 for ``NAME=...``, 2 for a bare ``NAME``."""
    if text is None:
        return 0
    end = _valid_name_end(text)
    if end is None:
        return 0
    if end == len(text):
        return 2
    return 1 if text[end] == "=" else 0


def export_builtin(shell: Shell, args: Sequence[str]) -> int:
    """List, or define, exported variables; returns the new exit status."""
    shell.exit_status.code = 0
    strings = list(shell.env_arr)
    if len(args) < 2:
        for line in sorted_declarations(strings):
            _out(line + "\n")
    else:
        for arg in args[1:]:
            if "=" in arg:
                strings = drop_matching(strings, arg, 1)
        for arg in args[1:]:
            if not validate_export(arg):
                _err(f"minishell: export: `{arg}`: not a valid identifier\n")
                shell.exit_status.code = 1
                continue
            strings = add_variable(strings, arg if "=" in arg else f"{arg}=")
    shell.env_arr = strings
    shell.env = env_from_strings(strings)
    return shell.exit_status.code


def validate_unset(text: str | None) -> bool:
    if text is None:
        return False
    return _valid_name_end(text) == len(text)


def unset_builtin(shell: Shell, args: Sequence[str]) -> int:
    shell.exit_status.code = 0
    for arg in args[1:]:
        if not validate_unset(arg):
            _err(f"unset: {arg}: invalid parameter name\n")
            shell.exit_status.code = 1
            continue
        shell.env.remove(arg)
        shell.env_arr = remove_var(shell.env_arr, arg)
    return shell.exit_status.code


def parse_exit_status(arg: str) -> int:
    """The exit code an ``exit`` argument asks for, in 0..255.

    Raises ValueError when the argument is not a number that fits a long.
    """
    rest = arg.lstrip(SPACE_CHARS)
    if not rest:
        raise ValueError(f"numeric argument required: {arg!r}")
    body = rest[1:] if rest[0] in "+-" else rest
    if not body or body[0] not in _DIGITS:
        raise ValueError(f"numeric argument required: {arg!r}")
    if any(char not in _DIGITS and not is_space(char) for char in body):
        raise ValueError(f"numeric argument required: {arg!r}")
    try:
        return atoi_long(arg) % 256
    except OverflowError as exc:
        raise ValueError(f"numeric argument required: {arg!r}") from exc


def exit_builtin(shell: Shell, args: Sequence[str]) -> int:
    """Raise ShellExit, or return 1 when given too many arguments."""
    quiet = len(shell.commands) > 1
    if not quiet and shell.input_fd != 0:
        _err("exit\n")
    if len(args) < 2:
        raise ShellExit(shell.exit_status.code)
    try:
        code = parse_exit_status(args[1])
    except ValueError:
        _err(f"exit: {args[1]}: numeric argument required\n")
        raise ShellExit(2) from None
    if len(args) > 2:
        _err("exit: too many arguments\n")
        return 1
    raise ShellExit(code)


def history_builtin(shell: Shell, args: Sequence[str]) -> int:
    for number, line in enumerate(shell.history, start=1):
        _out(f"{number}  {line}\n")
    return 0


_DISPATCH: dict[str, Callable[[Shell, Sequence[str]], int]] = {
    "echo": lambda shell, args: echo_builtin(args),
    "pwd": pwd_builtin,
    "cd": cd_builtin,
    "unset": unset_builtin,
    "exit": exit_builtin,
    "env": lambda shell, args: env_builtin(shell),
    "export": export_builtin,
    "history": history_builtin,
}


def run_builtin(shell: Shell, args: Sequence[str]) -> int:
    """Run the builtin named by ``args[0]``; unknown names return 0."""
    if not args:
        return 0
    handler = _DISPATCH.get(args[0])
    if handler is None:
        return 0
    return handler(shell, args)