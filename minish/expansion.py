"""Variable and exit-status expansion of command words."""

from __future__ import annotations

from typing import Sequence

from .parser import Command

_QUOTES = "'\""


def is_var_char(char: str) -> bool:
    return len(char) == 1 and (char == "_" or ("A" <= char <= "Z")
                               or ("a" <= char <= "z") or ("0" <= char <= "9"))


def env_val(name: str, env: Sequence[str]) -> str:
    """Value of ``name`` in ``KEY=VALUE`` strings, or an empty string."""
    prefix = f"{name}="
    return next(
        (entry[len(prefix):] for entry in env if entry.startswith(prefix)), ""
    )


def remove_quotes(text: str) -> str:
    """Remove quote pairs; a quote with no partner later on is kept."""
    result = []
    quote = ""
    for index, char in enumerate(text):
        if char in _QUOTES and not quote:
            if char in text[index + 1:]:
                quote = char
            else:
                result.append(char)
        elif char == quote:
            quote = ""
        else:
            result.append(char)
    return "".join(result)


def _exit_code_text(code: int) -> str:
    return str(code) if code >= 0 else ""


def expand_arg(arg: str, env: Sequence[str], code: int) -> str:
    """Expand ``$NAME`` and ``$?`` outside single quotes and drop the quotes."""
    result = []
    quote = ""
    index = 0
    while index < len(arg):
        char = arg[index]
        if char in _QUOTES and not quote:
            quote = char
            index += 1
        elif char == quote:
            quote = ""
            index += 1
        elif char == "$" and quote != "'":
            index += 1
            following = arg[index:index + 1]
            if following == "?":
                result.append(_exit_code_text(code))
                index += 1
            elif not is_var_char(following):
                result.append("$")
            else:
                start = index
                while index < len(arg) and is_var_char(arg[index]):
                    index += 1
                result.append(env_val(arg[start:index], env))
        else:
            result.append(char)
            index += 1
    return "".join(result)


def expand_args(args: Sequence[str], env: Sequence[str], code: int) -> list[str]:
    return [remove_quotes(expand_arg(arg, env, code)) for arg in args]


def expand_commands(
    commands: Sequence[Command], env: Sequence[str] | None, code: int
) -> None:
    """Expand the arguments of every command in place."""
    if env is None:
        return
    for command in commands:
        if command.args:
            command.args = expand_args(command.args, env, code)