"""The running shell's state: variables, open redirections and history."""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping
from contextlib import suppress
from dataclasses import dataclass, field
from typing import Any

from .environment import Environment, env_from_strings, update_shlvl
from .status import ShellStatus


@dataclass
class Shell:
    """Everything one shell session carries between command lines."""

    env: Environment
    env_arr: list[str]
    input_fd: int | None = None
    output_fd: int | None = None
    status: int = 0
    exit_status: ShellStatus = field(default_factory=ShellStatus)
    commands: list[Any] = field(default_factory=list)
    pid: int | None = None
    history: list[str] = field(default_factory=list)

    def __enter__(self) -> Shell:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def add_history(self, line: str) -> None:
        if line:
            self.history.append(line)

    def cleanup_redirections(self) -> None:
        """Close any redirection descriptors still open."""
        for fd in (self.input_fd, self.output_fd):
            if fd is not None:
                with suppress(OSError):
                    os.close(fd)
        self.input_fd = None
        self.output_fd = None

    def close(self) -> None:
        self.cleanup_redirections()
        self.commands.clear()
        self.history.clear()


def create_shell(environ: Mapping[str, str] | Iterable[str]) -> Shell:
    """Start a shell from a mapping or from ``KEY=VALUE`` strings.

    The exported strings are taken before SHLVL is raised, so only the
    variable list sees the new level.
    """
    if isinstance(environ, Mapping):
        entries = [f"{key}={value}" for key, value in environ.items()]
    else:
        entries = list(environ)
    env = env_from_strings(entries)
    shell = Shell(env=env, env_arr=env.to_strings())
    update_shlvl(env)
    return shell