"""The interactive prompt loop and the command entry point."""

from __future__ import annotations

import os
import sys
from typing import Callable, Sequence

from .builtins import ShellExit
from .executor import process_input
from .state import Shell, create_shell
from .status import install_prompt_signals

PROMPT = "minishell$ "

ReadLine = Callable[[str], "str | None"]


def _read_line(prompt: str) -> str | None:
    try:
        return input(prompt)
    except EOFError:
        return None


def main_loop(shell: Shell, read_line: ReadLine | None = None) -> int:
    """Read and run lines until end of input or ``exit``; return the code."""
    reader = read_line or _read_line
    while True:
        try:
            line = reader(PROMPT)
        except KeyboardInterrupt:
            continue
        if line is None:
            sys.stdout.write("exit\n")
            sys.stdout.flush()
            return shell.exit_status.code
        if not line:
            continue
        try:
            process_input(shell, line)
        except ShellExit as exc:
            return exc.code
        except KeyboardInterrupt:
            continue


def main(argv: Sequence[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else list(argv)
    if args:
        sys.stderr.write("no arguments allowed\n")
        return 1
    with create_shell(os.environ) as shell:
        install_prompt_signals(shell.exit_status)
        return main_loop(shell)


if __name__ == "__main__":
    sys.exit(main())