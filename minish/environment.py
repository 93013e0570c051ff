"""Shell variables: the ordered variable list and the exported string form."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Iterable, Iterator

from .textutils import atoi, atoi_long

SHLVL_LIMIT = 1000


@dataclass
class EnvVar:
    """One variable; ``exported`` is False for names given without ``=``."""

    key: str
    value: str = ""
    exported: bool = True

    def __str__(self) -> str:
        return f"{self.key}={self.value}" if self.exported else self.key


def parse_entry(text: str) -> EnvVar:
    """Build a variable from ``KEY=VALUE`` or a bare ``KEY``."""
    key, sep, value = text.partition("=")
    if sep:
        return EnvVar(key, value, True)
    return EnvVar(text, "", False)


@dataclass
class Environment:
    """Variables in the order they were defined."""

    variables: list[EnvVar] = field(default_factory=list)

    def __iter__(self) -> Iterator[EnvVar]:
        return iter(self.variables)

    def __len__(self) -> int:
        return len(self.variables)

    def __contains__(self, key: object) -> bool:
        return self.find(key) is not None  # type: ignore[arg-type]

    def find(self, key: str) -> EnvVar | None:
        return next((var for var in self.variables if var.key == key), None)

    def get(self, key: str) -> str | None:
        var = self.find(key)
        return var.value if var is not None else None

    def change(self, key: str, value: str, exported: bool) -> None:
        """Update an existing variable; unknown keys are left alone."""
        var = self.find(key)
        if var is not None:
            var.value = value
            var.exported = exported

    def add_if_missing(self, key: str, value: str, exported: bool) -> None:
        if self.find(key) is None:
            self.variables.append(EnvVar(key, value, exported))

    def remove(self, key: str) -> None:
        var = self.find(key)
        if var is not None:
            self.variables.remove(var)

    def reset_status(self, status: int) -> bool:
        """Store ``status`` in the ``?`` variable if it exists."""
        var = self.find("?")
        if var is None:
            return False
        var.value = str(status)
        return True

    def to_strings(self) -> list[str]:
        return [str(var) for var in self.variables]


def env_from_strings(strings: Iterable[str]) -> Environment:
    return Environment([parse_entry(text) for text in strings])


def find_var_index(strings: list[str], name: str) -> int | None:
    """Index of the first ``name=...`` entry, or None."""
    prefix = f"{name}="
    return next(
        (index for index, entry in enumerate(strings) if entry.startswith(prefix)),
        None,
    )


def remove_var(strings: list[str], name: str) -> list[str]:
    index = find_var_index(strings, name)
    if index is None:
        return list(strings)
    return strings[:index] + strings[index + 1:]


def add_variable(strings: list[str], entry: str) -> list[str]:
    return [*strings, entry]


def drop_matching(strings: list[str], arg: str, found: int) -> list[str]:
    """Remove ``arg[:found]`` if any entry shares the first ``found + 1`` chars."""
    width = found + 1
    if any(entry[:width] == arg[:width] for entry in strings):
        return remove_var(strings, arg[:found])
    return list(strings)


def format_declaration(entry: str) -> str:
    """Render an entry the way ``export`` lists it."""
    name, sep, value = entry.partition("=")
    if not sep:
        return f"declare -x {entry}"
    if value.startswith('"') and value.endswith('"'):
        value = value[1:-1]
    return f'declare -x {name}="{value}"'


def sorted_declarations(strings: Iterable[str]) -> list[str]:
    return [
        format_declaration(entry)
        for entry in sorted(strings)
        if not entry.startswith("_=")
    ]


def shell_level(env: Environment) -> int:
    text = env.get("SHLVL")
    if text is None:
        return 1
    return max(atoi(text), 0)


def update_shlvl(env: Environment) -> None:
    """Raise SHLVL by one; negative levels drop to zero."""
    text = env.get("SHLVL")
    if text is None:
        return
    level = atoi(text)
    level = 0 if level < 0 else level + 1
    env.change("SHLVL", str(level), True)


def check_large_level(env: Environment) -> None:
    """Reset SHLVL to 1 with a warning when it exceeds the limit."""
    text = env.get("SHLVL")
    if text is None:
        return
    try:
        level = atoi_long(text)
    except OverflowError:
        level = 0
    if level > SHLVL_LIMIT:
        sys.stderr.write(
            f"minishell: warning: shell level ({text}) too high, resetting to 1\n"
        )
        env.change("SHLVL", "1", True)