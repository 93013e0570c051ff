"""Whitespace tests and the integer parsing rules used by the shell."""

from __future__ import annotations

import re

SPACE_CHARS = " \t\n\v\f\r"
LONG_MAX = 2**63 - 1
LONG_MIN = -(2**63)

_DIGITS = re.compile(r"[0-9]*")
_INT_BITS = 32


def is_space(char: str) -> bool:
    """Return True if ``char`` is a single whitespace character."""
    return len(char) == 1 and char in SPACE_CHARS


def _sign_and_digits(text: str) -> tuple[int, str]:
    rest = text.lstrip(SPACE_CHARS)
    sign = 1
    if rest[:1] == "+":
        rest = rest[1:]
    elif rest[:1] == "-":
        sign = -1
        rest = rest[1:]
    match = _DIGITS.match(rest)
    return sign, match.group() if match else ""


def atoi(text: str) -> int:
    """Parse a leading integer the way a C ``int`` conversion would.

    Leading whitespace and one sign are accepted; parsing stops at the
    first non-digit. The result wraps to a signed 32-bit value.
    """
    sign, digits = _sign_and_digits(text)
    magnitude = int(digits) if digits else 0
    mask = (1 << _INT_BITS) - 1
    value = (magnitude * sign) & mask
    if value & (1 << (_INT_BITS - 1)):
        value -= 1 << _INT_BITS
    return value


def atoi_long(text: str) -> int:
    """Parse a leading integer into a signed 64-bit range.

    Raises OverflowError when the digits do not fit.
    """
    sign, digits = _sign_and_digits(text)
    magnitude = int(digits) if digits else 0
    limit = LONG_MAX if sign > 0 else LONG_MAX + 1
    if magnitude > limit:
        raise OverflowError(f"numeric value out of range: {text!r}")
    return sign * magnitude