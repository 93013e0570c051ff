"""The shell's exit status word and its signal dispositions."""

from __future__ import annotations

import signal
import sys
from dataclasses import dataclass

SIGINT_FLAG_BIT = 1 << 8
HEREDOC_EXIT_BIT = 1 << 9
EXIT_STATUS_MASK = 0xFF
INTERRUPTED_STATUS = 130


@dataclass
class ShellStatus:
    """Holds the last exit status; the value 130 also marks an interrupt."""

    value: int = 0

    @property
    def code(self) -> int:
        """The exit status, limited to its low eight bits."""
        return self.value & EXIT_STATUS_MASK

    @code.setter
    def code(self, status: int) -> None:
        self.value = (self.value & ~EXIT_STATUS_MASK) | (status & EXIT_STATUS_MASK)

    @property
    def interrupted(self) -> bool:
        """True after an interrupt at the prompt that has not been cleared."""
        return self.value == INTERRUPTED_STATUS

    def mark_interrupted(self) -> None:
        self.value = INTERRUPTED_STATUS

    def clear_interrupt(self) -> bool:
        """Reset the status if it marks an interrupt; report whether it did."""
        if not self.interrupted:
            return False
        self.value = 0
        return True


def _set_quit(handler) -> None:
    quit_signal = getattr(signal, "SIGQUIT", None)
    if quit_signal is not None:
        signal.signal(quit_signal, handler)


def install_prompt_signals(status: ShellStatus) -> None:
    """Interrupts at the prompt mark ``status`` and abort the current line."""

    def _on_interrupt(signum, frame):
        status.mark_interrupted()
        sys.stdout.write("\n")
        sys.stdout.flush()
        raise KeyboardInterrupt

    signal.signal(signal.SIGINT, _on_interrupt)
    _set_quit(signal.SIG_IGN)


def child_signal_defaults() -> None:
    """Restore default interrupt and quit handling, as a child process needs."""
    signal.signal(signal.SIGINT, signal.SIG_DFL)
    _set_quit(signal.SIG_DFL)


def ignore_interactive_signals() -> None:
    """Ignore interrupt and quit while the shell waits for children."""
    signal.signal(signal.SIGINT, signal.SIG_IGN)
    _set_quit(signal.SIG_IGN)