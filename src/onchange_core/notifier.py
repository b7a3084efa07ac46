"""Where onchange tells the user about triggers and failed runs.

Failures in the watch loop are recoverable, so they are reported rather than
raised. The runner and controller hand them to a notifier; the CLI prints
them, an embedding host can collect them instead.
"""

import logging
import sys
from typing import Protocol, TextIO


class Notifier(Protocol):
    """Receives user-facing reports from the runner and controller."""

    def info(self, message: str) -> None:
        """A trigger or a command launch (verbose mode)."""
        ...

    def warning(self, message: str) -> None:
        """Something odd that does not stop the loop."""
        ...

    def error(self, message: str) -> None:
        """A run that could not be started or stopped."""
        ...


class NoOpNotifier:
    """Drops every report; used when nobody is watching the output."""

    def info(self, msg: str) -> None:
        pass

    def warning(self, msg: str) -> None:
        pass

    def error(self, msg: str) -> None:
        pass


class LoggingNotifier:
    """Forwards reports to a logger (the "onchange" logger by default)."""

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or logging.getLogger("onchange")

    def info(self, msg: str) -> None:
        self.logger.info(msg)

    def warning(self, msg: str) -> None:
        self.logger.warning(msg)

    def error(self, msg: str) -> None:
        self.logger.error(msg)


class ConsoleNotifier:
    """Writes '*** message' lines to stderr, keeping stdout for the command."""

    def __init__(self, stream: TextIO | None = None):
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        # Resolved lazily so pytest's capsys sees the writes
        return self._stream or sys.stderr

    def _write(self, msg: str) -> None:
        print(f"*** {msg}", file=self.stream, flush=True)

    def info(self, msg: str) -> None:
        self._write(msg)

    def warning(self, msg: str) -> None:
        self._write(f"warning: {msg}")

    def error(self, msg: str) -> None:
        self._write(f"error: {msg}")
