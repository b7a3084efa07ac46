"""Lifecycle of the spawned command.

CommandRunner is driven from the main loop thread only; the tracked child
handle is never shared, so it needs no lock. Any second caller of run() would
have to add one.
"""

import logging
import os
import signal
import subprocess
import sys
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol, TextIO

from onchange_core.notifier import NoOpNotifier, Notifier

logger = logging.getLogger(__name__)

CLEAR_SEQUENCE = "\x1b[2J\x1b[3J\x1b[H"


class Terminal(Protocol):
    """Terminal collaborator used before each run."""

    def clear(self) -> None:
        """Clear the screen."""
        ...


class AnsiTerminal:
    """Clears the screen with ANSI escape codes."""

    def __init__(self, stream: TextIO | None = None):
        self._stream = stream

    def clear(self) -> None:
        stream = self._stream or sys.stdout
        stream.write(CLEAR_SEQUENCE)
        stream.flush()


def spawn_shell(command: str) -> subprocess.Popen:
    """Start a command through the platform shell without waiting for it."""
    if os.name == "posix":
        # Own session, so termination reaches the shell's children too
        return subprocess.Popen(command, shell=True, start_new_session=True)
    return subprocess.Popen(command, shell=True)


def terminate_child(child: subprocess.Popen) -> None:
    """Ask a spawned command to stop and wait until it has exited.

    Raises:
        OSError: If the termination request could not be delivered
    """
    if child.poll() is not None:
        return
    try:
        if os.name == "posix":
            os.killpg(child.pid, signal.SIGTERM)
        else:
            child.terminate()
    except ProcessLookupError:
        # Exited between poll() and the signal
        pass
    child.wait()


@dataclass
class RunnerState:
    """Launch flags plus the child tracked in restart mode."""

    restart: bool = False
    clear: bool = False
    verbose: bool = False
    child: subprocess.Popen | None = None

    @property
    def running(self) -> bool:
        return self.child is not None


class CommandRunner:
    """Runs the command once per trigger.

    In restart mode the previous child is terminated (and waited for) before the
    next one is spawned, so at most one instance is ever alive. Without restart
    mode children are not tracked and may overlap.
    """

    def __init__(
        self,
        restart: bool = False,
        clear: bool = False,
        verbose: bool = False,
        *,
        spawn: Callable[[str], subprocess.Popen] = spawn_shell,
        terminate: Callable[[subprocess.Popen], None] = terminate_child,
        terminal: Terminal | None = None,
        notifier: Notifier | None = None,
    ):
        """Initialize runner.

        Args:
            restart: Terminate a still-running previous command before each run
            clear: Clear the terminal before each run
            verbose: Report each launch through the notifier
            spawn: Process spawn primitive
            terminate: Terminate-and-wait primitive for a spawned child
            terminal: Terminal used for clearing (defaults to AnsiTerminal)
            notifier: Where failures are reported (defaults to NoOpNotifier)
        """
        self.state = RunnerState(restart=restart, clear=clear, verbose=verbose)
        self._spawn = spawn
        self._terminate = terminate
        self.terminal = terminal if terminal is not None else AnsiTerminal()
        self.notifier = notifier or NoOpNotifier()

    @property
    def running(self) -> bool:
        return self.state.running

    def run(self, command: str) -> bool:
        """Run the command for one trigger.

        Returns:
            True if a new child was spawned
        """
        if self.state.restart and self.state.child is not None:
            if not self._stop_child():
                # Never risk two live instances; retried on the next trigger
                return False

        if self.state.clear:
            self.terminal.clear()

        if self.state.verbose:
            self.notifier.info(f"Running: {command}")

        try:
            child = self._spawn(command)
        except (OSError, subprocess.SubprocessError) as e:
            logger.debug(f"Failed to spawn '{command}': {e}")
            self.notifier.error(f"Failed to run '{command}': {e}")
            return False

        logger.debug(f"Spawned '{command}' (pid {child.pid})")
        if self.state.restart:
            self.state.child = child
        return True

    def _stop_child(self) -> bool:
        child = self.state.child
        logger.debug(f"Terminating previous command (pid {child.pid})")
        try:
            self._terminate(child)
        except OSError as e:
            logger.debug(f"Failed to terminate pid {child.pid}: {e}")
            self.notifier.error(f"Could not stop previous command (pid {child.pid}): {e}")
            return False
        self.state.child = None
        return True

    def stop(self) -> None:
        """Terminate the tracked child, if any. Failures are reported, not raised."""
        if self.state.child is not None:
            self._stop_child()
