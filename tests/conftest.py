"""Pytest configuration and fixtures."""

import logging
import sys
from pathlib import Path
from unittest.mock import Mock

import pytest

# Add src directory to Python path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from onchange_core.events import ChangeEvent, EventChannel  # noqa: E402


class RecordingNotifier:
    """Notifier that keeps every message for assertions."""

    def __init__(self):
        self.messages: list[tuple[str, str]] = []

    def info(self, msg: str) -> None:
        self.messages.append(("info", msg))

    def warning(self, msg: str) -> None:
        self.messages.append(("warning", msg))

    def error(self, msg: str) -> None:
        self.messages.append(("error", msg))

    def of_level(self, level: str) -> list[str]:
        return [m for lvl, m in self.messages if lvl == level]


class FakeWatcher:
    """In-memory event source; the test sends events on the channel itself."""

    def __init__(self, channel: EventChannel):
        self.channel = channel
        self.watches = []
        self.started = False
        self.stopped = False

    def add_watch(self, config) -> None:
        self.watches.append(config)

    def start(self) -> None:
        self.started = True

    def stop(self) -> None:
        self.stopped = True
        self.channel.close()


def make_child(pid: int = 1000) -> Mock:
    """A stand-in for subprocess.Popen."""
    child = Mock(name=f"child-{pid}")
    child.pid = pid
    child.poll.return_value = None
    return child


def modified(path: str, is_dir: bool = False) -> ChangeEvent:
    return ChangeEvent.for_path("modified", path, is_dir)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def channel():
    return EventChannel()


@pytest.fixture(autouse=True)
def reset_package_loggers():
    """Undo configure_logging() so handlers don't outlive capsys streams."""
    yield
    for name in ("onchange", "onchange_core"):
        logger = logging.getLogger(name)
        logger.setLevel(logging.NOTSET)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
