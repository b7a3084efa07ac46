"""Abstract watcher protocol for filesystem event sources."""

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol


@dataclass
class WatchConfig:
    """Configuration for one watched root."""

    path: Path
    """File or directory to watch."""

    recursive: bool = True
    """Watch subdirectories too."""


class EventSourceWatcher(Protocol):
    """Protocol for watcher implementations feeding an EventChannel."""

    def add_watch(self, config: WatchConfig) -> None:
        """Add a watch configuration."""
        ...

    def start(self) -> None:
        """Start watching."""
        ...

    def stop(self) -> None:
        """Stop watching and close the channel."""
        ...
