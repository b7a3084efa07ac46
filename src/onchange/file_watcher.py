"""Filesystem event source using watchdog."""

import errno
import logging
import os
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from onchange_core.events import ChangeEvent, ChannelClosed, EventChannel, EventPath
from onchange_core.watchers import EventSourceWatcher, WatchConfig

logger = logging.getLogger(__name__)

# Access notifications, not changes
_READ_ONLY_KINDS = frozenset({"opened", "closed_no_write"})


def to_change_event(event: FileSystemEvent) -> ChangeEvent:
    """Convert a watchdog event to a ChangeEvent (moves carry both paths)."""
    is_dir = bool(event.is_directory)
    paths = [EventPath(Path(os.fsdecode(event.src_path)), is_dir)]
    dest = getattr(event, "dest_path", "")
    if dest:
        paths.append(EventPath(Path(os.fsdecode(dest)), is_dir))
    return ChangeEvent(kind=event.event_type, paths=tuple(paths))


class _ChannelHandler(FileSystemEventHandler):
    """Forwards every change to the channel; filtering happens downstream."""

    def __init__(self, channel: EventChannel):
        self.channel = channel

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.event_type in _READ_ONLY_KINDS:
            return
        try:
            self.channel.send(to_change_event(event))
        except ChannelClosed:
            logger.debug(f"Dropping {event.event_type} event after shutdown")


class WatchdogWatcher(EventSourceWatcher):
    """Watches paths with a watchdog Observer and feeds an EventChannel."""

    def __init__(self, channel: EventChannel, observer=None):
        """Initialize watcher.

        Args:
            channel: Channel to send change events on
            observer: Observer to schedule watches on (defaults to watchdog's Observer)
        """
        self.channel = channel
        self.observer = observer or Observer()
        self.handler = _ChannelHandler(channel)
        self.watched: list[Path] = []

    def add_watch(self, config: WatchConfig) -> None:
        """Add a watched path.

        Raises:
            FileNotFoundError: If the path does not exist
        """
        if not config.path.exists():
            raise FileNotFoundError(errno.ENOENT, "invalid path", str(config.path))
        path = config.path.resolve()
        self.observer.schedule(self.handler, str(path), recursive=config.recursive)
        self.watched.append(path)
        logger.info(f"Watching {path}")

    def start(self) -> None:
        self.observer.start()
        logger.info(f"Started watching {len(self.watched)} path(s)")

    def stop(self) -> None:
        if self.observer.is_alive():
            self.observer.stop()
            self.observer.join(timeout=2.0)
            logger.info("Stopped watching")
        self.channel.close()
