"""Change events and the channel that carries them from watcher to main loop."""

import queue
from dataclasses import dataclass, field
from pathlib import Path


class ChannelClosed(Exception):
    """Raised by EventChannel.recv() once the channel is closed and drained."""


@dataclass(frozen=True)
class EventPath:
    """A path attached to a change event."""

    path: Path
    """Affected path (absolute for watchdog events)."""

    is_dir: bool | None = None
    """Whether the path is a directory; None when the backend cannot tell."""


@dataclass(frozen=True)
class ChangeEvent:
    """A filesystem change notification.

    `kind` is opaque to the filter, debouncer and runner. Events without paths
    (rescans and the like) are always relevant.
    """

    kind: str
    paths: tuple[EventPath, ...] = field(default_factory=tuple)

    @classmethod
    def for_path(cls, kind: str, path: str | Path, is_dir: bool | None = None) -> "ChangeEvent":
        """Build a single-path event."""
        return cls(kind=kind, paths=(EventPath(Path(path), is_dir),))

    def describe(self) -> str:
        if not self.paths:
            return self.kind
        return f"{self.kind}: {', '.join(str(p.path) for p in self.paths)}"


_CLOSED = object()


class EventChannel:
    """Unbounded blocking channel of ChangeEvents.

    Any thread may send; only the main loop receives.
    """

    def __init__(self) -> None:
        self._queue: queue.Queue = queue.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, event: ChangeEvent) -> None:
        if self._closed:
            raise ChannelClosed("send on closed channel")
        self._queue.put(event)

    def recv(self) -> ChangeEvent:
        """Block until an event arrives.

        Raises:
            ChannelClosed: If the channel was closed and no events remain
        """
        item = self._queue.get()
        if item is _CLOSED:
            # Leave the marker for any later receive
            self._queue.put(_CLOSED)
            raise ChannelClosed("event channel closed")
        return item

    def try_recv(self) -> ChangeEvent | None:
        """Return the next buffered event, or None if nothing is buffered."""
        try:
            item = self._queue.get_nowait()
        except queue.Empty:
            return None
        if item is _CLOSED:
            self._queue.put(_CLOSED)
            return None
        return item

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._queue.put(_CLOSED)
