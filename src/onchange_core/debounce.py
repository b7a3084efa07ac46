"""Coalesce bursts of change events into single triggers."""

import logging
import time
from collections.abc import Callable

from onchange_core.events import ChangeEvent, EventChannel
from onchange_core.filters import Filterer

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_MS = 250


class Debouncer:
    """Turns the raw event stream into one trigger per burst.

    The quiescence window starts at the first relevant event and is not
    extended by later ones. Whatever is buffered when it ends is dropped as
    part of the same burst. Events arriving after that start a new burst.
    """

    def __init__(
        self,
        channel: EventChannel,
        filterer: Filterer,
        window: float = DEFAULT_DEBOUNCE_MS / 1000.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize debouncer.

        Args:
            channel: Channel the watcher sends raw events on
            filterer: Relevance check applied to each raw event
            window: Quiescence window in seconds
            sleep: Sleep function (injectable for tests)
        """
        if window < 0:
            raise ValueError("debounce window must not be negative")
        self.channel = channel
        self.filterer = filterer
        self.window = window
        self._sleep = sleep

    def next_trigger(self) -> ChangeEvent:
        """Block until the next burst of relevant events and return its first event.

        Raises:
            ChannelClosed: If the event source went away
        """
        while True:
            event = self.channel.recv()
            if not self.filterer.is_relevant(event):
                continue

            self._sleep(self.window)

            dropped = 0
            while self.channel.try_recv() is not None:
                dropped += 1
            if dropped:
                logger.debug(f"Coalesced {dropped} event(s) into trigger {event.describe()}")
            return event
