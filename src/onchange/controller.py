"""Main loop wiring: watcher -> debouncer -> runner."""

import logging

from onchange.file_watcher import WatchdogWatcher
from onchange_core.config import Settings
from onchange_core.debounce import Debouncer
from onchange_core.events import ChangeEvent, ChannelClosed, EventChannel
from onchange_core.notifier import NoOpNotifier, Notifier
from onchange_core.runner import CommandRunner
from onchange_core.watchers import EventSourceWatcher, WatchConfig

logger = logging.getLogger(__name__)


class WatchController:
    """Owns the filter, debouncer and runner, and drives them from one thread.

    Triggers are handled strictly one at a time: the debouncer is not consulted
    again until the runner has returned.
    """

    def __init__(
        self,
        settings: Settings,
        notifier: Notifier | None = None,
        watcher: EventSourceWatcher | None = None,
        channel: EventChannel | None = None,
        runner: CommandRunner | None = None,
    ):
        """Initialize controller.

        Configuration errors surface here, before anything is watched.

        Args:
            settings: Session settings
            notifier: Optional notification handler (defaults to NoOpNotifier - silent)
            watcher: Event source (defaults to a WatchdogWatcher on `channel`)
            channel: Channel shared by watcher and debouncer
            runner: Command runner (defaults to one built from settings)

        Raises:
            ValueError: If settings are invalid
            FilterBuildError: If a filter or ignore pattern is malformed
            FileNotFoundError: If a watch path does not exist
        """
        settings.validate()
        self.settings = settings
        self.notifier = notifier or NoOpNotifier()
        self.path_filter = settings.build_filter()
        self.channel = channel or EventChannel()
        self.watcher = watcher or WatchdogWatcher(self.channel)
        for path in settings.paths:
            self.watcher.add_watch(WatchConfig(path=path))
        self.debouncer = Debouncer(self.channel, self.path_filter, settings.debounce_seconds)
        self.runner = runner or CommandRunner(
            restart=settings.restart,
            clear=settings.clear,
            verbose=settings.verbose,
            notifier=self.notifier,
        )
        self._started = False

    def start(self) -> None:
        if self._started:
            return
        self.watcher.start()
        self._started = True

    def stop(self) -> None:
        if not self._started:
            return
        self._started = False
        try:
            self.watcher.stop()
        finally:
            self.runner.stop()

    def step(self) -> ChangeEvent:
        """Wait for one trigger and run the command for it."""
        trigger = self.debouncer.next_trigger()
        if self.settings.verbose:
            self.notifier.info(trigger.describe())
        self.runner.run(self.settings.command)
        return trigger

    def run_forever(self) -> None:
        """Run until the event source goes away.

        Raises:
            ChannelClosed: When the watcher stops delivering events
        """
        self.start()
        try:
            while True:
                self.step()
        except ChannelClosed:
            logger.debug("Event source closed, stopping")
            self.notifier.error("Stopped receiving filesystem events")
            raise
        finally:
            self.stop()
