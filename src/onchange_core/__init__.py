"""onchange-core: filtering, debouncing and command running for onchange."""

__version__ = "0.1.0"

from onchange_core.config import Settings, load_settings
from onchange_core.debounce import DEFAULT_DEBOUNCE_MS, Debouncer
from onchange_core.events import ChangeEvent, ChannelClosed, EventChannel, EventPath
from onchange_core.filters import (
    DEFAULT_IGNORES,
    Filterer,
    FilterBuildError,
    PathFilter,
    PathFilterBuilder,
    Rejection,
)
from onchange_core.runner import CommandRunner, RunnerState

__all__ = [
    "__version__",
    # Events
    "ChangeEvent",
    "EventPath",
    "EventChannel",
    "ChannelClosed",
    # Filtering
    "Filterer",
    "PathFilter",
    "PathFilterBuilder",
    "FilterBuildError",
    "Rejection",
    "DEFAULT_IGNORES",
    # Pipeline
    "Debouncer",
    "DEFAULT_DEBOUNCE_MS",
    "CommandRunner",
    "RunnerState",
    # Config
    "Settings",
    "load_settings",
]
