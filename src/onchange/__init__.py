"""onchange: run a command when watched files change."""

__version__ = "0.1.0"

# Public API
from onchange.controller import WatchController
from onchange_core.config import Settings

__all__ = [
    "__version__",
    "WatchController",
    "Settings",
]
