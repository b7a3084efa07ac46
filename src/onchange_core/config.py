"""Settings for a watch session, optionally loaded from a TOML file."""

import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from onchange_core.debounce import DEFAULT_DEBOUNCE_MS
from onchange_core.filters import PathFilter

logger = logging.getLogger(__name__)

_LIST_KEYS = ("paths", "extensions", "filters", "ignores")
_BOOL_KEYS = ("restart", "clear", "verbose")


@dataclass
class Settings:
    """Everything the controller needs to start watching."""

    command: str
    paths: list[Path] = field(default_factory=lambda: [Path(".")])
    extensions: list[str] = field(default_factory=list)
    filters: list[str] = field(default_factory=list)
    ignores: list[str] = field(default_factory=list)
    restart: bool = False
    clear: bool = False
    verbose: bool = False
    debounce_ms: int = DEFAULT_DEBOUNCE_MS
    origin: Path = field(default_factory=Path.cwd)
    """Directory filter and ignore rules are relative to."""

    def validate(self) -> None:
        """Raise ValueError for settings the watch loop cannot run with."""
        if not self.command.strip():
            raise ValueError("No command given")
        if self.debounce_ms <= 0:
            raise ValueError(f"Debounce must be positive, got {self.debounce_ms}ms")
        if not self.paths:
            raise ValueError("No paths to watch")

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000.0

    def build_filter(self) -> PathFilter:
        return PathFilter.from_options(
            origin=self.origin,
            filters=self.filters,
            ignores=self.ignores,
            extensions=self.extensions,
        )


def load_settings(path: str | Path) -> dict[str, object]:
    """Read the [watch] table of a TOML settings file.

    Args:
        path: Path to TOML file

    Returns:
        Keyword arguments for Settings (only the keys present in the file)

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file cannot be parsed or a value has the wrong type
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        with open(path, "rb") as f:
            raw = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"Failed to parse config file {path}: {e}") from e

    table = raw.get("watch", {})
    if not isinstance(table, dict):
        raise ValueError(f"{path}: [watch] must be a table")

    values: dict[str, object] = {}
    for key, value in table.items():
        if key == "command":
            if isinstance(value, list) and all(isinstance(v, str) for v in value):
                value = " ".join(value)
            elif not isinstance(value, str):
                raise ValueError(f"{path}: 'command' must be a string or list of strings")
            values["command"] = value
        elif key in _LIST_KEYS:
            if isinstance(value, str):
                value = [value]
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise ValueError(f"{path}: '{key}' must be a list of strings")
            if key == "paths":
                value = [path.parent / p for p in value]
            values[key] = value
        elif key in _BOOL_KEYS:
            if not isinstance(value, bool):
                raise ValueError(f"{path}: '{key}' must be true or false")
            values[key] = value
        elif key == "debounce_ms":
            if not isinstance(value, int) or isinstance(value, bool):
                raise ValueError(f"{path}: 'debounce_ms' must be an integer")
            values[key] = value
        else:
            logger.warning(f"{path}: ignoring unknown setting '{key}'")

    return values
