"""Path filtering for change events.

Rules follow .gitignore semantics (via pathspec's GitIgnoreSpec):

- the last rule matching a path decides the outcome
- a leading ``!`` negates a rule, reinstating paths an earlier rule matched
- a trailing ``/`` makes a rule match directories (and everything beneath them) only
- rules are evaluated relative to their anchor directory; patterns without a
  ``/`` match at any depth

A filter is built once with PathFilterBuilder and is immutable afterwards.
Building is the only step that can fail; matching never does.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Protocol

from pathspec import GitIgnoreSpec

from onchange_core.events import ChangeEvent

logger = logging.getLogger(__name__)

# Always ignored: compiled Python, vim swap files, and anything in a dot-directory
DEFAULT_IGNORES = ("*.pyc", "*.swp", ".*/")


class FilterBuildError(ValueError):
    """A rule pattern or extension could not be compiled."""


class Filterer(Protocol):
    """Decides whether a change event should trigger the command."""

    def is_relevant(self, event: ChangeEvent) -> bool:
        """Return True if the event should be acted on."""
        ...


class RuleSense(Enum):
    IGNORE = "ignore"
    FILTER = "filter"


class Match(Enum):
    """Outcome of matching a path against an ordered rule list."""

    NONE = "none"
    IGNORE = "ignore"
    WHITELIST = "whitelist"

    @property
    def is_ignore(self) -> bool:
        return self is Match.IGNORE


class Rejection(Enum):
    """Why a path was excluded."""

    IGNORED = "matched ignore rule"
    NOT_FILTERED = "no matching filter rule"
    EXTENSION = "extension not in list"


@dataclass(frozen=True)
class Rule:
    """A single glob rule as given by the user."""

    pattern: str
    sense: RuleSense
    anchor: Path | None = None
    """Directory the rule is relative to; None means the filter origin."""


@dataclass(frozen=True)
class _CompiledRule:
    rule: Rule
    anchor: Path
    negated: bool
    spec: GitIgnoreSpec

    def relative(self, path: Path) -> str:
        if path.is_absolute():
            try:
                return path.relative_to(self.anchor).as_posix()
            except ValueError:
                return path.as_posix().lstrip("/")
        return path.as_posix()

    def matches(self, path: Path, is_dir: bool) -> bool:
        candidate = self.relative(path)
        if is_dir:
            candidate += "/"
        return self.spec.match_file(candidate)


class RuleMatcher:
    """An ordered, compiled list of rules of one sense."""

    def __init__(self, rules: Iterable[_CompiledRule] = ()):
        self._rules = tuple(rules)

    def __len__(self) -> int:
        return len(self._rules)

    @property
    def num_ignores(self) -> int:
        """Number of plain (non-negated) rules."""
        return sum(1 for r in self._rules if not r.negated)

    @property
    def num_whitelists(self) -> int:
        """Number of negated rules."""
        return sum(1 for r in self._rules if r.negated)

    @property
    def rules(self) -> tuple[Rule, ...]:
        return tuple(r.rule for r in self._rules)

    def matched(self, path: str | Path, is_dir: bool = False) -> Match:
        """Match a path against every rule; the last matching rule wins."""
        path = Path(path)
        result = Match.NONE
        for compiled in self._rules:
            if compiled.matches(path, is_dir):
                result = Match.WHITELIST if compiled.negated else Match.IGNORE
        return result


def _check_syntax(pattern: str) -> None:
    """Reject glob syntax that would otherwise be taken literally.

    Raises:
        ValueError: For a dangling escape, an unclosed character class, more
            than two consecutive stars, or a `**` that is not a whole path
            component
    """
    i, n = 0, len(pattern)
    while i < n:
        c = pattern[i]
        if c == "\\":
            if i + 1 == n:
                raise ValueError("dangling escape '\\'")
            i += 2
            continue
        if c == "[":
            j = i + 1
            if j < n and pattern[j] in "!^":
                j += 1
            # A leading "]" is part of the class
            if j < n and pattern[j] == "]":
                j += 1
            while j < n and pattern[j] != "]":
                j += 2 if pattern[j] == "\\" else 1
            if j >= n:
                raise ValueError("unclosed character class; missing ']'")
            i = j + 1
            continue
        if c == "*":
            j = i
            while j < n and pattern[j] == "*":
                j += 1
            if j - i > 2:
                raise ValueError("invalid use of **; at most two consecutive '*'")
            if j - i == 2:
                starts_component = i == 0 or pattern[i - 1] == "/"
                ends_component = j == n or pattern[j] == "/"
                if not (starts_component and ends_component):
                    raise ValueError("invalid use of **; must be one path component")
            i = j
            continue
        i += 1


def _extension(path: Path) -> str | None:
    """Text after the last dot of the file name; None when there is no dot.

    A leading dot does not start an extension (".bashrc"), but a trailing one
    gives an empty extension ("foo.").
    """
    stem, dot, ext = path.name.rpartition(".")
    if not dot or not stem:
        return None
    return ext


def _compile(rule: Rule, origin: Path) -> _CompiledRule | None:
    line = rule.pattern
    if not line.strip() or line.startswith("#"):
        return None

    negated = line.startswith("!")
    body = line[1:] if negated else line
    if not body.strip():
        raise FilterBuildError(f"Invalid {rule.sense.value} pattern {rule.pattern!r}: nothing to negate")

    try:
        _check_syntax(body)
        spec = GitIgnoreSpec.from_lines([body])
    except ValueError as e:
        raise FilterBuildError(f"Invalid {rule.sense.value} pattern {rule.pattern!r}: {e}") from e

    anchor = origin if rule.anchor is None else (origin / rule.anchor).resolve()
    return _CompiledRule(rule=rule, anchor=anchor, negated=negated, spec=spec)


class PathFilterBuilder:
    """Accumulates rules and extensions, then compiles them into a PathFilter."""

    def __init__(self, origin: str | Path = "."):
        self.origin = Path(origin).resolve()
        self._filters: list[Rule] = []
        self._ignores: list[Rule] = []
        self._extensions: list[str] = []

    def add_filter(self, pattern: str, anchor: str | Path | None = None) -> "PathFilterBuilder":
        logger.debug(f"Adding filter {pattern!r}")
        self._filters.append(Rule(pattern, RuleSense.FILTER, Path(anchor) if anchor else None))
        return self

    def add_ignore(self, pattern: str, anchor: str | Path | None = None) -> "PathFilterBuilder":
        logger.debug(f"Adding ignore {pattern!r}")
        self._ignores.append(Rule(pattern, RuleSense.IGNORE, Path(anchor) if anchor else None))
        return self

    def add_extension(self, extension: str) -> "PathFilterBuilder":
        ext = extension.strip().removeprefix(".")
        if not ext:
            raise FilterBuildError(f"Invalid extension {extension!r}")
        self._extensions.append(ext)
        return self

    def build(self) -> "PathFilter":
        """Compile all rules.

        Raises:
            FilterBuildError: If any pattern is malformed
        """
        filters = RuleMatcher(c for c in (_compile(r, self.origin) for r in self._filters) if c)
        ignores = RuleMatcher(c for c in (_compile(r, self.origin) for r in self._ignores) if c)
        extensions = frozenset(self._extensions)
        logger.debug(
            f"Path filter built: {filters.num_ignores} filters ({filters.num_whitelists} negated), "
            f"{ignores.num_ignores} ignores ({ignores.num_whitelists} negated), "
            f"{len(extensions)} extensions"
        )
        return PathFilter(ignores=ignores, filters=filters, extensions=extensions)


@dataclass(frozen=True)
class PathFilter:
    """Compiled ignore rules, filter rules and extension set."""

    ignores: RuleMatcher
    filters: RuleMatcher
    extensions: frozenset[str] = frozenset()

    @classmethod
    def from_options(
        cls,
        origin: str | Path = ".",
        filters: Iterable[str] = (),
        ignores: Iterable[str] = (),
        extensions: Iterable[str] = (),
    ) -> "PathFilter":
        """Build a filter from command-line style options, including the default ignores.

        Extension entries may be comma-separated lists ("js,css").
        """
        builder = PathFilterBuilder(origin)
        for pattern in DEFAULT_IGNORES:
            builder.add_ignore(pattern)
        for entry in extensions:
            for ext in entry.split(","):
                if ext.strip():
                    builder.add_extension(ext)
        for pattern in filters:
            builder.add_filter(pattern)
        for pattern in ignores:
            builder.add_ignore(pattern)
        return builder.build()

    def check_path(self, path: str | Path, is_dir: bool = False) -> Rejection | None:
        """Return why the path is excluded, or None if it passes."""
        path = Path(path)

        if self.ignores.matched(path, is_dir).is_ignore:
            return Rejection.IGNORED

        if self.filters.num_ignores > 0 and not self.filters.matched(path, is_dir).is_ignore:
            return Rejection.NOT_FILTERED

        if self.extensions:
            if is_dir:
                # Directories are exempt from the extension check
                return None
            ext = _extension(path)
            # No extension is inconclusive, only a mismatch excludes
            if ext is not None and ext not in self.extensions:
                return Rejection.EXTENSION

        return None

    def is_relevant(self, event: ChangeEvent) -> bool:
        for event_path in event.paths:
            reason = self.check_path(event_path.path, bool(event_path.is_dir))
            if reason is not None:
                logger.debug(f"Ignoring {event_path.path} ({reason.value})")
                return False
        return True
